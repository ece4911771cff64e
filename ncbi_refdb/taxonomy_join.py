"""
Streaming joins of the translation table against the NCBI reference dumps.

The dumps are far larger than the set of genomes being annotated (the GI map
alone has hundreds of millions of lines), so none of them is ever loaded.
Each pass instead:

1. collects the keys it needs from the current state of the records,
2. streams the dump once, keeping only lines whose key is needed,
3. writes the resolved values back into the records.

Memory per pass is bounded by the number of distinct keys in the records,
not by the size of the dump. The passes must run in order: rank resolution
needs the taxon ids of pass 1 and name resolution the rank ids of pass 2.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Collection, Dict, List, Optional, Tuple

from tqdm import tqdm

from .config import MAX_REPORTED_MISSES
from .dump_parsers import (
    GI_TAXID_FORMAT,
    NAMES_FORMAT,
    NODES_FORMAT,
    DumpFormat,
    ParseMiss,
    parse_gi_taxid,
    parse_rank_id,
    parse_scientific_name,
)
from .records import UNRESOLVED, TranslationTable

logger = logging.getLogger(__name__)


@dataclass
class PassResult:
    """Outcome of one join pass."""
    name: str
    source: Path
    lines_read: int = 0
    needed: int = 0
    index_size: int = 0
    resolved: int = 0
    miss_count: int = 0
    misses: List[ParseMiss] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def add_miss(self, miss: ParseMiss) -> None:
        self.miss_count += 1
        if len(self.misses) < MAX_REPORTED_MISSES:
            self.misses.append(miss)


class TaxonomyJoinEngine:
    """Resolve taxon id, rank id and species name of every record in a table."""

    def __init__(self, table: TranslationTable, show_progress: bool = True):
        self.table = table
        self.show_progress = show_progress

    def _scan(self, name: str, path: Path, dump_format: DumpFormat, need: Collection[int],
              resolver: Callable) -> Tuple[Dict, PassResult]:
        """
        Stream one dump and index the resolved value of every needed key.

        A later line for the same key replaces an earlier one. I/O errors end
        the scan early; whatever was indexed up to that point is returned.
        """
        result = PassResult(name=name, source=Path(path), needed=len(need))
        index: Dict = {}

        try:
            with open(path, "r") as handle:
                lines = tqdm(handle, desc=f"Scanning {dump_format.name}", unit=" lines",
                             disable=not self.show_progress)
                for line_number, line in enumerate(lines, 1):
                    result.lines_read = line_number

                    key = dump_format.parse_key(line, line_number)
                    if key is None:
                        continue
                    if isinstance(key, ParseMiss):
                        result.add_miss(key)
                        continue
                    if key not in need:
                        continue

                    fields = dump_format.split_fields(line, line_number)
                    if isinstance(fields, ParseMiss):
                        result.add_miss(fields)
                        continue

                    value = resolver(key, fields, line_number)
                    if isinstance(value, ParseMiss):
                        result.add_miss(value)
                    elif value is not None:
                        index[key] = value
        except (OSError, UnicodeDecodeError) as e:
            result.error = str(e)
            logger.error(f"Error reading {dump_format.name} ({path}): {e}")

        result.index_size = len(index)
        if result.miss_count:
            logger.warning(f"{dump_format.name}: skipped {result.miss_count:,} malformed lines "
                           f"(first: {result.misses[0]})")
        return index, result

    def resolve_taxon_ids(self, path: Path) -> PassResult:
        """Pass 1: GI -> taxon id. The rank id starts out as the taxon id."""
        index, result = self._scan("taxon id", path, GI_TAXID_FORMAT, self.table.keys(), parse_gi_taxid)

        for record in self.table:
            taxon_id = index.get(record.genome_key)
            if taxon_id is None:
                continue
            record.taxon_id = taxon_id
            record.rank_id = taxon_id
            result.resolved += 1

        self._log(result)
        return result

    def resolve_rank_ids(self, path: Path) -> PassResult:
        """Pass 2: taxon id -> rank id, one hop up for "no rank" nodes."""
        need = self.table.distinct("taxon_id")
        index, result = self._scan("rank id", path, NODES_FORMAT, need, parse_rank_id)

        for record in self.table:
            if record.taxon_id == UNRESOLVED:
                continue
            record.rank_id = index.get(record.taxon_id, UNRESOLVED)
            if record.rank_id != UNRESOLVED:
                result.resolved += 1

        self._log(result)
        return result

    def resolve_species_names(self, path: Path) -> PassResult:
        """Pass 3: rank id -> scientific name; unmatched records keep their header species."""
        need = self.table.distinct("rank_id")
        index, result = self._scan("species name", path, NAMES_FORMAT, need, parse_scientific_name)

        for record in self.table:
            name = index.get(record.rank_id)
            if name is None:
                continue
            record.species = name
            result.resolved += 1

        self._log(result)
        return result

    def run(self, gi_taxid_path: Path, nodes_path: Path, names_path: Path) -> List[PassResult]:
        """Run the three passes in order."""
        return [
            self.resolve_taxon_ids(gi_taxid_path),
            self.resolve_rank_ids(nodes_path),
            self.resolve_species_names(names_path),
        ]

    def _log(self, result: PassResult) -> None:
        logger.info(
            f"{result.name}: {result.resolved:,} of {len(self.table):,} records resolved "
            f"({result.index_size:,} of {result.needed:,} keys found in {result.lines_read:,} lines)"
        )
