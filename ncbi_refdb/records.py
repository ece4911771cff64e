"""
Translation records: one per genome sequence kept in the merged FASTA.

A record is created from a FASTA header of the form

    >gi|123|ref|NC_000913.3|Escherichia coli str. K-12 substr. MG1655, complete genome

and is then enriched by the taxonomy join passes (taxon id, rank id and
scientific name) before being written to the translation table.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, KeysView, List, Optional, Set

from .config import BLOCK_SIZE

UNRESOLVED = -1

HEADER_DELIMITER = "|"
GI_FIELD = 1
DESCRIPTION_FIELD = 4


class HeaderParseError(ValueError):
    """FASTA header does not carry a GI and a description field."""


class DuplicateGenomeKeyError(KeyError):
    """A genome key is already present in the translation table."""


@dataclass
class TranslationRecord:
    """Taxonomic annotation of a single genome sequence."""
    genome_key: int
    length: int
    strain: str
    species: Optional[str] = None
    taxon_id: int = UNRESOLVED
    rank_id: int = UNRESOLVED

    def __post_init__(self):
        if self.species is None:
            self.species = self.strain

    def __setattr__(self, name, value):
        if name == "genome_key" and "genome_key" in self.__dict__:
            raise AttributeError("genome_key cannot be reassigned")
        super().__setattr__(name, value)

    @classmethod
    def from_fasta(cls, header: str, sequence: str) -> "TranslationRecord":
        """
        Build a record from a FASTA header and its sequence.

        The GI is the second '|' field; strain and species both start out as
        the fifth field cut at its first comma.

        Raises:
            HeaderParseError: fewer than five fields or a non-numeric GI
        """
        fields = header.split(HEADER_DELIMITER)
        if len(fields) <= DESCRIPTION_FIELD:
            raise HeaderParseError(f"expected at least {DESCRIPTION_FIELD + 1} fields: {header!r}")

        try:
            genome_key = int(fields[GI_FIELD].strip())
        except ValueError:
            raise HeaderParseError(f"non-numeric GI {fields[GI_FIELD]!r}: {header!r}") from None

        strain = fields[DESCRIPTION_FIELD].split(",")[0].strip()
        return cls(genome_key=genome_key, length=len(sequence), strain=strain)

    @property
    def is_resolved(self) -> bool:
        return self.taxon_id >= 0

    def block_count(self, block_size: int = BLOCK_SIZE) -> int:
        """Genome length in blocks, rounded half to even (500 -> 0, 1500 -> 2)."""
        return round(self.length / block_size)


class TranslationTable:
    """Translation records keyed by genome key, in insertion order."""

    def __init__(self):
        self._records: Dict[int, TranslationRecord] = {}

    def add(self, record: TranslationRecord) -> None:
        if record.genome_key in self._records:
            raise DuplicateGenomeKeyError(record.genome_key)
        self._records[record.genome_key] = record

    def __contains__(self, genome_key) -> bool:
        return genome_key in self._records

    def __getitem__(self, genome_key: int) -> TranslationRecord:
        return self._records[genome_key]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TranslationRecord]:
        return iter(self._records.values())

    def keys(self) -> KeysView:
        return self._records.keys()

    def resolved(self) -> List[TranslationRecord]:
        return [record for record in self if record.is_resolved]

    def distinct(self, attribute: str) -> Set[int]:
        """Distinct resolved values of ``attribute`` ('taxon_id' or 'rank_id')."""
        values = (getattr(record, attribute) for record in self)
        return {value for value in values if value != UNRESOLVED}
