"""
Line parsers for the NCBI reference dumps.

    gi_taxid_nucl.dmp   gi<TAB>taxid
    nodes.dmp           taxid | parent taxid | rank | ...
    names.dmp           taxid | name | unique name | name class | ...

Parsers never raise on malformed input. A line that cannot be used comes
back as a ParseMiss so the join pass can count it and keep going.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

NO_RANK = "no rank"
SCIENTIFIC = "scientific"


@dataclass(frozen=True)
class ParseMiss:
    """A reference line that was skipped, and why."""
    line_number: int
    reason: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason}"


@dataclass(frozen=True)
class DumpFormat:
    """Delimiter and minimum field count of one reference dump."""
    name: str
    delimiter: str
    min_fields: int

    def parse_key(self, line: str, line_number: int) -> Union[int, ParseMiss, None]:
        """
        Parse only the leading key field of a line.

        Returns None for blank lines, which are skipped without being
        reported.
        """
        if len(line.strip()) < 2:
            return None

        end = line.find(self.delimiter)
        key_text = (line if end < 0 else line[:end]).strip()
        try:
            return int(key_text)
        except ValueError:
            return ParseMiss(line_number, f"non-numeric key {key_text!r}")

    def split_fields(self, line: str, line_number: int) -> Union[List[str], ParseMiss]:
        fields = [part.strip() for part in line.rstrip("\r\n").split(self.delimiter)]
        if len(fields) < self.min_fields:
            return ParseMiss(
                line_number,
                f"expected {self.min_fields} fields in {self.name}, found {len(fields)}"
            )
        return fields


GI_TAXID_FORMAT = DumpFormat("gi_taxid_nucl.dmp", "\t", 2)
NODES_FORMAT = DumpFormat("nodes.dmp", "|", 3)
NAMES_FORMAT = DumpFormat("names.dmp", "|", 4)


def parse_gi_taxid(key: int, fields: List[str], line_number: int) -> Union[int, ParseMiss]:
    """Taxon id assigned to a GI."""
    try:
        return int(fields[1])
    except ValueError:
        return ParseMiss(line_number, f"non-numeric taxid {fields[1]!r}")


def parse_rank_id(key: int, fields: List[str], line_number: int) -> Union[int, ParseMiss]:
    """
    Normalized rank id of a taxon.

    A node whose rank is "no rank" is replaced by its parent. Only one hop is
    taken: a parent that is itself "no rank" is returned as is.
    """
    if NO_RANK not in fields[2]:
        return key

    try:
        return int(fields[1])
    except ValueError:
        return ParseMiss(line_number, f"non-numeric parent taxid {fields[1]!r}")


def parse_scientific_name(key: int, fields: List[str], line_number: int) -> Optional[str]:
    """Name of a taxon if the line is its scientific name, else None."""
    if SCIENTIFIC not in fields[3]:
        return None
    return fields[1]
