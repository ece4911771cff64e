"""Builders for small NCBI genome trees and taxonomy dumps."""

from pathlib import Path
from typing import Iterable, List, Tuple

ECOLI_HEADER = "NC|123|x|x|Escherichia coli strain K12, complete genome"
PLASMID_HEADER = "NC|456|x|x|Escherichia coli strain K12 plasmid pK12, complete sequence"


def dmp_line(*fields) -> str:
    """One line in the NCBI taxdump layout: fields joined by TAB|TAB, ending in TAB|."""
    return "\t|\t".join(str(value) for value in fields) + "\t|\n"


def write_fasta(path: Path, records: Iterable[Tuple[str, str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as handle:
        for header, sequence in records:
            handle.write(f">{header}\n{sequence}\n")
    return path


def write_taxdump(directory: Path, gi_lines: List[str], nodes_lines: List[str], names_lines: List[str]) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "gi_taxid_nucl.dmp").write_text("".join(gi_lines))
    (directory / "nodes.dmp").write_text("".join(nodes_lines))
    (directory / "names.dmp").write_text("".join(names_lines))
    return directory
