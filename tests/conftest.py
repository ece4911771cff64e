"""Shared fixtures: small NCBI genome trees and taxonomy dumps."""

import pytest

from tests.helpers import ECOLI_HEADER, PLASMID_HEADER, dmp_line, write_fasta, write_taxdump


@pytest.fixture
def genome_tree(tmp_path):
    """Two organism directories: one chromosome, one plasmid."""
    root = tmp_path / "genomes"
    write_fasta(root / "Escherichia_coli_K12" / "NC_000913.fna", [(ECOLI_HEADER, "ACGT")])
    write_fasta(root / "Escherichia_coli_K12_plasmid" / "NC_000456.fna", [(PLASMID_HEADER, "GGCC")])
    return root


@pytest.fixture
def taxonomy_dir(tmp_path):
    return write_taxdump(
        tmp_path / "taxonomy",
        gi_lines=["123\t511145\n"],
        nodes_lines=[dmp_line(511145, 83333, "no rank", "")],
        names_lines=[dmp_line(83333, "Escherichia coli", "", "scientific name")],
    )
