"""
Reference file names and run settings for the reference database builder.

The NCBI dumps are expected in the working directory next to the genome
directories, exactly as they come out of the NCBI FTP archives:

    ftp://ftp.ncbi.nih.gov/pub/taxonomy/taxdmp.zip          (names.dmp, nodes.dmp)
    ftp://ftp.ncbi.nih.gov/pub/taxonomy/gi_taxid_nucl.zip   (gi_taxid_nucl.dmp)
    ftp://ftp.ncbi.nlm.nih.gov/genomes/Bacteria/all.fna.tar.gz
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

# Constants
NCBI_GI_TAXID = "gi_taxid_nucl.dmp"
NCBI_NODES = "nodes.dmp"
NCBI_NAMES = "names.dmp"

FASTA_EXTENSIONS = (".fna", ".fna.gz")
FASTA_SUFFIX = ".fna"
TABLE_SUFFIX = ".csv"

# Genome size bucket used for the "End" column of the translation table
BLOCK_SIZE = 1000

# Parse misses kept per pass for reporting; the rest are only counted
MAX_REPORTED_MISSES = 100

LOG_DIR_NAME = "logs"


@dataclass
class PipelineConfig:
    """Settings for one run of the builder."""
    prefix: str
    input_dir: Path = field(default_factory=Path.cwd)
    taxonomy_dir: Path = field(default_factory=Path.cwd)
    extensions: Tuple[str, ...] = FASTA_EXTENSIONS
    block_size: int = BLOCK_SIZE
    show_progress: bool = True

    @property
    def fasta_path(self) -> Path:
        return Path(self.prefix + FASTA_SUFFIX)

    @property
    def csv_path(self) -> Path:
        return Path(self.prefix + TABLE_SUFFIX)

    @property
    def log_dir(self) -> Path:
        return self.csv_path.resolve().parent / LOG_DIR_NAME

    @property
    def output_paths(self) -> Tuple[Path, ...]:
        """Everything a run writes, including the directories it writes into."""
        return (
            self.fasta_path,
            self.csv_path,
            self.fasta_path.resolve().parent,
            self.csv_path.resolve().parent,
            self.log_dir,
        )

    @property
    def gi_taxid_path(self) -> Path:
        return Path(self.taxonomy_dir) / NCBI_GI_TAXID

    @property
    def nodes_path(self) -> Path:
        return Path(self.taxonomy_dir) / NCBI_NODES

    @property
    def names_path(self) -> Path:
        return Path(self.taxonomy_dir) / NCBI_NAMES
