"""
Collect genome sequences from an NCBI genome download tree.

The tree is the unpacked all.fna.tar.gz archive: one directory per organism,
each holding one or more FASTA files (one per replicon). Every directory is
read in full, plasmids are dropped, and the remaining sequences are streamed
into the merged FASTA while a translation record is created for each one.
"""

import gzip
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from Bio.SeqIO.FastaIO import SimpleFastaParser
from tqdm import tqdm

from .config import FASTA_EXTENSIONS
from .output_writer import write_fasta_record
from .records import HeaderParseError, TranslationRecord, TranslationTable

logger = logging.getLogger(__name__)

PLASMID_MARKER = "plasmid"


@dataclass
class CollectionResult:
    """Counters for one collection run."""
    directories: int = 0
    failed_directories: int = 0
    files: int = 0
    sequences: int = 0
    plasmids: int = 0
    malformed_headers: int = 0
    duplicate_keys: int = 0
    records: int = 0


def is_plasmid(header: str) -> bool:
    """Case-sensitive substring match on the whole header."""
    return PLASMID_MARKER in header


class FastaCollector:
    """Merge the FASTA files below ``root`` into one stream and a translation table."""

    def __init__(self, root: Path, table: TranslationTable,
                 extensions: Tuple[str, ...] = FASTA_EXTENSIONS, show_progress: bool = True,
                 exclude: Iterable[Path] = ()):
        self.root = Path(root)
        self.table = table
        self.extensions = tuple(extensions)
        self.show_progress = show_progress
        # output and log locations, never read back as input
        self.exclude = {Path(path).resolve() for path in exclude}

    def discover_directories(self) -> List[Path]:
        """Immediate sub-directories of the root, sorted by name."""
        return sorted(
            path for path in self.root.iterdir()
            if path.is_dir() and path.resolve() not in self.exclude
        )

    def discover_files(self, directory: Path) -> List[Path]:
        """FASTA files anywhere below ``directory``, sorted by path."""
        return sorted(
            path for path in Path(directory).rglob("*")
            if path.is_file() and path.name.endswith(self.extensions)
            and path.resolve() not in self.exclude
        )

    @staticmethod
    def _open(path: Path) -> TextIO:
        if path.name.endswith(".gz"):
            return gzip.open(path, "rt")
        return open(path, "r")

    def read_directory(self, directory: Path) -> Dict[str, str]:
        """
        Read every FASTA file of a directory into a header -> sequence map.

        A header seen twice keeps the sequence of its last occurrence.
        I/O errors propagate so the caller can drop the whole directory.
        """
        return self.read_files(self.discover_files(directory))

    def read_files(self, paths: List[Path]) -> Dict[str, str]:
        sequences: Dict[str, str] = {}
        for path in paths:
            with self._open(path) as handle:
                for title, sequence in SimpleFastaParser(handle):
                    sequences[title.strip()] = sequence.strip()
            logger.debug(f"file: {path.name} completed")
        return sequences

    def collect(self, fasta_handle: TextIO, result: Optional[CollectionResult] = None) -> CollectionResult:
        """
        Collect all directories, writing accepted sequences to ``fasta_handle``.

        A directory that cannot be read is logged and skipped as a whole.
        Errors writing ``fasta_handle`` propagate; counters are kept in
        ``result`` as they go, so a caller that passes one in still sees
        how far collection got.
        """
        if result is None:
            result = CollectionResult()
        try:
            directories = self.discover_directories()
        except OSError as e:
            logger.error(f"Error listing genome directories in {self.root}: {e}")
            return result

        for directory in tqdm(directories, desc="Collecting FASTA", unit="dir", disable=not self.show_progress):
            result.directories += 1
            try:
                files = self.discover_files(directory)
                sequences = self.read_files(files)
            except (OSError, UnicodeDecodeError, EOFError) as e:
                result.failed_directories += 1
                logger.error(f"Error reading directory {directory.name}: {e}")
                continue

            logger.info(f"directory: {directory.name} ({len(files)} files, {len(sequences)} sequences)")
            result.files += len(files)
            result.sequences += len(sequences)
            self._accept(sequences, fasta_handle, result)

        logger.info(
            f"Collected {result.records:,} genomes from {result.directories:,} directories "
            f"({result.plasmids:,} plasmids dropped, {result.failed_directories:,} directories failed)"
        )
        return result

    def _accept(self, sequences: Dict[str, str], fasta_handle: TextIO, result: CollectionResult) -> None:
        for header, sequence in sequences.items():
            if is_plasmid(header):
                result.plasmids += 1
                continue

            try:
                record = TranslationRecord.from_fasta(header, sequence)
            except HeaderParseError as e:
                result.malformed_headers += 1
                logger.warning(f"Skipping sequence with malformed header: {e}")
                continue

            if record.genome_key in self.table:
                result.duplicate_keys += 1
                logger.warning(f"Skipping duplicate genome key {record.genome_key}: {header}")
                continue

            # written first: a record only enters the table once its sequence is in the FASTA
            write_fasta_record(fasta_handle, header, sequence)
            self.table.add(record)
            result.records += 1
