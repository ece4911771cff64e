#!/usr/bin/env python3
"""
NCBI Reference Genome Database Builder

Merges the per-organism FASTA files of an NCBI genome download into a single
FASTA file, drops plasmids, and writes the translation table that maps every
sequence to its taxon id, genome size and scientific name.

Input (all in the working directory):
- One sub-directory per organism holding *.fna files (all.fna.tar.gz unpacked)
- gi_taxid_nucl.dmp, nodes.dmp, names.dmp from the NCBI taxonomy FTP

Output:
- <prefix>.fna: merged FASTA without plasmids
- <prefix>.csv: translation table ("GID","TID","Size","Start","End","Strain","Species")

Memory use depends on the number of genomes, not on the size of the NCBI
taxonomy files, which are streamed once each. Expect the run to take a while
on the full GI map.

Usage:
    build-refdb bacteria
    python -m ncbi_refdb.build_refdb bacteria
"""

import argparse
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import NCBI_GI_TAXID, NCBI_NAMES, NCBI_NODES, PipelineConfig
from .fasta_collector import CollectionResult, FastaCollector
from .output_writer import write_translation_table
from .records import TranslationTable
from .taxonomy_join import PassResult, TaxonomyJoinEngine

PACKAGE_LOGGER = "ncbi_refdb"

# not __name__, which is "__main__" under python -m
logger = logging.getLogger(f"{PACKAGE_LOGGER}.build_refdb")


@dataclass
class StageMetrics:
    """Timing of one pipeline stage."""
    operation: str
    start_time: float
    end_time: float
    rows_processed: int = 0

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    def __str__(self) -> str:
        base_str = f"{self.operation}: {self.duration:.2f}s"
        if self.rows_processed > 0 and self.duration > 0:
            base_str += f" ({self.rows_processed:,} rows, {self.rows_processed/self.duration:.0f} rows/s)"
        return base_str


@contextmanager
def timer(operation: str, metrics_list: List[StageMetrics]):
    """Context manager for timing a stage."""
    start_time = time.time()
    metrics = StageMetrics(operation=operation, start_time=start_time, end_time=start_time)
    try:
        yield metrics
    finally:
        metrics.end_time = time.time()
        metrics_list.append(metrics)


@dataclass
class RunSummary:
    """Everything a run produced, for reporting and tests."""
    table: TranslationTable
    collection: CollectionResult
    passes: List[PassResult] = field(default_factory=list)
    rows_written: int = 0
    metrics: List[StageMetrics] = field(default_factory=list)


def setup_logging(log_level: str, log_dir: Optional[Path] = None) -> None:
    """
    Log to the console with bare messages and, when possible, to a
    timestamped file in ``log_dir`` with full detail.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    console_handler.setLevel(getattr(logging, log_level))
    package_logger.addHandler(console_handler)

    if log_dir is None:
        return

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = Path(log_dir) / f"build_refdb_{timestamp}.log"
    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
    except OSError as e:
        package_logger.warning(f"Log file not available ({e}), logging to console only")
        return

    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
    file_handler.setLevel(logging.DEBUG)
    package_logger.addHandler(file_handler)
    package_logger.debug(f"Log file: {log_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="build-refdb",
        description="Merge NCBI genome FASTA files and build the taxonomic translation table"
    )
    parser.add_argument("prefix", nargs="?",
                        help="Output prefix; writes <prefix>.fna and <prefix>.csv")
    return parser


def run_pipeline(config: PipelineConfig) -> RunSummary:
    """Collect, resolve in three passes, and write the translation table."""
    table = TranslationTable()
    summary = RunSummary(table=table, collection=CollectionResult())

    logger.info(f"Collecting FASTA files below {Path(config.input_dir).resolve()}")
    with timer("collect FASTA", summary.metrics) as metrics:
        try:
            with open(config.fasta_path, "w") as fasta_handle:
                collector = FastaCollector(config.input_dir, table, config.extensions, config.show_progress,
                                           exclude=config.output_paths)
                collector.collect(fasta_handle, summary.collection)
        except OSError as e:
            logger.error(f"Error writing {config.fasta_path}: {e}")
        metrics.rows_processed = summary.collection.sequences

    engine = TaxonomyJoinEngine(table, config.show_progress)
    stages = [
        (NCBI_GI_TAXID, engine.resolve_taxon_ids, config.gi_taxid_path),
        (NCBI_NODES, engine.resolve_rank_ids, config.nodes_path),
        (NCBI_NAMES, engine.resolve_species_names, config.names_path),
    ]
    for name, resolve, path in stages:
        logger.info(f"processing {name} ...")
        with timer(f"processing {name}", summary.metrics) as metrics:
            result = resolve(path)
            metrics.rows_processed = result.lines_read
        summary.passes.append(result)
        logger.info(f"processing {name} ... {'completed' if result.ok else 'failed'}")

    with timer("write translation table", summary.metrics) as metrics:
        try:
            summary.rows_written = write_translation_table(table, config.csv_path, config.block_size)
        except OSError as e:
            logger.error(f"Error writing {config.csv_path}: {e}")
        metrics.rows_processed = summary.rows_written

    return summary


def log_statistics(summary: RunSummary, config: PipelineConfig) -> None:
    collection = summary.collection
    logger.info("=" * 60)
    logger.info("FINAL STATISTICS")
    logger.info("=" * 60)
    logger.info(f"Directories processed: {collection.directories:,} ({collection.failed_directories:,} failed)")
    logger.info(f"Sequences read: {collection.sequences:,}")
    logger.info(f"Plasmids dropped: {collection.plasmids:,}")
    logger.info(f"Malformed headers skipped: {collection.malformed_headers:,}")
    logger.info(f"Duplicate genome keys skipped: {collection.duplicate_keys:,}")
    logger.info(f"Genomes collected: {len(summary.table):,}")
    for result in summary.passes:
        status = "" if result.ok else f" [error: {result.error}]"
        logger.info(f"  {result.name}: {result.resolved:,} resolved, "
                    f"{result.miss_count:,} malformed lines{status}")
    logger.info(f"Rows written: {summary.rows_written:,} "
                f"({len(summary.table) - summary.rows_written:,} unresolved genomes dropped)")
    for metrics in summary.metrics:
        logger.info(f"  {metrics}")
    logger.info(f"FASTA saved to: {config.fasta_path}")
    logger.info(f"Translation table saved to: {config.csv_path}")
    logger.info("=" * 60)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the builder.

    Returns:
        int: Always 0; failures are logged and reflected in the outputs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.prefix is None:
        parser.print_usage()
        return 0

    config = PipelineConfig(prefix=args.prefix, show_progress=sys.stderr.isatty())
    setup_logging("INFO", config.log_dir)

    summary = run_pipeline(config)
    log_statistics(summary, config)
    return 0


if __name__ == "__main__":
    sys.exit(main())
