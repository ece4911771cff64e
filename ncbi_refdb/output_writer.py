"""
Merged FASTA and translation table output.

The translation table has one row per genome whose taxon id was resolved:

    "GID","TID","Size","Start","End","Strain","Species"
    123,511145,4,0,0,"Escherichia coli strain K12","Escherichia coli"

Start is always 0 and End is the genome length in 1000 bp blocks.
"""

import csv
import logging
from pathlib import Path
from typing import TextIO

import pandas as pd

from .config import BLOCK_SIZE
from .records import TranslationTable

logger = logging.getLogger(__name__)

TRANSLATION_COLUMNS = ["GID", "TID", "Size", "Start", "End", "Strain", "Species"]
INTEGER_COLUMNS = ["GID", "TID", "Size", "Start", "End"]
STRING_COLUMNS = ["Strain", "Species"]


def write_fasta_record(handle: TextIO, header: str, sequence: str) -> None:
    handle.write(f">{header}\n{sequence}\n")


def translation_frame(table: TranslationTable, block_size: int = BLOCK_SIZE) -> pd.DataFrame:
    """Rows of the translation table; records without a taxon id are left out."""
    rows = [
        {
            "GID": record.genome_key,
            "TID": record.taxon_id,
            "Size": record.length,
            "Start": 0,
            "End": record.block_count(block_size),
            "Strain": record.strain,
            "Species": record.species,
        }
        for record in table.resolved()
    ]
    df = pd.DataFrame(rows, columns=TRANSLATION_COLUMNS)
    return df.astype({column: "int64" for column in INTEGER_COLUMNS})


def write_translation_table(table: TranslationTable, path: Path, block_size: int = BLOCK_SIZE) -> int:
    """
    Write the translation table as CSV.

    Strings (and the header) are quoted, numbers are not.

    Returns:
        int: Number of data rows written
    """
    df = translation_frame(table, block_size)
    df.to_csv(path, index=False, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")

    dropped = len(table) - len(df)
    logger.info(f"Translation table: {len(df):,} rows written to {path}, {dropped:,} unresolved records dropped")
    return len(df)


def load_translation_table(path: Path) -> pd.DataFrame:
    """Read a translation table written by write_translation_table."""
    df = pd.read_csv(path, dtype={column: str for column in STRING_COLUMNS}, keep_default_na=False)

    missing_cols = [col for col in TRANSLATION_COLUMNS if col not in df.columns]
    if missing_cols:
        raise KeyError(f"Missing required columns: {missing_cols}")

    return df[TRANSLATION_COLUMNS].astype({column: "int64" for column in INTEGER_COLUMNS})
