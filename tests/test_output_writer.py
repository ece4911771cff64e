"""Tests for the merged FASTA and translation table writers."""

import io

from ncbi_refdb.output_writer import (
    TRANSLATION_COLUMNS,
    load_translation_table,
    translation_frame,
    write_fasta_record,
    write_translation_table,
)
from ncbi_refdb.records import TranslationRecord, TranslationTable

HEADER_ROW = '"GID","TID","Size","Start","End","Strain","Species"'


def resolved_table():
    table = TranslationTable()
    table.add(TranslationRecord(genome_key=123, length=4, strain="Escherichia coli strain K12",
                                species="Escherichia coli", taxon_id=511145, rank_id=83333))
    table.add(TranslationRecord(genome_key=456, length=2500, strain="Unresolved organism"))
    table.add(TranslationRecord(genome_key=789, length=1500, strain="Bacillus subtilis 168",
                                species='Bacillus "subtilis", type strain', taxon_id=224308, rank_id=1423))
    return table


def test_write_fasta_record():
    handle = io.StringIO()
    write_fasta_record(handle, "NC|123|x|x|Escherichia coli", "ACGT")

    assert handle.getvalue() == ">NC|123|x|x|Escherichia coli\nACGT\n"


def test_translation_frame_drops_unresolved_records():
    df = translation_frame(resolved_table())

    assert list(df.columns) == TRANSLATION_COLUMNS
    assert df["GID"].tolist() == [123, 789]
    assert df["Start"].tolist() == [0, 0]
    assert df["End"].tolist() == [0, 2]


def test_write_translation_table_quotes_strings_only(tmp_path):
    path = tmp_path / "bacteria.csv"

    rows = write_translation_table(resolved_table(), path)

    assert rows == 2
    assert path.read_text().splitlines() == [
        HEADER_ROW,
        '123,511145,4,0,0,"Escherichia coli strain K12","Escherichia coli"',
        '789,224308,1500,0,2,"Bacillus subtilis 168","Bacillus ""subtilis"", type strain"',
    ]


def test_empty_table_writes_header_only(tmp_path):
    path = tmp_path / "empty.csv"

    rows = write_translation_table(TranslationTable(), path)

    assert rows == 0
    assert path.read_text() == HEADER_ROW + "\n"


def test_load_translation_table(tmp_path):
    path = tmp_path / "bacteria.csv"
    write_translation_table(resolved_table(), path)

    df = load_translation_table(path)

    assert df.loc[1, "Species"] == 'Bacillus "subtilis", type strain'
    assert df["TID"].tolist() == [511145, 224308]
    assert str(df["Size"].dtype) == "int64"
