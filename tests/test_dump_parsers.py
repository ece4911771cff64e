"""Tests for the NCBI dump line parsers."""

from ncbi_refdb.dump_parsers import (
    GI_TAXID_FORMAT,
    NAMES_FORMAT,
    NODES_FORMAT,
    ParseMiss,
    parse_gi_taxid,
    parse_rank_id,
    parse_scientific_name,
)

from tests.helpers import dmp_line


def test_parse_key_reads_leading_field():
    assert GI_TAXID_FORMAT.parse_key("123\t511145\n", 1) == 123
    assert NODES_FORMAT.parse_key(dmp_line(511145, 83333, "no rank"), 1) == 511145


def test_parse_key_skips_blank_lines():
    assert GI_TAXID_FORMAT.parse_key("\n", 1) is None
    assert NODES_FORMAT.parse_key("  \n", 2) is None


def test_parse_key_reports_non_numeric_key():
    miss = GI_TAXID_FORMAT.parse_key("gi\ttaxid\n", 7)

    assert isinstance(miss, ParseMiss)
    assert miss.line_number == 7
    assert "non-numeric key" in miss.reason
    assert str(miss).startswith("line 7:")


def test_split_fields_trims_taxdump_layout():
    fields = NAMES_FORMAT.split_fields(dmp_line(83333, "Escherichia coli", "", "scientific name"), 1)

    assert fields[:4] == ["83333", "Escherichia coli", "", "scientific name"]


def test_split_fields_reports_short_lines():
    miss = NODES_FORMAT.split_fields("511145\t|\t83333\n", 3)

    assert isinstance(miss, ParseMiss)
    assert "expected 3 fields in nodes.dmp, found 2" in miss.reason


def test_parse_gi_taxid():
    assert parse_gi_taxid(123, ["123", "511145"], 1) == 511145
    assert isinstance(parse_gi_taxid(123, ["123", "n/a"], 1), ParseMiss)


def test_parse_rank_id_collapses_no_rank_to_parent():
    fields = NODES_FORMAT.split_fields(dmp_line(511145, 83333, "no rank", ""), 1)

    assert parse_rank_id(511145, fields, 1) == 83333


def test_parse_rank_id_keeps_ranked_taxon():
    fields = NODES_FORMAT.split_fields(dmp_line(83333, 561, "species", ""), 1)

    assert parse_rank_id(83333, fields, 1) == 83333


def test_parse_rank_id_reports_bad_parent():
    fields = NODES_FORMAT.split_fields(dmp_line(511145, "root?", "no rank", ""), 1)

    assert isinstance(parse_rank_id(511145, fields, 1), ParseMiss)


def test_parse_scientific_name_only_for_scientific_rows():
    scientific = NAMES_FORMAT.split_fields(dmp_line(562, "Escherichia coli", "", "scientific name"), 1)
    synonym = NAMES_FORMAT.split_fields(dmp_line(562, "Bacillus coli", "", "synonym"), 2)

    assert parse_scientific_name(562, scientific, 1) == "Escherichia coli"
    assert parse_scientific_name(562, synonym, 2) is None


def test_parse_key_without_delimiter_uses_whole_line():
    assert GI_TAXID_FORMAT.parse_key("123\n", 4) == 123
    assert NODES_FORMAT.parse_key("511145\t\n", 5) == 511145
