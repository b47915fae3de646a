"""Tests for gene list, sequence and annotation table parsers."""

import pytest

from codon_structure.exceptions import LoadError
from codon_structure.models import SecondaryStructure
from codon_structure.parsers.sequence_parser import (
    load_domain_table,
    load_gene_list,
    load_secondary_structure_table,
    load_sequences,
    parse_fasta_text,
    parse_gene_list,
)


class TestGeneList:
    def test_skips_blank_and_comment_lines(self):
        assert parse_gene_list("945\n\n  ; note\n 1017 \n") == ["945", "1017"]

    def test_load(self, tmp_path):
        path = tmp_path / "genes.txt"
        path.write_text("b0001\nb0002\n")
        assert load_gene_list(str(path)) == ["b0001", "b0002"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gene_list(str(tmp_path / "nope.txt"))


class TestSequences:
    def test_parse_fasta_text(self):
        text = ">NM_1.1 cds\natggct\ntaa\n>NM_2.1\nGGC\n"
        assert parse_fasta_text(text) == {"NM_1.1": "ATGGCTTAA", "NM_2.1": "GGC"}

    def test_single_record_file_is_named_after_file(self, tmp_path):
        (tmp_path / "g1.fasta").write_text(">lcl|something\natggcc\n")
        (tmp_path / "many.fa").write_text(">g2\nAAA\n>g3\nCCC\n")
        sequences = load_sequences(str(tmp_path))
        assert sequences["g1"] == "ATGGCC"
        assert sequences["g2"] == "AAA"
        assert sequences["g3"] == "CCC"

    def test_missing_directory(self, tmp_path):
        with pytest.raises(LoadError):
            load_sequences(str(tmp_path / "missing"))


class TestDomainTable:
    def test_ranges_grouped_in_file_order(self, tmp_path):
        path = tmp_path / "domains.tsv"
        path.write_text(
            "gene_id\tdomain_id\tchain\tstart\tend\n"
            "# discontinuous domain\n"
            "g1\td1\tA\t200\t250\n"
            "g1\td2\tA\t60\t199\n"
            "g1\td1\tA\t1\t59\n"
            "g2\td1\t\t5\t80\n"
        )
        domains = load_domain_table(str(path))

        assert [d.identifier for d in domains["g1"]] == ["d1", "d2"]
        d1 = domains["g1"][0]
        assert [(r.start, r.end) for r in d1.ranges] == [(200, 250), (1, 59)]
        assert d1.boundary == 59
        assert domains["g2"][0].ranges[0].chain == ""

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "domains.tsv"
        path.write_text("gene_id\tstart\tend\ng1\t1\t10\n")
        with pytest.raises(LoadError, match="missing columns"):
            load_domain_table(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadError):
            load_domain_table(str(tmp_path / "domains.tsv"))


def test_secondary_structure_table(tmp_path):
    path = tmp_path / "ss.tsv"
    path.write_text(
        "gene_id\tresidue_number\tdssp_code\n"
        "g1\t1\tE\n"
        "g1\t2\tH\n"
        "g1\t3\t-\n"
    )
    table = load_secondary_structure_table(str(path))
    assert table["g1"][(1, "")] is SecondaryStructure.EXTENDED
    assert table["g1"][(2, "")] is SecondaryStructure.ALPHA_HELIX
    assert table["g1"][(3, "")] is SecondaryStructure.COIL


def test_secondary_structure_table_with_insertion_codes(tmp_path):
    path = tmp_path / "ss.tsv"
    path.write_text(
        "gene_id\tresidue_number\tinsertion_code\tdssp_code\n"
        "g1\t52\t\tE\n"
        "g1\t52\tA\tH\n"
    )
    table = load_secondary_structure_table(str(path))
    assert table["g1"] == {
        (52, ""): SecondaryStructure.EXTENDED,
        (52, "A"): SecondaryStructure.ALPHA_HELIX,
    }
