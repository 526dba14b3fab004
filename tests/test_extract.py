"""Tests for citation key and title extraction."""

from __future__ import annotations

from bibtex_generator import (
    UNKNOWN_KEY,
    UNKNOWN_TITLE,
    citation_key,
    match_citation_key,
    match_title,
    record_title,
)

DOI_ORG_RECORD = """@inproceedings{Vaswani_2017,
  series={NIPS'17},
  title={Attention is All You Need},
  booktitle={Advances in Neural Information Processing Systems},
  author={Vaswani, Ashish and Shazeer, Noam},
  year={2017}
}"""


class TestCitationKey:
    def test_simple_key(self):
        assert citation_key("@article{smith2020,...}") == "smith2020"

    def test_doi_org_record(self):
        assert citation_key(DOI_ORG_RECORD) == "Vaswani_2017"

    def test_whitespace_around_key(self):
        assert match_citation_key("@Article{ smith2020 ,\n title={x}}") == "smith2020"

    def test_missing_prefix(self):
        assert match_citation_key("title = {No key here}") is None
        assert citation_key("title = {No key here}") == UNKNOWN_KEY

    def test_empty_text(self):
        assert citation_key("") == "unknown"


class TestRecordTitle:
    def test_braced(self):
        assert record_title("title = {Deep Learning}") == "Deep Learning"

    def test_quoted(self):
        assert record_title('title = "Deep Learning"') == "Deep Learning"

    def test_case_insensitive_field(self):
        assert match_title("TITLE={Deep Learning}") == "Deep Learning"

    def test_nested_braces_kept(self):
        assert match_title("title = {{BERT}: Pre-training of Deep Bidirectional Transformers}") == (
            "{BERT}: Pre-training of Deep Bidirectional Transformers"
        )

    def test_booktitle_not_mistaken_for_title(self):
        text = "@inproceedings{k,\n booktitle={Proceedings of X},\n title={Real Title}\n}"
        assert match_title(text) == "Real Title"

    def test_only_booktitle(self):
        assert match_title("@inproceedings{k, booktitle={Proceedings of X}}") is None

    def test_multiline_whitespace_collapsed(self):
        assert match_title("title = {Deep\n    Learning}") == "Deep Learning"

    def test_doi_org_record(self):
        assert record_title(DOI_ORG_RECORD) == "Attention is All You Need"

    def test_missing_title(self):
        assert match_title("@article{k, year={2020}}") is None
        assert record_title("@article{k, year={2020}}") == UNKNOWN_TITLE

    def test_unterminated_value_never_raises(self):
        assert record_title("title = {Deep Learning") == "Unknown Title"
        assert record_title('title = "Deep Learning') == "Unknown Title"
