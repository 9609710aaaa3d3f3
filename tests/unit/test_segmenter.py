"""Tests for header detection, keyword extraction and sectioning."""

import pytest

from policy_assistant.ingestion.segmenter import (
    FALLBACK_SECTION_TITLE,
    SectionSegmenter,
    extract_keywords,
    is_header,
    segment_sections,
)
from policy_assistant.ingestion.text_reconstructor import join_pages, normalize_text


class TestExtractKeywords:
    """Test the shared keyword helper."""

    def test_lowercases_and_strips_punctuation(self):
        keywords = extract_keywords("The Company's vacation-policy: vacation days, HOURS")
        assert keywords == ["company", "vacation", "policy", "days", "hours"]

    def test_drops_short_words_and_stop_words(self):
        keywords = extract_keywords("this work will be done with care")
        assert keywords == ["done", "care"]

    def test_caps_at_twenty(self):
        text = " ".join(f"term{i:02d}" for i in range(30))
        keywords = extract_keywords(text)
        assert len(keywords) == 20
        assert keywords[0] == "term00"
        assert keywords[-1] == "term19"

    def test_empty_text(self):
        assert extract_keywords("") == []


class TestIsHeader:
    """Test the three header shapes and the length gate."""

    @pytest.mark.parametrize("line", [
        "POLICY: Leave",
        "Security: badge access",
        "BENEFITS OVERVIEW",
        "401K matching",
        "Guideline for travel",
    ])
    def test_policy_keyword_prefix(self, line):
        assert is_header(line)

    def test_keyword_must_be_followed_by_space_or_colon(self):
        assert not is_header("Policyholders keep their rights")

    def test_numbered_heading(self):
        assert is_header("1. Annual Leave Entitlement")

    def test_numbered_heading_too_short(self):
        assert not is_header("1. Short")

    def test_uppercase_line_without_keyword(self):
        assert is_header("EMPLOYEE CONDUCT")

    def test_uppercase_line_too_short(self):
        assert not is_header("FAQ")

    def test_uppercase_line_too_long(self):
        assert not is_header("EMPLOYEE CONDUCT AND COMPANY VALUES")

    def test_length_gate_applies_to_uppercase_rule(self):
        line = " ".join(["EMPLOYEE CONDUCT"] * 7)
        assert len(line) > 100
        assert not is_header(line)

    def test_length_gate_applies_to_keyword_rule(self):
        line = "POLICY: " + "x" * 100
        assert not is_header(line)

    def test_regular_sentence_is_not_header(self):
        assert not is_header("Employees get 15 vacation days per year.")

    def test_blank_line(self):
        assert not is_header("   ")


class TestSegmentation:
    """Test section assembly."""

    def test_policy_leave_scenario(self):
        text = "POLICY: Leave\nEmployees get 15 vacation days per year.\n"
        sections = segment_sections(text, [text])

        assert len(sections) == 1
        assert sections[0].title == "POLICY: Leave"
        assert "15 vacation days" in sections[0].content
        assert sections[0].page_numbers == [1]
        assert sections[0].keywords == ["policy", "leave"]

    def test_no_headers_yields_single_fallback_section(self):
        text = "the quick brown fox jumps.\nanother plain sentence here."
        sections = segment_sections(text, ["page one", "page two"])

        assert len(sections) == 1
        assert sections[0].title == FALLBACK_SECTION_TITLE
        assert sections[0].content == text
        assert sections[0].page_numbers == [1, 2]
        assert sections[0].keywords == extract_keywords(text)

    def test_content_appended_with_trailing_newline(self):
        text = "SECURITY RULES\nLock your screen.\nWear your badge."
        sections = segment_sections(text, [text])
        assert sections[0].content == "Lock your screen.\nWear your badge.\n"

    def test_sections_without_content_are_skipped(self):
        text = "POLICY A\nPOLICY B\nbody text for the second policy"
        sections = segment_sections(text, [text])
        assert [s.title for s in sections] == ["POLICY B"]

    def test_lines_before_first_header_are_not_attached(self):
        text = "Acme Corp handbook\nLEAVE POLICY\nTake time off."
        sections = segment_sections(text, [text])
        assert len(sections) == 1
        assert "Acme" not in sections[0].content

    def test_sections_keep_document_order(self):
        text = (
            "PURPOSE OF HANDBOOK\nExplains the rules.\n"
            "EXPENSE REPORTS\nSubmit receipts monthly.\n"
            "DENTAL COVERAGE\nTwo cleanings per year."
        )
        sections = segment_sections(text, [text])
        assert [s.title for s in sections] == [
            "PURPOSE OF HANDBOOK", "EXPENSE REPORTS", "DENTAL COVERAGE",
        ]

    def test_proportional_page_estimate(self):
        text = "POLICY ONE\nalpha line\nPOLICY TWO\nbeta line"
        sections = segment_sections(text, ["p1", "p2"])
        assert sections[0].page_numbers == [1]
        assert sections[1].page_numbers == [2]

    def test_keywords_resampled_when_length_hits_interval(self):
        line_a = "z" * 249
        line_b = "pension plan " * 19 + "ok"
        line_c = "coverage details for families"
        assert len(line_a) + 1 + len(line_b) + 1 == 500

        text = "\n".join(["BENEFITS OVERVIEW", line_a, line_b, line_c])
        sections = segment_sections(text, [text])

        assert sections[0].keywords == ["benefits", "overview", "pension", "plan"]

    def test_keywords_not_resampled_off_interval(self):
        text = "BENEFITS OVERVIEW\ncoverage details for families"
        sections = segment_sections(text, [text])
        assert sections[0].keywords == ["benefits", "overview"]


class TestTrackedPageEstimation:
    """Test page numbers taken from the actual page of the header."""

    PAGES = [
        "LEAVE POLICY\nintro line",
        "SECURITY RULES\none\ntwo\nthree\nfour\nfive",
    ]

    def _full_text(self):
        return normalize_text(join_pages(self.PAGES))

    def test_proportional_estimate_is_approximate(self):
        sections = segment_sections(self._full_text(), self.PAGES)
        assert sections[1].page_numbers == [1]

    def test_tracked_uses_true_page(self):
        sections = segment_sections(self._full_text(), self.PAGES, page_estimation="tracked")
        assert sections[0].page_numbers == [1]
        assert sections[1].page_numbers == [2]

    def test_tracked_falls_back_when_pages_do_not_line_up(self):
        sections = segment_sections(
            self._full_text(), ["unrelated", "pages"], page_estimation="tracked"
        )
        assert sections[1].page_numbers == [1]

    def test_unknown_mode_raises(self):
        with pytest.raises(ValueError, match="Unknown page estimation mode"):
            SectionSegmenter(page_estimation="exact")
