"""Tests for the degraded fallback response."""
from parentguidance.services.guidance.fallback import (
    EMPTY_PREAMBLE,
    EXCERPT_MAX_CHARS,
    FALLBACK_TITLE,
    FORMAT_PREAMBLE,
    build_fallback,
    excerpt,
    fallback_title,
)


class TestFallbackTitle:
    def test_empty_input_uses_constant(self):
        assert fallback_title("") == FALLBACK_TITLE

    def test_skips_markers_and_short_lines(self):
        raw = "[SITUATION]\nOk\nMeltdown at the supermarket\nmore text"
        assert fallback_title(raw) == "Meltdown at the supermarket"

    def test_skips_diagnostic_lines(self):
        raw = "Content received: [partial]\nFailed to parse section\nToddler Biting at Daycare"
        assert fallback_title(raw) == "Toddler Biting at Daycare"

    def test_length_bounds(self):
        assert fallback_title("short\n" + "x" * 100 + "\n" + "y" * 99) == "y" * 99
        assert fallback_title("sixsix") == "sixsix"

    def test_only_first_ten_non_empty_lines_are_considered(self):
        raw = "\n\n".join(["tiny"] * 10) + "\nA perfectly good title"
        assert fallback_title(raw) == FALLBACK_TITLE

    def test_line_is_trimmed(self):
        assert fallback_title("   Screen Time Battles   ") == "Screen Time Battles"


class TestExcerpt:
    def test_marker_lines_are_removed(self):
        assert excerpt("[TITLE]\nBedtime\n[SITUATION]\nShe cries.") == "Bedtime\nShe cries."

    def test_long_text_is_cut_at_a_word_boundary(self):
        text = "word " * 300
        cut = excerpt(text)
        assert cut.endswith("...")
        assert len(cut) <= EXCERPT_MAX_CHARS + 3
        assert not cut[:-3].endswith(" ")
        assert cut[:-3].split(" ")[-1] == "word"

    def test_short_text_is_unchanged(self):
        assert excerpt("  A short reply.  ") == "A short reply."


class TestBuildFallback:
    def test_empty_input(self):
        response = build_fallback("")
        assert response.is_fallback
        assert response.title == FALLBACK_TITLE
        assert response.situation == EMPTY_PREAMBLE
        assert response.section_count() == 1

    def test_single_section_holds_preamble_excerpt_and_next_steps(self):
        response = build_fallback("The model wrote a long unstructured answer about naps.")
        (section,) = response.ordered_sections()
        assert section.order == 1
        assert section.title == "Guidance"
        assert section.content.startswith(FORMAT_PREAMBLE)
        assert "unstructured answer about naps" in section.content
        assert "contact support" in section.content

    def test_markers_only_input_counts_as_empty(self):
        response = build_fallback("[TITLE]\n[SITUATION]\n")
        assert response.situation == EMPTY_PREAMBLE
        assert response.analysis == ""

    def test_garbage_does_not_raise(self):
        response = build_fallback("\x00\x01 [[[ ]]] [\n��\n]]]")
        assert response.title
        assert response.section_count() == 1
