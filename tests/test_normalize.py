"""Tests for HTML cleaning and text normalization helpers."""

from civicnews.processors.normalize import cap_length, clean_html_to_text, clean_text, normalize_plain_text


class TestNormalize:
    def test_clean_html_strips_noise_and_entities(self):
        raw = "<div><script>x()</script><p>Budget &amp; taxes</p><aside>Ad</aside></div>"
        assert clean_html_to_text(raw) == "Budget & taxes"

    def test_normalize_plain_text(self):
        raw = "\ufeff\u201cQuoted\u201d  text\u2014here now\u0007"
        assert normalize_plain_text(raw) == '"Quoted" text-here now'

    def test_cap_length_prefers_word_boundary(self):
        text = "word " * 30
        capped = cap_length(text, 52)
        assert len(capped) <= 52
        assert capped.endswith("word")

    def test_clean_text(self):
        assert clean_text(None) == ""
        assert len(clean_text("<p>" + "a" * 6000 + "</p>")) == 5000

    def test_invisible_characters_removed(self):
        raw = "Par\u00ADlia\u200Bment\u00A0votes\u202Ftoday \u22125"
        assert normalize_plain_text(raw) == "Parliament votes today -5"
