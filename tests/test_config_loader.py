"""Tests for the outlet catalog loader, the registry and lexicon files."""

import textwrap

import pytest

from civicnews.models import BIAS_VALUES, SOURCE_TYPES
from civicnews.processors import load_lexicon
from civicnews.sources import SourceRegistry
from civicnews.utils.config_loader import ConfigError, load_sources_config

VALID_ENTRY = """
  - id: tyee
    name: The Tyee
    website: https://thetyee.ca
    feeds:
      - https://thetyee.ca/rss2.xml
    bias: left
    credibility: 74
    type: independent
    region: British Columbia
"""


def write_config(tmp_path, body: str):
    path = tmp_path / "sources.yaml"
    path.write_text("sources:\n" + textwrap.dedent(body), encoding="utf-8")
    return path


class TestDefaultCatalog:
    def test_loads_and_validates(self):
        sources = load_sources_config()
        assert len(sources) >= 20
        ids = [s.id for s in sources]
        assert len(ids) == len(set(ids))
        for src in sources:
            assert src.declared_bias in BIAS_VALUES
            assert src.type in SOURCE_TYPES
            assert 0 <= src.prior_credibility <= 100
            assert src.feed_urls and all(f.startswith("http") for f in src.feed_urls)

    def test_registry_from_default(self):
        registry = SourceRegistry.from_config()
        assert "cbc" in registry
        assert registry.require("cbc").display_name == "CBC News"


class TestLoadSourcesConfig:
    def test_valid_entry(self, tmp_path):
        (src,) = load_sources_config(write_config(tmp_path, VALID_ENTRY))
        assert src.id == "tyee"
        assert src.declared_bias == "left"
        assert src.prior_credibility == 74
        assert src.region == "British Columbia"
        assert src.language == "en"
        assert src.consecutive_failures == 0

    @pytest.mark.parametrize(
        "old, new",
        [
            ("bias: left", "bias: far-left"),
            ("type: independent", "type: blog"),
            ("credibility: 74", "credibility: 140"),
            ("website: https://thetyee.ca", "website: thetyee.ca"),
            ("      - https://thetyee.ca/rss2.xml", "      - ftp://thetyee.ca/rss2.xml"),
            ("    name: The Tyee\n", ""),
        ],
    )
    def test_invalid_entries(self, tmp_path, old, new):
        with pytest.raises(ConfigError):
            load_sources_config(write_config(tmp_path, VALID_ENTRY.replace(old, new)))

    def test_duplicate_ids(self, tmp_path):
        with pytest.raises(ConfigError, match="Duplicate"):
            load_sources_config(write_config(tmp_path, VALID_ENTRY + VALID_ENTRY))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_sources_config(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("sources: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_sources_config(path)


class TestRegistry:
    def test_duplicate_source_rejected(self, source):
        with pytest.raises(ValueError):
            SourceRegistry([source, source])

    def test_unknown_source(self, registry):
        assert registry.get("missing") is None
        with pytest.raises(KeyError):
            registry.require("missing")


class TestLoadLexicon:
    def test_overrides_and_defaults(self, tmp_path):
        path = tmp_path / "lexicon.yaml"
        path.write_text(
            "version: '2026.2'\ncivic_terms: [Zoning, Bylaw]\ntopics:\n  Transit: [subway, LRT]\n",
            encoding="utf-8",
        )
        lexicon = load_lexicon(path)
        assert lexicon.version == "2026.2"
        assert lexicon.civic_terms == ["zoning", "bylaw"]
        assert lexicon.topics == {"Transit": ["subway", "lrt"]}
        assert "Pierre Poilievre" in lexicon.entities

    @pytest.mark.parametrize(
        "body",
        ["civic_terms: [a]\n", "version: 1\ncivic_terms: not-a-list\n", "version: 1\ntopics: [a, b]\n", "version: [\n"],
    )
    def test_invalid_lexicon(self, tmp_path, body):
        path = tmp_path / "lexicon.yaml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ConfigError):
            load_lexicon(path)
