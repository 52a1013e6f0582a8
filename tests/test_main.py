"""Tests for the command-line entrypoint."""

import json
from unittest.mock import patch

import pytest

from civicnews.main import main, parse_args

from fakes import FakeGet, FakeResponse, rss_document

CATALOG = """
sources:
  - id: cbc
    name: CBC News
    website: https://www.cbc.ca
    feeds: [https://www.cbc.ca/rss]
    bias: center
    credibility: 85
    type: government
"""


@pytest.fixture
def quiet_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INTER_FEED_DELAY_SECONDS", "0")
    monkeypatch.setenv("LOG_OUTPUT", "stdout")
    monkeypatch.delenv("SCORER_BACKEND", raising=False)


class TestParseArgs:
    def test_defaults(self):
        args = parse_args([])
        assert args.config.endswith("sources.yaml")
        assert args.backend is None
        assert args.dry_run is False

    def test_rejects_unknown_backend(self):
        with pytest.raises(SystemExit):
            parse_args(["--backend", "magic"])


class TestMain:
    def test_dry_run_prints_json_summary(self, tmp_path, capsys, quiet_env):
        config = tmp_path / "sources.yaml"
        config.write_text(CATALOG, encoding="utf-8")
        feed = rss_document([{"title": "Senate passes Bill S-209", "link": "https://www.cbc.ca/news/s209"}])
        get = FakeGet({"https://www.cbc.ca/rss": FakeResponse(200, feed)})

        with patch("civicnews.fetchers.http.requests.get", get):
            code = main(["--config", str(config), "--dry-run", "--json", "--log-level", "CRITICAL"])

        assert code == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["sources_attempted"] == 1
        assert summary["articles_collected"] == 1
        assert summary["failures"] == []
        assert not (tmp_path / ".cache").exists()

    def test_invalid_config_exits_1(self, tmp_path, quiet_env):
        config = tmp_path / "sources.yaml"
        config.write_text(CATALOG.replace("bias: center", "bias: sideways"), encoding="utf-8")
        assert main(["--config", str(config), "--log-level", "CRITICAL"]) == 1

    def test_writes_store(self, tmp_path, capsys, quiet_env):
        config = tmp_path / "sources.yaml"
        config.write_text(CATALOG, encoding="utf-8")
        store = tmp_path / "store"
        with patch("civicnews.fetchers.http.requests.get", FakeGet()):
            code = main(["--config", str(config), "--store-dir", str(store), "--log-level", "CRITICAL"])
        assert code == 0
        assert (store / "sources.json").exists()
        assert "Ingestion Run Summary" in capsys.readouterr().out

    def test_open_breaker_carries_over_to_next_invocation(self, tmp_path, capsys, quiet_env):
        config = tmp_path / "sources.yaml"
        config.write_text(
            CATALOG.replace(
                "feeds: [https://www.cbc.ca/rss]",
                "feeds: [https://www.cbc.ca/rss/1, https://www.cbc.ca/rss/2, https://www.cbc.ca/rss/3]",
            ),
            encoding="utf-8",
        )
        argv = ["--config", str(config), "--store-dir", str(tmp_path / "store"), "--json", "--log-level", "CRITICAL"]

        with patch("civicnews.fetchers.http.requests.get", FakeGet()):
            assert main(argv) == 0
        first = json.loads(capsys.readouterr().out)
        assert first["feeds_failed"] == 3

        get = FakeGet()
        with patch("civicnews.fetchers.http.requests.get", get):
            assert main(argv) == 0
        second = json.loads(capsys.readouterr().out)
        assert second["sources_skipped"] == 1
        assert get.calls == []
