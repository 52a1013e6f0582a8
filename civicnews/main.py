"""Application entrypoint for the civic news ingestion pipeline.

One invocation performs one ingestion run:
1) load the source catalog and configuration
2) fetch, filter, extract and score articles from every source
3) compare topics covered by several outlets and print a run summary
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from .errors import PersistenceError
from .orchestrator import IngestionEngine
from .processors import default_lexicon, load_lexicon
from .processors.scoring import BACKENDS
from .sources import SourceRegistry
from .storage import InMemoryGateway, JsonFileGateway
from .utils.config_loader import DEFAULT_SOURCES_PATH, ConfigError
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Civic news ingestion: fetch, score and compare political coverage across outlets"
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_SOURCES_PATH),
        help="Path to sources configuration file (YAML)",
    )
    parser.add_argument(
        "--store-dir",
        default=".cache/civicnews",
        help="Directory for the JSON record store",
    )
    parser.add_argument(
        "--backend",
        default=None,
        choices=list(BACKENDS),
        help="Scoring backend (overrides SCORER_BACKEND)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum number of sources fetched in parallel",
    )
    parser.add_argument(
        "--deadline-seconds",
        type=float,
        default=None,
        help="Stop starting new sources/feeds after this many seconds",
    )
    parser.add_argument(
        "--lexicon",
        default=None,
        help="Optional YAML lexicon overriding the built-in civic vocabulary",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Keep all records in memory instead of writing the store",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON instead of Markdown",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("civicnews.main")

    config_path = Path(args.config)
    logger.info("Loading sources configuration from %s", config_path)
    try:
        registry = SourceRegistry.from_config(config_path)
        lexicon = load_lexicon(args.lexicon) if args.lexicon else default_lexicon()
    except ConfigError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1
    logger.info("Loaded %d source(s)", len(registry))

    cfg = PipelineConfig()
    if args.backend:
        cfg.scorer_backend = args.backend
    if args.concurrency:
        cfg.concurrency = args.concurrency
    if args.deadline_seconds is not None:
        cfg.deadline_seconds = args.deadline_seconds

    if args.dry_run:
        gateway = InMemoryGateway()
    else:
        try:
            gateway = JsonFileGateway(args.store_dir, buffered=True)
        except PersistenceError as exc:
            logger.error("Cannot open store: %s", exc)
            return 1
    registry.restore_state(gateway.list_sources())

    engine = IngestionEngine(registry, gateway, config=cfg, lexicon=lexicon)
    summary = engine.run()

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(summary.to_markdown())
    return 0


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
