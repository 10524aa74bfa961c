"""Command-line entry point for the job search engine."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from jobsearch.config.environment import EnvironmentConfig
from jobsearch.config.exceptions import ConfigurationError
from jobsearch.config.loader import load_config
from jobsearch.config.models import AppConfig
from jobsearch.logging import get_logger
from jobsearch.logging.config import configure_logging
from jobsearch.session import SearchSession, format_view_state, snapshot_to_dict
from jobsearch.sources import load_corpus_file

logger = get_logger(__name__, component="cli")

PROMPT = "search> "


def load_runtime_config(
    config_path: Optional[Path],
    log_level_override: Optional[str],
    corpus_override: Optional[Path],
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and apply command-line overrides.

    Args:
        config_path: Path to configuration file (None searches default locations)
        log_level_override: Log level from CLI (takes precedence)
        corpus_override: Corpus path from CLI (takes precedence)

    Returns:
        Tuple of (AppConfig, EnvironmentConfig)

    Raises:
        ConfigurationError: If configuration is invalid or no corpus is configured
    """
    app_config, env_config = load_config(config_path)

    if corpus_override is not None:
        app_config.corpus.path = corpus_override
    if app_config.corpus.path is None:
        raise ConfigurationError(
            "No corpus file configured",
            suggestions=[
                "Pass --corpus PATH",
                "Set corpus.path in config.yaml",
                "Set JOB_SEARCH_CORPUS in your environment or .env file",
            ],
        )

    # Log level priority: CLI > Environment > Config
    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level

    return app_config, env_config


def render(session: SearchSession, as_json: bool) -> str:
    """Render the session's current snapshot as text or JSON."""
    snapshot = session.snapshot
    if as_json:
        return json.dumps(snapshot_to_dict(snapshot), indent=2)
    return format_view_state(snapshot)


def describe_job(session: SearchSession, job_id: str) -> str:
    """Render the full (or partial) job behind an id as JSON."""
    job = session.job(job_id)
    if job is None:
        return f"No job with id {job_id!r}"
    return job.model_dump_json(indent=2, exclude_none=True)


def run_interactive(session: SearchSession, as_json: bool) -> None:
    """
    Read queries from stdin until EOF or ``:quit``.

    A blank line shows recent jobs; ``:job ID`` prints one job's details.
    """
    print(render(session, as_json))
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return

        command = line.strip()
        if command in (":q", ":quit"):
            return
        if command.startswith(":job "):
            print(describe_job(session, command[len(":job "):].strip()))
            continue

        session.set_query(line)
        print(render(session, as_json))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job Search Engine - search, group, and filter a field-service job corpus"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml, then config/config.yaml)",
    )
    parser.add_argument(
        "--corpus",
        type=Path,
        default=None,
        help="Corpus file to search (overrides config and JOB_SEARCH_CORPUS)",
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Run a single query and exit (an empty string lists recent jobs)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print snapshots as JSON instead of text",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the job search CLI.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = build_parser().parse_args(argv)

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level, args.corpus)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )

        logger.info(
            "Configuration loaded",
            extra={
                "event": "config.loaded",
                "corpus_path": str(app_config.corpus.path),
                "log_level": env_config.log_level,
                "aggregate_results": app_config.search.aggregate_results,
            },
        )

        fixture = load_corpus_file(app_config.corpus.path)
        corpus, directory = fixture.to_sources()

        # Each CLI query is complete when entered, so rebuilds run synchronously
        with SearchSession(corpus, directory, settings=app_config.search) as session:
            if args.query is not None:
                session.set_query(args.query)
                print(render(session, args.json))
            else:
                run_interactive(session, args.json)

        return 0

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "cli.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
