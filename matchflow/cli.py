"""
Command line interface for matchflow.

This module exposes two subcommands: ``score`` scores one candidate
against one campaign, and ``rank`` scores every application to a
campaign and prints the ranked page.  Inputs are JSON files holding the
records the data source would normally supply; outputs are JSON.  The
CLI is intentionally lightweight and delegates the work to the
`score` and `rank` packages.

LLM providers are configured through the environment (see
:mod:`matchflow.config`).  Without API keys, or with ``--offline``,
only the deterministic scorer runs.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List

from .config import load_config
from .profile.schema import ProfileValidationError
from .rank.applications import rank_applications
from .rank.ranker import FILTER_TIERS, SORT_KEYS
from .score.orchestrator import ScoringOrchestrator

logger = logging.getLogger("matchflow.cli")


def _load_json(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _write_output(payload: Dict[str, Any], out: str | None) -> None:
    text = json.dumps(payload, indent=2, default=str)
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("Wrote %s", out)
    else:
        print(text)


def cmd_score(args: argparse.Namespace) -> None:
    """Score a single candidate for a campaign."""
    config = load_config(args.config)
    orchestrator = ScoringOrchestrator.from_config(config, offline=args.offline)
    result = orchestrator.score(_load_json(args.candidate), _load_json(args.campaign))
    _write_output(result.to_dict(), args.out)


def cmd_rank(args: argparse.Namespace) -> None:
    """Score all applications for a campaign and write the ranked page."""
    config = load_config(args.config)
    orchestrator = ScoringOrchestrator.from_config(config, offline=args.offline)
    applications = _load_json(args.applications)
    if not isinstance(applications, list):
        raise ProfileValidationError(f"{args.applications} must contain a JSON list of applications")
    page, outcome = asyncio.run(
        rank_applications(
            orchestrator,
            _load_json(args.campaign),
            applications,
            filter_tier=args.filter,
            sort_by=args.sort,
            page=args.page,
            page_size=args.page_size or config.page_size,
            top_matches_limit=config.top_matches_limit,
            concurrency=args.concurrency,
        )
    )
    payload = page.to_dict()
    payload["batch"] = outcome.summary()
    payload["batch"]["skipped_records"] = [
        {"index": s.index, "application_id": s.application_id, "reason": s.reason} for s in outcome.skipped
    ]
    _write_output(payload, args.out)


def main(argv: List[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="matchflow", description="Creator/campaign matching CLI")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--offline", action="store_true", help="Use only the deterministic scorer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Score
    score_cmd = subparsers.add_parser("score", help="Score one candidate for a campaign")
    score_cmd.add_argument("--candidate", required=True, help="Path to candidate JSON")
    score_cmd.add_argument("--campaign", required=True, help="Path to campaign JSON")
    score_cmd.add_argument("--out", help="Output JSON path (default: stdout)")
    score_cmd.set_defaults(func=cmd_score)

    # Rank
    rank_cmd = subparsers.add_parser("rank", help="Score and rank a campaign's applications")
    rank_cmd.add_argument("--campaign", required=True, help="Path to campaign JSON")
    rank_cmd.add_argument("--applications", required=True, help="Path to JSON list of applications")
    rank_cmd.add_argument("--filter", choices=FILTER_TIERS, default="all", help="Recommendation tier filter")
    rank_cmd.add_argument("--sort", choices=SORT_KEYS, default="relevance", help="Sort key (descending)")
    rank_cmd.add_argument("--page", type=int, default=1, help="Page of non-top candidates")
    rank_cmd.add_argument("--page-size", type=int, dest="page_size", help="Candidates per page")
    rank_cmd.add_argument("--concurrency", type=int, help="Maximum applications scored at once")
    rank_cmd.add_argument("--out", help="Output JSON path (default: stdout)")
    rank_cmd.set_defaults(func=cmd_rank)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    try:
        args.func(args)
    except ValueError as exc:
        logger.error("Invalid input: %s", exc)
        sys.exit(2)


if __name__ == "__main__":
    main(sys.argv[1:])
