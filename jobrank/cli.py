"""
Command line interface for jobrank.

This module exposes subcommands to exercise each part of the engine
against a YAML/JSON data file: recommending listings to a user,
interpreting a search phrase, running the listing page and AI search
queries, and extracting résumé keywords.  Results are printed as JSON.

Providers are built once from the settings (``.env``, environment and
the optional ``--config`` YAML file) and handed to the components; with
no API keys configured every command still works through the
deterministic fallbacks.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import List

from .config import Settings, load_settings
from .errors import JobRankError
from .rank.llm_providers import get_ranking_provider, get_search_provider
from .rank.recommend import Recommender
from .resume.keywords import resume_keywords_from_file
from .search.interpret import QueryInterpreter
from .search.service import list_jobs, search_jobs
from .store import InMemoryStore

logger = logging.getLogger("jobrank.cli")


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _search_deadline(args: argparse.Namespace, settings: Settings):
    if args.no_deadline:
        return None
    if args.deadline is not None:
        return args.deadline
    return settings.search_deadline


def cmd_recommend(args: argparse.Namespace, settings: Settings) -> None:
    """Rank the active jobs for one user."""
    store = InMemoryStore.from_file(args.data)
    recommender = Recommender(
        store,
        provider=get_ranking_provider(settings),
        timeout=settings.rank_timeout,
        excerpt=settings.description_excerpt,
    )
    jobs = recommender.recommend(args.user, limit=args.limit)
    _print_json([job.to_document() for job in jobs])


def _search_interpreter(args: argparse.Namespace, settings: Settings) -> QueryInterpreter:
    deadline = _search_deadline(args, settings)
    provider = get_search_provider(dataclasses.replace(settings, search_deadline=deadline))
    return QueryInterpreter(provider, deadline=deadline)


def cmd_interpret(args: argparse.Namespace, settings: Settings) -> None:
    """Print the structured intent for a search phrase."""
    interpreter = _search_interpreter(args, settings)
    intent = interpreter.interpret(args.text)
    payload = intent.to_dict()
    if intent.error:
        payload["error"] = intent.error
    _print_json(payload)


def cmd_search(args: argparse.Namespace, settings: Settings) -> None:
    """Run the AI search against the data file."""
    store = InMemoryStore.from_file(args.data)
    interpreter = _search_interpreter(args, settings)
    result = search_jobs(
        store,
        args.text,
        interpreter,
        status=args.status,
        location=args.location,
        skills=args.skills,
        min_experience=args.min_experience,
    )
    _print_json(result.to_dict())


def cmd_jobs(args: argparse.Namespace, settings: Settings) -> None:
    """List jobs with filters and an optional search phrase."""
    store = InMemoryStore.from_file(args.data)
    jobs = list_jobs(
        store,
        search=args.search,
        interpreter=QueryInterpreter(get_search_provider(dataclasses.replace(settings, search_deadline=None))),
        status=args.status,
        location=args.location,
        skills=args.skills,
        min_experience=args.min_experience,
    )
    _print_json([job.to_document() for job in jobs])


def cmd_resume_keywords(args: argparse.Namespace, settings: Settings) -> None:
    """Extract profile keywords from a résumé file."""
    _print_json(resume_keywords_from_file(args.file, limit=args.limit))


def _add_filters(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--data", required=True, help="YAML/JSON file with users and jobs")
    cmd.add_argument("--status", help="Job status to match (default: active)")
    cmd.add_argument("--location", help="Case-insensitive location filter")
    cmd.add_argument("--skills", help="Comma separated skills; any must match")
    cmd.add_argument("--min-experience", type=int, dest="min_experience",
                     help="Only jobs requiring at most this many years")


def _add_deadline(cmd: argparse.ArgumentParser) -> None:
    group = cmd.add_mutually_exclusive_group()
    group.add_argument("--deadline", type=float, help="Seconds to wait for the search provider")
    group.add_argument("--no-deadline", action="store_true", dest="no_deadline",
                       help="Wait for the search provider without a deadline")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobrank", description="Job ranking and search interpretation")
    parser.add_argument("--config", help="Optional YAML settings file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    rec_cmd = subparsers.add_parser("recommend", help="Recommend jobs to a user")
    rec_cmd.add_argument("--data", required=True, help="YAML/JSON file with users and jobs")
    rec_cmd.add_argument("--user", required=True, help="User id")
    rec_cmd.add_argument("--limit", type=int, default=10, help="Maximum number of jobs")
    rec_cmd.set_defaults(func=cmd_recommend)

    int_cmd = subparsers.add_parser("interpret", help="Interpret a search phrase")
    int_cmd.add_argument("text", help="Search phrase")
    _add_deadline(int_cmd)
    int_cmd.set_defaults(func=cmd_interpret)

    search_cmd = subparsers.add_parser("search", help="AI search over the jobs")
    search_cmd.add_argument("text", help="Search phrase")
    _add_filters(search_cmd)
    _add_deadline(search_cmd)
    search_cmd.set_defaults(func=cmd_search)

    jobs_cmd = subparsers.add_parser("jobs", help="List jobs")
    jobs_cmd.add_argument("--search", help="Optional search phrase")
    _add_filters(jobs_cmd)
    jobs_cmd.set_defaults(func=cmd_jobs)

    resume_parser = subparsers.add_parser("resume", help="Résumé related commands")
    resume_sub = resume_parser.add_subparsers(dest="subcommand", required=True)
    kw_cmd = resume_sub.add_parser("keywords", help="Extract keywords from a résumé file")
    kw_cmd.add_argument("--file", required=True, help="Path to résumé file (txt, pdf, doc, docx)")
    kw_cmd.add_argument("--limit", type=int, default=20, help="Maximum number of keywords")
    kw_cmd.set_defaults(func=cmd_resume_keywords)
    return parser


def main(argv: List[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
        logging.basicConfig(level=settings.numeric_log_level, format="[%(levelname)s] %(message)s")
        args.func(args, settings)
    except (JobRankError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
