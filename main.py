# main.py
"""CLI entry point for querying the movies graph."""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

import structlog
from config import ACCESS_STRATEGIES, settings
from core.db_manager import neo4j_manager
from core.exceptions import MovieGraphError
from data_access import get_movie_repository
from models import GraphModel

from utils import setup_logging

logger = structlog.get_logger(__name__)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, GraphModel):
        return value.to_properties()
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Query the movies graph.")
    parser.add_argument(
        "--strategy",
        choices=ACCESS_STRATEGIES,
        default=settings.ACCESS_STRATEGY,
        help="How queries are executed against Neo4j",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    list_cmd = commands.add_parser("list", help="List every Movie or Person")
    list_cmd.add_argument("label", nargs="?", default="Movie")

    title_cmd = commands.add_parser("title", help="Look up a movie by title")
    title_cmd.add_argument("title")

    related_cmd = commands.add_parser(
        "related", help="Names of people related to a movie"
    )
    related_cmd.add_argument("title")
    related_cmd.add_argument("relationship", nargs="?", default="ACTED_IN")

    by_movie_cmd = commands.add_parser(
        "by-movie", help="People related to every movie, grouped by title"
    )
    by_movie_cmd.add_argument("relationship", nargs="?", default="ACTED_IN")

    person_cmd = commands.add_parser("add-person", help="Find or create a person")
    person_cmd.add_argument("name")
    person_cmd.add_argument("born", nargs="?", type=int, default=None)

    link_cmd = commands.add_parser(
        "link", help="Relate a person to a movie, creating the person if needed"
    )
    link_cmd.add_argument("title")
    link_cmd.add_argument("relationship")
    link_cmd.add_argument("name")

    commands.add_parser("init-schema", help="Create constraints and schema tokens")
    return parser


async def run(args: argparse.Namespace) -> Any:
    async with neo4j_manager:
        if args.command == "init-schema":
            await neo4j_manager.create_db_schema()
            return None
        repository = get_movie_repository(args.strategy)
        if args.command == "list":
            return await repository.list_all(args.label)
        if args.command == "title":
            return await repository.get_by_title(args.title)
        if args.command == "related":
            return await repository.get_related_names_by_title(
                args.title, args.relationship
            )
        if args.command == "by-movie":
            return await repository.get_all_related_by_entity(args.relationship)
        if args.command == "add-person":
            return await repository.upsert_person(args.name, args.born)
        if args.command == "link":
            return await repository.link_person_to_entity(
                args.title, args.relationship, args.name
            )
    raise ValueError(f"Unknown command {args.command!r}")


def main() -> None:
    """Parse command-line arguments and run one query."""
    args = build_parser().parse_args()
    setup_logging()
    try:
        result = asyncio.run(run(args))
    except MovieGraphError as exc:
        logger.error("Request failed", command=args.command, error=str(exc))
        raise SystemExit(1) from exc
    print(json.dumps(_to_jsonable(result), indent=2))


if __name__ == "__main__":
    main()
