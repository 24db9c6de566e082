from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from synrewrite.app.tracing import TraceCollector
from synrewrite.retriever.query import BooleanOperator, MultiFieldQueryStringQuery
from synrewrite.retriever.synonyms import rewrite_query
from synrewrite.store.synonym_loader import load_synonyms

DEFAULT_SYNONYMS_PATH = Path(__file__).resolve().parents[1] / "shared" / "normalize" / "synonyms.yaml"


class CLIError(Exception):
    """Raised when user input is invalid."""


def _parse_fields(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [field.strip() for field in raw.split(",") if field.strip()]


def _parse_operator(raw: str) -> BooleanOperator:
    try:
        return BooleanOperator(raw.strip().upper())
    except ValueError:
        raise CLIError(f"Unsupported operator '{raw}'. Allowed: AND, OR") from None


def _load(path: str, bidirectional: bool = False):
    synonyms_path = Path(path).expanduser()
    if not synonyms_path.exists():
        raise CLIError(f"File not found: {synonyms_path}")
    try:
        return load_synonyms(synonyms_path, bidirectional=bidirectional)
    except (ValueError, yaml.YAMLError) as exc:
        raise CLIError(f"Invalid synonyms file {synonyms_path}: {exc}") from exc


def cmd_rewrite(args: argparse.Namespace) -> None:
    operator = _parse_operator(args.operator)
    synonyms = _load(args.synonyms, args.bidirectional) if args.synonyms_enabled else {}
    current = MultiFieldQueryStringQuery(
        query=args.query,
        fields=_parse_fields(args.fields),
        analyzer=args.analyzer,
        default_operator=operator,
    )
    collector = TraceCollector(forward=None)
    result = rewrite_query(current, synonyms, synonyms_enabled=args.synonyms_enabled, notify=collector)

    for message in collector.messages:
        print(f"Note: {message}", file=sys.stderr)

    if args.json:
        payload = {
            "rewritten": result.rewritten,
            "reason": None if result.rewritten else result.reason.value,
            "body": result.query.to_request_body(),
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    if not result.rewritten:
        print(f"Unchanged ({result.reason.value}): {current.query or ''}")
        return
    query = result.query
    print(query.query)
    if query.minimum_should_match:
        print(f"minimum_should_match: {query.minimum_should_match}")


def cmd_synonyms(args: argparse.Namespace) -> None:
    synonyms = _load(args.synonyms, args.bidirectional)
    mapping = {key: sorted(values) for key, values in sorted(synonyms.items())}
    print(yaml.safe_dump(mapping, allow_unicode=True, sort_keys=True).rstrip())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Rewrite search queries with configured synonyms.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    rewrite = subparsers.add_parser("rewrite", help="Rewrite a query string.")
    rewrite.add_argument("--query", required=True)
    rewrite.add_argument("--synonyms", default=str(DEFAULT_SYNONYMS_PATH))
    rewrite.add_argument("--fields", default=None, help="Comma-separated list of fields.")
    rewrite.add_argument("--analyzer", default=None)
    rewrite.add_argument("--operator", default="OR", help="Default operator: AND or OR.")
    rewrite.add_argument("--bidirectional", action="store_true")
    rewrite.add_argument(
        "--synonyms-enabled",
        dest="synonyms_enabled",
        action=argparse.BooleanOptionalAction,
        default=True,
    )
    rewrite.add_argument("--json", action="store_true", help="Print the search request body.")
    rewrite.set_defaults(func=cmd_rewrite)

    synonyms = subparsers.add_parser("synonyms", help="Show the normalized synonym dictionary.")
    synonyms.add_argument("--synonyms", default=str(DEFAULT_SYNONYMS_PATH))
    synonyms.add_argument("--bidirectional", action="store_true")
    synonyms.set_defaults(func=cmd_synonyms)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.func(args)
    except CLIError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
