"""Command-line entry point for paginated PubMed identifier collection."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import requests

from .config import ClientSettings, SearchSpec, load_search_specs
from .errors import MalformedResponse, PubMedSearchError
from .records import DEFAULT_BATCH_SIZE, fetch_summaries
from .search import DEFAULT_BACK_DAYS, DEFAULT_PAGE_SIZE, Search
from .transport import EutilsClient
from .writer import write_identifiers, write_summaries

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("term", nargs="?", default=None, help="PubMed search term")
    parser.add_argument(
        "--searches",
        type=Path,
        default=None,
        help="JSON file listing searches as {category, term, reldate} objects",
    )
    parser.add_argument(
        "--back-days",
        type=int,
        default=DEFAULT_BACK_DAYS,
        help="Only match records published in the last N days (default: %(default)s)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help="Maximum identifiers requested per page (default: %(default)s)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("pubmed_ids.json"),
        help="Output path for collected identifiers",
    )
    parser.add_argument("--format", choices=["json", "csv", "sqlite"], default="json", help="Output format")
    parser.add_argument(
        "--fetch-records",
        type=Path,
        default=None,
        help="Also fetch article summaries for every identifier and write them as JSON here",
    )
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE, help="Identifiers per efetch request")
    parser.add_argument("--email", help="Email address provided to NCBI", default=None)
    parser.add_argument("--api-key", help="NCBI API key", default=None)
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if bool(args.term and args.term.strip()) == bool(args.searches):
        parser.error("Provide either a search term or --searches, but not both")
    if args.page_size <= 0:
        parser.error("--page-size must be positive")
    if args.back_days < 0:
        parser.error("--back-days cannot be negative")

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s:%(name)s:%(message)s")

    if args.searches:
        try:
            specs = load_search_specs(args.searches)
        except (OSError, ValueError) as exc:
            logger.error("Could not load searches from %s: %s", args.searches, exc)
            return 1
    else:
        specs = [SearchSpec(term=args.term, back_days=args.back_days)]

    settings = ClientSettings.from_env().override(api_key=args.api_key, email=args.email)
    with EutilsClient(api_key=settings.api_key, email=settings.email, timeout=settings.timeout) as client:
        results: List[Tuple[str, Search]] = []
        for spec in specs:
            search = Search(spec.term, client, back_days=spec.back_days, page_size=args.page_size, name=spec.label)
            try:
                search.query_all()
            except PubMedSearchError as exc:
                logger.error("Search %r failed after %d pages: %s", spec.label, len(search.pages), exc)
                return 1
            results.append((spec.label, search))

        write_identifiers(results, args.output, fmt=args.format)
        logger.info("Wrote identifiers for %d searches to %s", len(results), args.output)

        if args.fetch_records:
            pmids = list(dict.fromkeys(pmid for _, search in results for pmid in search.identifiers()))
            try:
                summaries = fetch_summaries(client, pmids, batch_size=args.batch_size)
            except (requests.RequestException, MalformedResponse) as exc:
                logger.error("Fetching article records failed: %s", exc)
                return 1
            write_summaries(summaries, args.fetch_records)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
