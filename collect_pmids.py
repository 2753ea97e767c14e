"""Command-line entry point for collecting PubMed identifiers page by page."""

from __future__ import annotations

from pubmed_search.cli import main


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
