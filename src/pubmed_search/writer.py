"""Utility helpers for exporting search identifiers and article summaries."""

from __future__ import annotations

import csv
import json
import logging
import sqlite3
from pathlib import Path
from typing import Sequence, Tuple

from .records import ArticleSummary
from .search import Search

logger = logging.getLogger(__name__)


def write_identifiers(results: Sequence[Tuple[str, Search]], destination: Path, fmt: str = "json") -> None:
    """Persist the identifiers of completed searches as ``(label, search)`` pairs.

    Labels need not be unique; every search is written in the given order.
    """

    destination = destination.expanduser().resolve()
    destination.parent.mkdir(parents=True, exist_ok=True)
    fmt = fmt.lower()
    logger.info("Writing %d searches to %s as %s", len(results), destination, fmt)

    if fmt == "json":
        _write_json(results, destination)
    elif fmt == "csv":
        _write_csv(results, destination)
    elif fmt == "sqlite":
        _write_sqlite(results, destination)
    else:
        raise ValueError(f"Unsupported output format: {fmt}")


def write_summaries(records: Sequence[ArticleSummary], destination: Path) -> None:
    destination = destination.expanduser().resolve()
    destination.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Writing %d article summaries to %s", len(records), destination)
    payload = [record.to_dict() for record in records]
    destination.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _write_json(results: Sequence[Tuple[str, Search]], destination: Path) -> None:
    payload = [
        {
            "search": label,
            "name": search.name,
            "term": search.term,
            "back_days": search.back_days,
            "total": search.total,
            "page_count": len(search.pages),
            "ids": search.identifiers(),
        }
        for label, search in results
    ]
    destination.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _write_csv(results: Sequence[Tuple[str, Search]], destination: Path) -> None:
    with destination.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=["search", "term", "page", "pmid"])
        writer.writeheader()
        for label, search in results:
            for page in search.pages:
                for pmid in page.ids:
                    writer.writerow({"search": label, "term": search.term, "page": page.index, "pmid": pmid})


def _write_sqlite(results: Sequence[Tuple[str, Search]], destination: Path) -> None:
    connection = sqlite3.connect(destination)
    try:
        connection.execute(
            """
            CREATE TABLE IF NOT EXISTS identifiers (
                search_index INTEGER NOT NULL,
                search TEXT NOT NULL,
                term TEXT NOT NULL,
                page INTEGER NOT NULL,
                position INTEGER NOT NULL,
                pmid TEXT NOT NULL,
                PRIMARY KEY (search_index, position)
            )
            """
        )
        connection.execute("DELETE FROM identifiers")
        connection.executemany(
            """
            INSERT OR REPLACE INTO identifiers (search_index, search, term, page, position, pmid)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (search_index, label, search.term, page.index, page.offset + position, pmid)
                for search_index, (label, search) in enumerate(results)
                for page in search.pages
                for position, pmid in enumerate(page.ids)
            ],
        )
        connection.commit()
    finally:
        connection.close()
