"""Paginated acquisition of PubMed search results."""

from .config import ClientSettings, SearchSpec, load_search_specs
from .decoder import extract_count, extract_identifiers
from .errors import (
    DecodeError,
    MalformedResponse,
    PubMedSearchError,
    SearchStateError,
    TransportError,
)
from .records import ArticleSummary, batched, fetch_summaries, parse_article_set
from .search import IdentifierPage, Search, SearchState, page_count
from .transport import EutilsClient

__all__ = [
    # Search
    "IdentifierPage",
    "Search",
    "SearchState",
    "page_count",
    # Decoding
    "extract_count",
    "extract_identifiers",
    # Errors
    "DecodeError",
    "MalformedResponse",
    "PubMedSearchError",
    "SearchStateError",
    "TransportError",
    # Transport and records
    "ArticleSummary",
    "EutilsClient",
    "batched",
    "fetch_summaries",
    "parse_article_set",
    # Configuration
    "ClientSettings",
    "SearchSpec",
    "load_search_specs",
]

__version__ = "0.1.0"
