"""Count-then-page acquisition of PubMed search results."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional

from .decoder import extract_count, extract_identifiers
from .errors import DecodeError, MalformedResponse, SearchStateError, TransportError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_NAME = "Pubmed Search"
DEFAULT_BACK_DAYS = 7
DEFAULT_PAGE_SIZE = 1000

Fetcher = Callable[[Mapping[str, str]], bytes]


class SearchState(enum.Enum):
    CREATED = "created"
    COUNT_KNOWN = "count_known"
    FULLY_PAGED = "fully_paged"


@dataclass
class IdentifierPage:
    """A contiguous slice of the matching identifiers starting at ``offset``."""

    index: int
    offset: int
    ids: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ids)


def page_count(total: int, page_size: int) -> int:
    """Return the number of pages needed to hold ``total`` identifiers."""

    if total < 0:
        raise ValueError("total cannot be negative")
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return -(-total // page_size)


class Search:
    """A single PubMed query session.

    The total is queried first, then each page of identifiers is requested
    in increasing offset order through the injected ``fetch`` callable.
    A search is not safe to drive from more than one caller at a time.
    """

    def __init__(
        self,
        term: str,
        fetch: Fetcher,
        *,
        back_days: int = DEFAULT_BACK_DAYS,
        page_size: int = DEFAULT_PAGE_SIZE,
        name: str = DEFAULT_SEARCH_NAME,
    ) -> None:
        if not term or not term.strip():
            raise ValueError("term cannot be blank")
        if back_days < 0:
            raise ValueError("back_days cannot be negative")
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.term = term
        self.fetch = fetch
        self.back_days = back_days
        self.page_size = page_size
        self.name = name
        self.total: Optional[int] = None
        self.pages: List[IdentifierPage] = []
        self._state = SearchState.CREATED

    def __repr__(self) -> str:
        return (
            f"Search(name={self.name!r}, back_days={self.back_days}, "
            f"page_size={self.page_size}, total={self.total}, pages={len(self.pages)})"
        )

    @property
    def state(self) -> SearchState:
        return self._state

    def query_total(self) -> int:
        """Ask the service how many records match and store the result."""

        params = self._base_params()
        params["rettype"] = "count"
        total = self._fetch_and_decode(params, "count", extract_count)
        logger.info("%s: %d records match over the last %d days", self.name, total, self.back_days)
        self.total = total
        if self._state is SearchState.CREATED:
            self._state = SearchState.COUNT_KNOWN
        return total

    def page_count(self) -> int:
        """Return the number of pages for the known total.

        Raises :class:`SearchStateError` when the total has not been queried,
        so an unknown total is never mistaken for zero matches.
        """

        if self.total is None:
            raise SearchStateError("total is unknown; call query_total() first", stage="page count")
        return page_count(self.total, self.page_size)

    def query_page(self, index: int) -> IdentifierPage:
        """Fetch the identifiers of page ``index`` without storing them."""

        if index < 0:
            raise ValueError("page index cannot be negative")
        stage = f"page {index}"
        if self.total is None:
            raise SearchStateError("total is unknown; call query_total() first", stage=stage)

        offset = index * self.page_size
        params = self._base_params()
        params["retstart"] = str(offset)
        params["retmax"] = str(self.page_size)
        ids = self._fetch_and_decode(params, stage, extract_identifiers)
        logger.debug("%s: page %d at offset %d returned %d ids", self.name, index, offset, len(ids))
        return IdentifierPage(index=index, offset=offset, ids=ids)

    def query_all(self) -> List[IdentifierPage]:
        """Query the total and then every page in order.

        Stops at the first failing page; pages retrieved before the failure
        remain in :attr:`pages` until the next call, which starts over from
        page 0.
        """

        self.query_total()
        count = self.page_count()
        self.pages = []
        self._state = SearchState.COUNT_KNOWN
        for index in range(count):
            self.pages.append(self.query_page(index))
        self._state = SearchState.FULLY_PAGED
        for page in self.pages:
            logger.info("%s: page #%d holds %d ids", self.name, page.index, len(page))
        return self.pages

    def identifiers(self) -> List[str]:
        """Return every accumulated identifier in page order."""

        return [pmid for page in self.pages for pmid in page.ids]

    def _base_params(self) -> Dict[str, str]:
        return {
            "reldate": str(self.back_days),
            "datetype": "pdat",
            "term": self.term,
        }

    def _fetch_and_decode(self, params: Dict[str, str], stage: str, decode):
        logger.debug("%s: requesting %s with %s", self.name, stage, params)
        try:
            payload = self.fetch(params)
        except Exception as exc:
            raise TransportError(f"fetch failed: {exc}", stage=stage) from exc
        try:
            return decode(payload)
        except MalformedResponse as exc:
            raise DecodeError(str(exc), stage=stage) from exc
