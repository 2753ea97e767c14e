"""HTTP access to the PubMed E-utilities endpoints."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

import requests

logger = logging.getLogger(__name__)

EUTILS_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
USER_AGENT = "pubmed-search/0.1"
DEFAULT_TIMEOUT = 90.0


class EutilsClient:
    """Thin wrapper around the ``esearch`` and ``efetch`` endpoints.

    Instances are callable with a mapping of esearch parameters so they can
    be handed to :class:`pubmed_search.search.Search` as its fetcher.
    Failures are raised as :mod:`requests` exceptions; no retries are made.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        email: Optional[str] = None,
        *,
        tool: str = "pubmed-search",
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = EUTILS_BASE,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.email = email
        self.tool = tool
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = USER_AGENT
        self.session = session

    def esearch(self, params: Mapping[str, str]) -> bytes:
        """Run an esearch request and return the raw JSON body."""

        payload = {"db": "pubmed", "retmode": "json", **params}
        return self._get("esearch.fcgi", payload)

    __call__ = esearch

    def efetch(self, pmids: Iterable[str]) -> bytes:
        """Fetch PubMed XML records for the given identifiers."""

        id_param = ",".join(pmids)
        if not id_param:
            return b""
        payload = {"db": "pubmed", "retmode": "xml", "rettype": "abstract", "id": id_param}
        return self._get("efetch.fcgi", payload)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "EutilsClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get(self, endpoint: str, params: Mapping[str, str]) -> bytes:
        payload = dict(params)
        if self.api_key:
            payload["api_key"] = self.api_key
        if self.email:
            payload["email"] = self.email
        if self.tool:
            payload["tool"] = self.tool
        url = f"{self.base_url}/{endpoint}"

        logger.debug("GET %s %s", url, {k: v for k, v in payload.items() if k != "api_key"})
        response = self.session.get(url, params=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.content
