"""Configuration for searches and the E-utilities client."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .search import DEFAULT_BACK_DAYS
from .transport import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "NCBI_API_KEY"
EMAIL_ENV_VAR = "NCBI_EMAIL"
TIMEOUT_ENV_VAR = "PUBMED_SEARCH_TIMEOUT"


@dataclass
class SearchSpec:
    """One entry of a searches file: a labelled term and its recency window."""

    term: str
    back_days: int = DEFAULT_BACK_DAYS
    category: Optional[str] = None

    def __post_init__(self) -> None:
        normalized = (self.term or "").strip()
        if not normalized:
            msg = "term cannot be blank"
            raise ValueError(msg)
        self.term = normalized
        try:
            self.back_days = int(self.back_days)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"reldate must be an integer, got {self.back_days!r}") from exc
        if self.back_days < 0:
            raise ValueError("reldate cannot be negative")

    @property
    def label(self) -> str:
        return self.category or self.term


def load_search_specs(path: Path) -> List[SearchSpec]:
    """Read a JSON list of ``{"category", "term", "reldate"}`` objects."""

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of searches")

    specs: List[SearchSpec] = []
    for position, entry in enumerate(data):
        if not isinstance(entry, dict) or not isinstance(entry.get("term"), str):
            raise ValueError(f"Search #{position} in {path} has no term")
        specs.append(
            SearchSpec(
                term=entry["term"],
                back_days=entry.get("reldate", DEFAULT_BACK_DAYS),
                category=entry.get("category"),
            )
        )
    logger.debug("Loaded %d searches from %s", len(specs), path)
    return specs


@dataclass
class ClientSettings:
    """Credentials and timeout handed to :class:`EutilsClient`."""

    api_key: Optional[str] = None
    email: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "ClientSettings":
        timeout_text = os.getenv(TIMEOUT_ENV_VAR)
        try:
            timeout = float(timeout_text) if timeout_text else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning("Ignoring invalid %s value: %s", TIMEOUT_ENV_VAR, timeout_text)
            timeout = DEFAULT_TIMEOUT
        return cls(
            api_key=os.getenv(API_KEY_ENV_VAR) or None,
            email=os.getenv(EMAIL_ENV_VAR) or None,
            timeout=timeout,
        )

    def override(self, *, api_key: Optional[str] = None, email: Optional[str] = None) -> "ClientSettings":
        """Return a copy with any explicitly provided values replacing these."""

        return ClientSettings(
            api_key=api_key or self.api_key,
            email=email or self.email,
            timeout=self.timeout,
        )
