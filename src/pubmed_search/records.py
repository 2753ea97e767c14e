"""Lightweight article summaries built from PubMed efetch XML."""

from __future__ import annotations

import calendar
import logging
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from typing import Iterator, List, Optional, Sequence, Union

from .errors import MalformedResponse

logger = logging.getLogger(__name__)

PUBMED_ARTICLE_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
DEFAULT_BATCH_SIZE = 500


@dataclass
class ArticleSummary:
    """The handful of fields needed to describe an article downstream."""

    pmid: str
    title: Optional[str] = None
    abstract: Optional[str] = None
    journal: Optional[str] = None
    journal_abbrev: Optional[str] = None
    pages: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    publication_date: Optional[str] = None
    doi: Optional[str] = None

    @property
    def url(self) -> str:
        return PUBMED_ARTICLE_URL.format(pmid=self.pmid)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["url"] = self.url
        return data


def parse_article_set(payload: Union[bytes, str]) -> List[ArticleSummary]:
    """Parse a ``PubmedArticleSet`` document into summaries."""

    try:
        root = ET.fromstring(payload)
    except ET.ParseError as exc:
        raise MalformedResponse("Unable to parse PubMed XML") from exc

    summaries: List[ArticleSummary] = []
    for article in root.iter("PubmedArticle"):
        pmid = _find_text(article, "MedlineCitation/PMID")
        if not pmid:
            logger.warning("Skipping article without PMID")
            continue
        summaries.append(
            ArticleSummary(
                pmid=pmid,
                title=_find_text(article, ".//Article/ArticleTitle"),
                abstract=_find_text(article, ".//Article/Abstract/AbstractText"),
                journal=_find_text(article, ".//Article/Journal/Title"),
                journal_abbrev=_find_text(article, ".//Article/Journal/ISOAbbreviation"),
                pages=_find_text(article, ".//Article/Pagination/MedlinePgn"),
                keywords=[
                    (element.text or "").strip()
                    for element in article.findall(".//KeywordList/Keyword")
                    if (element.text or "").strip()
                ],
                publication_date=_parse_publication_date(article),
                doi=_find_article_id(article, "doi"),
            )
        )
    return summaries


def batched(pmids: Sequence[str], size: int) -> Iterator[List[str]]:
    """Yield consecutive slices of at most ``size`` identifiers."""

    if size <= 0:
        raise ValueError("size must be positive")
    for start in range(0, len(pmids), size):
        yield list(pmids[start : start + size])


def fetch_summaries(client, pmids: Sequence[str], *, batch_size: int = DEFAULT_BATCH_SIZE) -> List[ArticleSummary]:
    """Fetch summaries for ``pmids`` one batch at a time.

    ``client`` needs an ``efetch(pmids) -> bytes`` method, such as
    :class:`pubmed_search.transport.EutilsClient`.
    """

    summaries: List[ArticleSummary] = []
    for number, batch in enumerate(batched(pmids, batch_size)):
        logger.info("Fetching records %d-%d", number * batch_size, number * batch_size + len(batch))
        summaries.extend(parse_article_set(client.efetch(batch)))
    return summaries


def _find_text(node: ET.Element, path: str) -> Optional[str]:
    element = node.find(path)
    if element is None:
        return None
    text = "".join(element.itertext()).strip()
    return text or None


def _find_article_id(article: ET.Element, id_type: str) -> Optional[str]:
    for element in article.findall("PubmedData/ArticleIdList/ArticleId"):
        if element.get("IdType") == id_type and (element.text or "").strip():
            return element.text.strip()
    return None


def _parse_publication_date(article: ET.Element) -> Optional[str]:
    pub_date = article.find(".//Article/Journal/JournalIssue/PubDate")
    if pub_date is not None and _find_text(pub_date, "Year"):
        return _format_date(pub_date)

    # Journal dates without a year fall back to the record history.
    history = article.findall("PubmedData/History/PubMedPubDate")
    preferred = [node for node in history if node.get("PubStatus") == "entrez"]
    for node in preferred or history:
        if _find_text(node, "Year"):
            return _format_date(node)

    if pub_date is not None:
        return _find_text(pub_date, "MedlineDate")
    return None


def _format_date(node: ET.Element) -> Optional[str]:
    year = _find_text(node, "Year")
    month = _month_number(_find_text(node, "Month"))
    day_text = _find_text(node, "Day")
    day = int(day_text) if day_text and day_text.isdigit() else 1
    try:
        return f"{int(year):04d}-{month:02d}-{day:02d}"
    except (TypeError, ValueError):
        logger.debug("Unable to format publication date with year %r", year)
        return year


def _month_number(month: Optional[str]) -> int:
    if not month:
        return 1
    month_clean = month.strip().lower()
    if month_clean.isdigit():
        value = int(month_clean)
        return value if 1 <= value <= 12 else 1
    abbrevs = [name.lower() for name in calendar.month_abbr]
    if month_clean and month_clean[:3] in abbrevs:
        return abbrevs.index(month_clean[:3])
    return 1
