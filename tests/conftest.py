"""Shared pytest configuration and fixtures for all tests."""

import json
import time
from typing import Dict, List, Mapping, Optional

import pytest


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (may require network)"
    )


# ==================== Payload Builders ====================


def count_payload(count) -> bytes:
    """Build an esearch ``rettype=count`` body."""
    return json.dumps({"header": {"type": "esearch"}, "esearchresult": {"count": str(count)}}).encode()


def idlist_payload(ids: List[str], count: Optional[int] = None) -> bytes:
    """Build an esearch body carrying an identifier list."""
    result = {
        "count": str(count if count is not None else len(ids)),
        "retmax": str(len(ids)),
        "idlist": list(ids),
    }
    return json.dumps({"header": {"type": "esearch"}, "esearchresult": result}).encode()


def make_ids(start: int, length: int) -> List[str]:
    return [str(30000000 + value) for value in range(start, start + length)]


# ==================== Fake Fetcher ====================


class FakeFetcher:
    """Serves canned esearch payloads and records every request made."""

    def __init__(self, total: int, page_sizes: Optional[List[int]] = None, fail_at: Optional[int] = None):
        self.total = total
        self.page_sizes = page_sizes
        self.fail_at = fail_at
        self.requests: List[Dict[str, str]] = []

    def __call__(self, params: Mapping[str, str]) -> bytes:
        self.requests.append(dict(params))
        if params.get("rettype") == "count":
            return count_payload(self.total)

        start = int(params["retstart"])
        retmax = int(params["retmax"])
        index = start // retmax
        if self.fail_at is not None and index == self.fail_at:
            raise ConnectionError(f"connection reset on page {index}")
        if self.page_sizes is not None:
            length = self.page_sizes[index]
        else:
            length = max(0, min(retmax, self.total - start))
        return idlist_payload(make_ids(start, length), count=self.total)

    @property
    def page_requests(self) -> List[Dict[str, str]]:
        return [request for request in self.requests if "retstart" in request]


@pytest.fixture
def sample_term():
    """Provide an opaque PubMed term with field tags and boolean operators."""
    return 'loattrfree full text[Filter] AND ("Circulation"[jour] OR "Heart"[jour])'


@pytest.fixture
def sample_article_xml():
    """Provide a two-article efetch document."""
    return """<?xml version="1.0" ?>
<PubmedArticleSet>
  <PubmedArticle>
    <MedlineCitation Status="MEDLINE" Owner="NLM">
      <PMID Version="1">30000001</PMID>
      <Article PubModel="Print">
        <Journal>
          <JournalIssue CitedMedium="Internet">
            <Volume>140</Volume>
            <PubDate>
              <Year>2019</Year>
              <Month>Aug</Month>
              <Day>06</Day>
            </PubDate>
          </JournalIssue>
          <Title>Circulation</Title>
          <ISOAbbreviation>Circulation</ISOAbbreviation>
        </Journal>
        <ArticleTitle>Outcomes after <i>early</i> intervention.</ArticleTitle>
        <Pagination>
          <MedlinePgn>512-520</MedlinePgn>
        </Pagination>
        <Abstract>
          <AbstractText Label="BACKGROUND">Early intervention is debated.</AbstractText>
          <AbstractText Label="METHODS">We pooled registries.</AbstractText>
        </Abstract>
      </Article>
      <KeywordList Owner="NOTNLM">
        <Keyword>cardiology</Keyword>
        <Keyword> registry </Keyword>
      </KeywordList>
    </MedlineCitation>
    <PubmedData>
      <ArticleIdList>
        <ArticleId IdType="pubmed">30000001</ArticleId>
        <ArticleId IdType="doi">10.1161/CIRC.0001</ArticleId>
      </ArticleIdList>
    </PubmedData>
  </PubmedArticle>
  <PubmedArticle>
    <MedlineCitation>
      <PMID Version="1">30000002</PMID>
      <Article>
        <Journal>
          <JournalIssue>
            <PubDate>
              <MedlineDate>2020 Winter</MedlineDate>
            </PubDate>
          </JournalIssue>
          <Title>Heart</Title>
        </Journal>
        <ArticleTitle>Second article</ArticleTitle>
      </Article>
    </MedlineCitation>
    <PubmedData>
      <History>
        <PubMedPubDate PubStatus="received">
          <Year>2019</Year>
          <Month>11</Month>
          <Day>2</Day>
        </PubMedPubDate>
        <PubMedPubDate PubStatus="entrez">
          <Year>2020</Year>
          <Month>1</Month>
          <Day>15</Day>
        </PubMedPubDate>
      </History>
    </PubmedData>
  </PubmedArticle>
  <PubmedArticle>
    <MedlineCitation>
      <Article>
        <ArticleTitle>No identifier</ArticleTitle>
      </Article>
    </MedlineCitation>
  </PubmedArticle>
</PubmedArticleSet>
"""


# ==================== Integration Test Helpers ====================


@pytest.fixture
def rate_limit():
    """Add delay between integration tests to avoid rate limiting."""
    yield
    time.sleep(1.0)


@pytest.fixture
def skip_if_no_network():
    """Skip test if network is unavailable."""
    import socket

    try:
        socket.create_connection(("eutils.ncbi.nlm.nih.gov", 443), timeout=5)
    except OSError:
        pytest.skip("Network unavailable")
