import pytest

from pubmed_search.errors import MalformedResponse
from pubmed_search.records import ArticleSummary, batched, fetch_summaries, parse_article_set


def test_parse_article_set_maps_fields(sample_article_xml):
    summaries = parse_article_set(sample_article_xml.encode())

    assert [summary.pmid for summary in summaries] == ["30000001", "30000002"]
    first = summaries[0]
    assert first.title == "Outcomes after early intervention."
    assert first.abstract == "Early intervention is debated."
    assert first.journal == "Circulation"
    assert first.journal_abbrev == "Circulation"
    assert first.pages == "512-520"
    assert first.keywords == ["cardiology", "registry"]
    assert first.publication_date == "2019-08-06"
    assert first.doi == "10.1161/CIRC.0001"
    assert first.url == "https://pubmed.ncbi.nlm.nih.gov/30000001/"


def test_parse_article_set_falls_back_to_entrez_date(sample_article_xml):
    second = parse_article_set(sample_article_xml)[1]
    assert second.publication_date == "2020-01-15"
    assert second.abstract is None
    assert second.doi is None
    assert second.pages is None
    assert second.keywords == []


def test_parse_article_set_rejects_invalid_xml():
    with pytest.raises(MalformedResponse):
        parse_article_set(b"<PubmedArticleSet><PubmedArticle>")


def test_to_dict_includes_url():
    data = ArticleSummary(pmid="42", title="T").to_dict()
    assert data["pmid"] == "42"
    assert data["url"] == "https://pubmed.ncbi.nlm.nih.gov/42/"


def test_batched_slices_in_order():
    assert list(batched(["1", "2", "3", "4", "5"], 2)) == [["1", "2"], ["3", "4"], ["5"]]
    assert list(batched([], 3)) == []
    with pytest.raises(ValueError):
        list(batched(["1"], 0))


def test_fetch_summaries_requests_each_batch(sample_article_xml):
    class StubClient:
        def __init__(self) -> None:
            self.batches = []

        def efetch(self, pmids):
            self.batches.append(list(pmids))
            return sample_article_xml

    client = StubClient()
    summaries = fetch_summaries(client, ["30000001", "30000002", "30000003"], batch_size=2)

    assert client.batches == [["30000001", "30000002"], ["30000003"]]
    assert len(summaries) == 4
