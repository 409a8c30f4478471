"""Tests for fetching, the selector engine and single-page article extraction."""

import httpx
import pytest
from conftest import article_page

from gnawer.collectors import CollectionError
from gnawer.collectors.scraper import SelectorEngine, extract_article, fetch, fetch_document


@pytest.fixture
def engine():
    return SelectorEngine()


class TestFetch:
    def test_ok_response(self, fake_web):
        fake_web.pages["http://example.com/"] = "<p>hi</p>"
        with fake_web.client() as client:
            response = fetch(client, "http://example.com/")
        assert response.status_code == 200

    @pytest.mark.parametrize("status", [201, 204, 301, 404, 500])
    def test_non_200_is_an_error(self, fake_web, status):
        fake_web.pages["http://example.com/"] = (status, "")
        with fake_web.client() as client, pytest.raises(CollectionError, match="status code error"):
            fetch(client, "http://example.com/")

    def test_transport_error_is_wrapped(self, fake_web):
        fake_web.pages["http://example.com/"] = httpx.ConnectError("connection refused")
        with fake_web.client() as client, pytest.raises(CollectionError) as excinfo:
            fetch(client, "http://example.com/")
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    def test_unencodable_host_is_wrapped(self, fake_web):
        with fake_web.client() as client, pytest.raises(CollectionError, match="Failed to fetch"):
            fetch(client, "http://xn--/")
        assert fake_web.requested == []

    def test_fetch_document_parses_html(self, fake_web, engine):
        fake_web.pages["http://example.com/"] = article_page("Hello", "<p>World</p>")
        with fake_web.client() as client:
            document = fetch_document(client, "http://example.com/", engine)
        assert engine.select_one(document, "h1.title").get_text() == "Hello"


class TestSelectorEngine:
    def test_select_and_attr(self, engine):
        document = engine.parse('<a class="x" href="/1">a</a><a class="x">b</a><a href="/3">c</a>')
        nodes = engine.select(document, "a.x")
        assert [engine.attr(n, "href") for n in nodes] == ["/1", None]

    def test_inner_html(self, engine):
        document = engine.parse('<div id="d"><b>bold</b> text</div>')
        assert engine.inner_html(engine.select_one(document, "#d")) == "<b>bold</b> text"

    def test_invalid_selector_raises_collection_error(self, engine):
        document = engine.parse("<p>x</p>")
        with pytest.raises(CollectionError, match="Invalid selector"):
            engine.select(document, "a[")

    def test_check(self, engine):
        engine.check("div.article > p:first-child")
        with pytest.raises(ValueError):
            engine.check("div[")


class TestExtractArticle:
    def test_extracts_normalized_title_and_content(self, html_task, engine):
        document = engine.parse(
            article_page("Big <em>news</em>", '<p>First <a href="/x">para</a>.</p><p>Second.</p>')
        )
        article = extract_article(html_task, "http://example.com/a1", document, engine)
        assert article is not None
        assert article.url == "http://example.com/a1"
        assert article.title == "Big news"
        assert article.content == "First para.\n\nSecond."

    def test_uses_first_match_only(self, html_task, engine):
        document = engine.parse(
            '<h1 class="title">One</h1><h1 class="title">Two</h1><div class="body">Body</div>'
        )
        article = extract_article(html_task, "http://example.com/a1", document, engine)
        assert article.title == "One"

    @pytest.mark.parametrize(
        "markup",
        [
            '<div class="body">Body only</div>',
            '<h1 class="title">Title only</h1>',
            '<h1 class="title">   </h1><div class="body">Body</div>',
            '<h1 class="title">Title</h1><div class="body"><script>var x;</script></div>',
            '<h1 class="title"><img src="a.png"></h1><div class="body">Body</div>',
            '<h1 class="title"><!-- empty --></h1><div class="body">Body</div>',
            "<p>unrelated page</p>",
        ],
    )
    def test_missing_or_empty_match_yields_nothing(self, html_task, engine, markup):
        document = engine.parse(markup)
        assert extract_article(html_task, "http://example.com/a1", document, engine) is None
