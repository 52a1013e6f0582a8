"""Tests for article extraction with page fetch and summary fallback."""

import pytest

from civicnews.fetchers import HttpFetcher
from civicnews.models import RawEntry
from civicnews.processors import ArticleExtractor, extract_main_text
from civicnews.errors import ParseError

from fakes import FakeGet, FakeResponse, make_source, no_sleep

LINK = "https://cbc.example.ca/news/politics/budget?utm_source=rss"
BODY = "The federal budget was tabled in the House of Commons today. " * 10


def page(body: str) -> str:
    return (
        "<html><head><script>var tracking = 1;</script><style>.x{}</style></head><body>"
        "<nav>Home | Politics | Sports</nav>"
        f"<article><p>{body}</p></article>"
        "<footer>Copyright</footer></body></html>"
    )


def entry(**overrides) -> RawEntry:
    data = dict(title="Budget tabled", link=LINK, summary_html="<p>Short <b>summary</b> of the budget.</p>")
    data.update(overrides)
    return RawEntry(**data)


def extractor_for(routes) -> ArticleExtractor:
    return ArticleExtractor(HttpFetcher(get=FakeGet(routes), sleep=no_sleep))


class TestExtractMainText:
    def test_strips_noise(self):
        text = extract_main_text(page(BODY))
        assert text.startswith("The federal budget")
        assert "tracking" not in text
        assert "Home | Politics" not in text
        assert "Copyright" not in text

    def test_empty_page(self):
        with pytest.raises(ParseError):
            extract_main_text("<html><body>   </body></html>")


class TestArticleExtractor:
    def test_uses_page_content(self):
        article = extractor_for({LINK: FakeResponse(200, page(BODY))}).extract(entry(), make_source())
        assert article is not None
        assert article.content_origin == "page"
        assert article.canonical_url == "https://cbc.example.ca/news/politics/budget"
        assert article.url == LINK
        assert article.source_id == "cbc"
        assert "House of Commons" in article.cleaned_text

    def test_falls_back_to_summary_on_fetch_failure(self):
        article = extractor_for({LINK: FakeResponse(500)}).extract(entry(), make_source())
        assert article is not None
        assert article.content_origin == "summary"
        assert article.cleaned_text == "Short summary of the budget."

    def test_falls_back_to_summary_when_page_too_short(self):
        article = extractor_for({LINK: FakeResponse(200, page("Too short."))}).extract(entry(), make_source())
        assert article.content_origin == "summary"

    def test_caps_length(self):
        long_body = "Parliament debated the motion at length. " * 400
        article = extractor_for({LINK: FakeResponse(200, page(long_body))}).extract(entry(), make_source())
        assert article.content_origin == "page"
        assert 0 < len(article.cleaned_text) <= 5000

    @pytest.mark.parametrize("link", ["", "mailto:desk@cbc.ca", "/relative/path"])
    def test_rejects_unusable_links(self, link):
        assert extractor_for({}).extract(entry(link=link), make_source()) is None

    def test_summary_only_mode(self):
        get = FakeGet({LINK: FakeResponse(200, page(BODY))})
        extractor = ArticleExtractor(HttpFetcher(get=get, sleep=no_sleep), fetch_full_content=False)
        article = extractor.extract(entry(), make_source())
        assert article.content_origin == "summary"
        assert get.calls == []
