"""
Test article page parsing
"""

from datetime import datetime, timedelta, timezone

import pytest

from harties.core.exceptions import ScrapeError
from harties.schemas.seed import PublisherProfile
from harties.services.article_scraper import ArticleScraper

URL = "https://www.news24.com/southafrica/news/durban-beach-clip-20250802"

NEWS24 = PublisherProfile(
    name="news24",
    site_name="News24",
    boilerplate_phrases=["Sign up", "Subscribe", "Follow us"],
    placeholder_seed="news24",
)

MAVERICK = PublisherProfile(
    name="dailymaverick",
    site_name="Daily Maverick",
    derive_excerpt=True,
    extract_author=True,
    min_content_chars=50,
    image_exclude_keywords=["logo"],
    placeholder_seed="dailymaverick",
)


def scraper(publisher: PublisherProfile = NEWS24) -> ArticleScraper:
    return ArticleScraper(client=None, publisher=publisher)


def test_parses_title_excerpt_image_and_date(article_html):
    article = scraper().parse(article_html, URL)

    assert article.title == "Durban beach clip wrongly shared & debunked"
    assert article.excerpt == 'A video of waves "flooding" Durban was not filmed in Russia'
    assert article.featured_image == "https://www.news24.com/images/lead.jpg"
    assert article.publish_date == "2025-08-02T07:07:00+00:00"
    assert article.source_url == URL
    assert article.author is None


def test_body_cleanup_strips_scripts_comments_and_ads(article_html):
    article = scraper().parse(article_html, URL)

    assert "<p>A clip of large waves hitting a Durban beachfront" in article.content
    assert "Fish & chips <3" in article.content
    assert "trackPageView" not in article.content
    assert "tracking pixel" not in article.content
    assert "Buy now" not in article.content
    assert "Home" not in article.content


def test_entities_in_body_are_decoded_once():
    html = "<html><body><article><p>Tom &amp;amp; Jerry</p></article></body></html>"

    article = scraper().parse(html, URL)

    assert article.content == "<p>Tom &amp; Jerry</p>"


def test_body_container_order():
    html = """
    <div data-module="ArticleBody"><p>From the data module</p></div>
    <article><p>From the article element</p></article>
    """
    assert scraper().parse(html, URL).content == "<p>From the data module</p>"

    html = '<div class="story-content"><p>Story</p></div><article><p>Article element</p></article>'
    assert scraper().parse(html, URL).content == "<p>Article element</p>"


def test_paragraph_fallback_filters_boilerplate_and_caps_count():
    good = [f"<p>Paragraph {i} carries enough reporting to count as real article text.</p>" for i in range(12)]
    html = "<html><body>{}</body></html>".format(
        "".join(
            [
                "<p>Too short</p>",
                "<p>Sign up for our daily newsletter to receive the top stories every morning.</p>",
                "<p>News24 brings you the latest breaking news from around South Africa today.</p>",
            ]
            + good
        )
    )

    content = scraper().parse(html, URL).content

    assert content.count("<p>") == 10
    assert "Paragraph 0 " in content
    assert "Paragraph 9 " in content
    assert "Paragraph 10 " not in content
    assert "Sign up" not in content
    assert "News24" not in content
    assert "</p>\n\n<p>" in content
    assert content.startswith("<p>Paragraph 0 ")


def test_missing_metadata_falls_back():
    before = datetime.now(timezone.utc) - timedelta(seconds=5)

    article = scraper().parse("<html><body><article><p>Body</p></article></body></html>", URL)

    assert article.title == "News24 Article"
    assert article.excerpt == ""
    assert article.featured_image == "https://picsum.photos/800/600?random=news24"
    published = datetime.fromisoformat(article.publish_date)
    assert published >= before


def test_time_element_wins_over_meta():
    html = """
    <head><meta property="article:published_time" content="2020-01-01T00:00:00Z"></head>
    <body><time datetime="2024-01-15T10:00:00Z">15 January</time><article><p>Body</p></article></body>
    """
    assert scraper().parse(html, URL).publish_date == "2024-01-15T10:00:00+00:00"


@pytest.mark.parametrize("time_value", ["", "   ", "sometime last week"])
def test_unusable_time_element_falls_back_to_meta(time_value):
    html = f"""
    <head><meta property="article:published_time" content="2020-01-01T00:00:00Z"></head>
    <body><time datetime="{time_value}">Yesterday</time><article><p>Body</p></article></body>
    """
    assert scraper().parse(html, URL).publish_date == "2020-01-01T00:00:00+00:00"


def test_naive_date_is_taken_as_utc():
    html = '<time datetime="2024-03-05 08:30">5 March</time><article><p>Body</p></article>'
    assert scraper().parse(html, URL).publish_date == "2024-03-05T08:30:00+00:00"


def test_first_img_used_when_no_meta_image():
    html = '<body><article><img src="photos/scene.jpg"><p>Body</p></article></body>'
    assert scraper().parse(html, URL).featured_image == "https://www.news24.com/southafrica/news/photos/scene.jpg"


def test_excluded_image_keywords_are_skipped():
    html = f"""
    <head><meta property="og:image" content="https://www.dailymaverick.co.za/logo.png"></head>
    <body><article><img src="/uploads/parliament.jpg"><p>{'Parliament debated the budget. ' * 5}</p></article></body>
    """
    article = scraper(MAVERICK).parse(html, "https://www.dailymaverick.co.za/article/budget")
    assert article.featured_image == "https://www.dailymaverick.co.za/uploads/parliament.jpg"


def test_derived_excerpt_and_author():
    body = "word " * 80
    html = f"""
    <html><head><title>Budget vote | Daily Maverick</title></head>
    <body>
      <span class="author-name">By Jane Doe</span>
      <article><p>{body}</p></article>
    </body></html>
    """
    article = scraper(MAVERICK).parse(html, "https://www.dailymaverick.co.za/article/budget")

    assert article.title == "Budget vote"
    assert article.author == "Jane Doe"
    assert article.excerpt.endswith("...")
    assert len(article.excerpt) <= 203


def test_default_author_when_no_byline():
    html = f"<article><p>{'Parliament debated the budget. ' * 5}</p></article>"
    article = scraper(MAVERICK).parse(html, "https://www.dailymaverick.co.za/article/budget")
    assert article.author == "Daily Maverick Staff"


def test_too_little_content_raises():
    with pytest.raises(ScrapeError):
        scraper(MAVERICK).parse("<article><p>Too short</p></article>", "https://www.dailymaverick.co.za/a")


@pytest.mark.asyncio
async def test_scrape_fetches_page(fake_web, http_client, article_html):
    fake_web.add(URL, article_html)

    article = await ArticleScraper(http_client, NEWS24).scrape(URL)

    assert article.title == "Durban beach clip wrongly shared & debunked"


@pytest.mark.asyncio
async def test_scrape_raises_on_fetch_failure(fake_web, http_client):
    with pytest.raises(ScrapeError) as exc_info:
        await ArticleScraper(http_client, NEWS24).scrape(URL)
    assert exc_info.value.url == URL


@pytest.mark.asyncio
async def test_scrape_raises_on_error_status(fake_web, http_client):
    fake_web.add(URL, "<html>Not found</html>", status=404)

    with pytest.raises(ScrapeError):
        await ArticleScraper(http_client, NEWS24).scrape(URL)
