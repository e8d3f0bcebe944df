"""
News article scraper
Turns one article page into a ScrapedArticle
"""
import re
from datetime import datetime, timezone
from typing import Callable, List, Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Comment, Tag
from dateutil import parser as date_parser

from harties.core.exceptions import ScrapeError
from harties.core.logging import log
from harties.schemas.article import ScrapedArticle
from harties.schemas.seed import PublisherProfile
from harties.utils.html import decode_entities, strip_tags
from harties.utils.normalization import contains_any

IMAGE_PLACEHOLDER = "https://picsum.photos/800/600?random={seed}"
EXCERPT_LENGTH = 200

# (attribute, value) pairs of the meta tags carrying the lead image
IMAGE_META_TAGS = [
    ("property", "og:image"),
    ("name", "twitter:image"),
    ("property", "twitter:image"),
    ("property", "article:image"),
]

BYLINE = re.compile(r"\bBy\s+([A-Z][A-Za-z.'\-]*(?:\s+[A-Z][A-Za-z.'\-]*){0,3})")


def _attr_contains(attr: str, needle: str) -> Callable[[Tag], bool]:
    def matches(tag: Tag) -> bool:
        value = tag.get(attr)
        if isinstance(value, list):
            value = " ".join(value)
        return bool(value) and needle.lower() in value.lower()
    return matches


def _is_ad(tag: Tag) -> bool:
    if tag.name != "div":
        return False
    for token in tag.get("class") or []:
        token = token.lower()
        if token == "ad" or token.startswith("ad-") or "ads" in token or "advert" in token:
            return True
    return False


class ArticleScraper:
    """Scrapes a single article page for one publisher"""

    def __init__(self, client: httpx.AsyncClient, publisher: PublisherProfile):
        self.client = client
        self.publisher = publisher

    async def scrape(self, url: str) -> ScrapedArticle:
        """
        Fetch and parse an article.

        Raises:
            ScrapeError: the page could not be fetched or held too little text
        """
        log.info(f"Fetching article from: {url}")
        try:
            response = await self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log.error(f"Error scraping article {url}: {e}")
            raise ScrapeError(f"Failed to fetch article: {e}", url=url) from e

        return self.parse(response.text, url)

    def parse(self, html: str, url: str) -> ScrapedArticle:
        soup = BeautifulSoup(html, "html.parser")

        title = self._extract_title(soup)
        content = self._extract_content(soup)

        if len(strip_tags(content)) < self.publisher.min_content_chars:
            raise ScrapeError(
                f"Unable to extract content from {self.publisher.site_name} article. "
                f"Got only {len(strip_tags(content))} characters of text.",
                url=url,
            )

        excerpt = self._extract_excerpt(soup)
        if not excerpt and self.publisher.derive_excerpt:
            excerpt = self._derive_excerpt(content)

        featured_image = self._extract_image(soup, url)
        log.debug(f"Found image: {featured_image}")

        return ScrapedArticle(
            title=title,
            excerpt=excerpt,
            content=content,
            publish_date=self._extract_publish_date(soup),
            source_url=url,
            featured_image=featured_image,
            author=self._extract_author(soup) if self.publisher.extract_author else None,
        )

    def _extract_title(self, soup: BeautifulSoup) -> str:
        raw = soup.title.get_text() if soup.title else f"{self.publisher.site_name} Article"
        suffix = re.compile(rf"\s*\|\s*{re.escape(self.publisher.site_name)}\s*$", re.IGNORECASE)
        return suffix.sub("", raw).strip()

    def _extract_excerpt(self, soup: BeautifulSoup) -> str:
        meta = soup.find("meta", attrs={"name": "description"})
        if meta and meta.get("content"):
            return meta["content"].strip()
        return ""

    def _derive_excerpt(self, content: str) -> str:
        text = strip_tags(content)
        excerpt = text[:EXCERPT_LENGTH].strip()
        return excerpt + "..." if len(text) > EXCERPT_LENGTH else excerpt

    def _extract_image(self, soup: BeautifulSoup, url: str) -> str:
        candidates: List[Optional[str]] = []
        for attr, value in IMAGE_META_TAGS:
            meta = soup.find("meta", attrs={attr: value})
            candidates.append(meta.get("content") if meta else None)
        first_img = soup.find("img", src=True)
        candidates.append(first_img["src"] if first_img else None)

        for candidate in candidates:
            if not candidate or not candidate.strip():
                continue
            if contains_any(candidate, self.publisher.image_exclude_keywords):
                continue
            return urljoin(url, candidate.strip())

        return IMAGE_PLACEHOLDER.format(seed=self.publisher.placeholder_seed)

    def _extract_content(self, soup: BeautifulSoup) -> str:
        body = self._find_body(soup)
        if body is not None:
            return self._clean(body)

        log.debug("No article container found, falling back to paragraphs")
        # Paragraphs stay separated by a blank line
        paragraphs = [self._clean(BeautifulSoup(str(p), "html.parser")) for p in self._relevant_paragraphs(soup)]
        return "\n\n".join(p for p in paragraphs if p)

    def _find_body(self, soup: BeautifulSoup) -> Optional[Tag]:
        matchers = [
            lambda tag: tag.name == "div" and _attr_contains("class", "article")(tag),
            lambda tag: tag.name == "div" and _attr_contains("data-module", "ArticleBody")(tag),
            lambda tag: tag.name == "article",
            lambda tag: tag.name == "div" and _attr_contains("class", "story-content")(tag),
        ]
        for matcher in matchers:
            for tag in soup.find_all(matcher):
                if tag.get_text(strip=True):
                    return tag
        return None

    def _relevant_paragraphs(self, soup: BeautifulSoup) -> List[Tag]:
        blocked = self.publisher.boilerplate_phrases + [self.publisher.site_name]
        kept = []
        for paragraph in soup.find_all("p"):
            text = paragraph.get_text().strip()
            if len(text) <= self.publisher.min_paragraph_chars:
                continue
            if any(phrase in text for phrase in blocked):
                continue
            kept.append(paragraph)
        return kept[: self.publisher.max_paragraphs]

    def _clean(self, body: Tag) -> str:
        """Strip scripts, styles, comments and ads, then decode entities"""
        for tag in body.find_all(["script", "style"]):
            tag.decompose()
        for comment in body.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()
        for tag in body.find_all(_is_ad):
            if not tag.decomposed:
                tag.decompose()
        for selector in self.publisher.strip_selectors:
            for tag in body.select(selector):
                if not tag.decomposed:
                    tag.decompose()

        return decode_entities(body.decode_contents()).strip()

    def _extract_publish_date(self, soup: BeautifulSoup) -> str:
        """First parsable value of <time datetime> or article:published_time, else now"""
        time_tag = soup.find("time", attrs={"datetime": True})
        meta = soup.find("meta", attrs={"property": "article:published_time"})
        candidates = [time_tag["datetime"] if time_tag else None, meta.get("content") if meta else None]

        for raw in candidates:
            if not raw or not raw.strip():
                continue
            try:
                parsed = date_parser.parse(raw.strip())
            except (ValueError, OverflowError) as e:
                log.warning(f"Unparsable publish date '{raw}': {e}")
                continue
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc).isoformat()

        return datetime.now(timezone.utc).isoformat()

    def _extract_author(self, soup: BeautifulSoup) -> str:
        default = f"{self.publisher.site_name} Staff"

        candidates = [tag.get_text(" ", strip=True) for tag in soup.find_all(_attr_contains("class", "author"))]
        match = BYLINE.search(soup.get_text(" "))
        if match:
            candidates.append(match.group(1))

        for candidate in candidates:
            candidate = re.sub(r"^By\s+", "", candidate).strip()
            if len(candidate) > 3 and candidate != "Follow" and "http" not in candidate:
                return candidate
        return default
