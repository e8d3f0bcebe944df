"""
Article import service - scrape pages and store them as articles
"""
import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from harties.core.config import settings
from harties.core.logging import log
from harties.core.supabase import Row, SupabaseClient
from harties.schemas.article import Article, ArticleCreate, ArticleStatus, ScrapedArticle
from harties.schemas.common import BatchReport, SeedStatus, UrlOutcome
from harties.schemas.seed import PublisherProfile
from harties.services.article_scraper import ArticleScraper
from harties.utils.normalization import contains_any, create_slug

EXCERPT_MAX_LENGTH = 500
NEWS_CATEGORY_KEYWORDS = ["news", "local"]


class ArticleImporter:
    """Imports scraped articles for one publisher under a fixed author"""

    def __init__(
        self,
        supabase: SupabaseClient,
        scraper: ArticleScraper,
        author_email: Optional[str] = None,
    ):
        self.supabase = supabase
        self.scraper = scraper
        self.publisher: PublisherProfile = scraper.publisher
        self.author_email = author_email or settings.default_author_email

    async def get_author(self) -> Optional[Row]:
        return await (
            self.supabase.table("profiles")
            .select("id, full_name, email")
            .eq("email", self.author_email)
            .maybe_single()
        )

    async def get_category_id(self) -> Optional[str]:
        """Publisher category (created if missing), else a news-like category, else the first one"""
        if self.publisher.category_slug:
            return await self._get_or_create_category(self.publisher.category_slug)

        result = await self.supabase.table("categories").select("id, name").execute()
        categories = result.data
        if not categories:
            return None

        for category in categories:
            if contains_any(category.get("name") or "", NEWS_CATEGORY_KEYWORDS):
                return category["id"]
        return categories[0]["id"]

    async def _get_or_create_category(self, slug: str) -> str:
        existing = await self.supabase.table("categories").select("id").eq("slug", slug).maybe_single()
        if existing:
            return existing["id"]

        name = self.publisher.category_name or slug.replace("-", " ").title()
        log.info(f"Creating category '{name}'")
        result = await self.supabase.table("categories").insert(
            {"name": name, "slug": slug, "description": f"{name} news and analysis"}
        ).execute()
        return result.data[0]["id"]

    async def import_article(self, url: str) -> UrlOutcome:
        """
        Scrape one URL and insert it unless an article with the same slug exists.

        A missing author profile is reported, not raised. Scrape and database
        errors propagate to the caller.
        """
        author = await self.get_author()
        if not author:
            log.error(f"Author profile {self.author_email} not found. Run `harties add-users` first")
            return UrlOutcome(url=url, status=SeedStatus.MISSING_PREREQUISITE)

        log.info(f"Using author: {author.get('full_name')} ({author.get('email')})")
        category_id = await self.get_category_id()

        scraped = await self.scraper.scrape(url)
        slug = create_slug(scraped.title)

        existing = await self.supabase.table("articles").select("id").eq("slug", slug).maybe_single()
        if existing:
            log.info(f"Article '{slug}' already exists, skipping")
            return UrlOutcome(url=url, status=SeedStatus.SKIPPED, slug=slug)

        article = self.build_article(scraped, slug, author["id"], category_id)
        result = await (
            self.supabase.table("articles")
            .insert(article.model_dump(mode="json"), on_conflict="slug", ignore_duplicates=True)
            .execute()
        )
        if not result.data:
            log.info(f"Article '{slug}' was inserted concurrently, skipping")
            return UrlOutcome(url=url, status=SeedStatus.SKIPPED, slug=slug)

        created = Article(**result.data[0])
        log.success(f"Added article: {created.title} (id {created.id})")
        log.info(f"Slug: {slug} | content length: {len(created.content or '')} | image: {created.featured_image_url}")
        return UrlOutcome(url=url, status=SeedStatus.CREATED, slug=slug)

    def build_article(
        self, scraped: ScrapedArticle, slug: str, author_id: str, category_id: Optional[str]
    ) -> ArticleCreate:
        now = datetime.now(timezone.utc).isoformat()
        content = scraped.content
        if scraped.author:
            content = f"<p>By {scraped.author}</p>\n\n{content}"

        excerpt = scraped.excerpt
        if len(excerpt) > EXCERPT_MAX_LENGTH:
            excerpt = excerpt[: EXCERPT_MAX_LENGTH - 3].rstrip() + "..."

        return ArticleCreate(
            title=scraped.title[:200],
            slug=slug,
            excerpt=excerpt or None,
            content=content,
            featured_image_url=scraped.featured_image,
            author_id=author_id,
            category_id=category_id,
            status=ArticleStatus.PUBLISHED,
            views=0,
            published_at=scraped.publish_date,
            created_at=now,
            updated_at=now,
        )

    async def import_many(self, urls: Sequence[str]) -> BatchReport:
        """Import URLs one after another; a failing URL never stops the rest"""
        report = BatchReport()
        total = len(urls)

        for index, url in enumerate(urls, start=1):
            log.info(f"[{index}/{total}] Processing: {url}")
            try:
                outcome = await self.import_article(url)
            except Exception as e:
                log.error(f"Failed to process {url}: {e}")
                outcome = UrlOutcome(url=url, status=SeedStatus.FAILED, error=str(e))
            report.outcomes.append(outcome)

            if self.publisher.request_delay and index < total:
                await asyncio.sleep(self.publisher.request_delay)

        log.info(f"Article processing complete: {report.successes} succeeded, {report.failures} failed")
        return report


def default_urls() -> List[str]:
    return [settings.default_article_url]
