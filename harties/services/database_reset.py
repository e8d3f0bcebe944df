"""
Database reset plans

Each plan deletes every row from an ordered list of tables so foreign keys
are satisfied. PostgREST refuses an unfiltered DELETE, so every table is
cleared with a filter that matches all rows.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from harties.core.exceptions import SupabaseError
from harties.core.logging import log
from harties.core.supabase import SupabaseClient
from harties.schemas.common import ResetReport

EPOCH = "1970-01-01"
NIL_UUID = "00000000-0000-0000-0000-000000000000"


@dataclass(frozen=True)
class TableClear:
    table: str
    column: str = "created_at"
    operator: str = "gte"
    value: str = EPOCH
    # Errors on optional tables are logged and ignored
    optional: bool = False


@dataclass(frozen=True)
class ResetStep:
    title: str
    tables: Tuple[TableClear, ...]
    # Read profile ids before this step and delete their auth users after it
    delete_auth_users: bool = False


@dataclass(frozen=True)
class ResetPlan:
    name: str
    description: str
    steps: Tuple[ResetStep, ...] = field(default_factory=tuple)

    @property
    def tables(self) -> List[str]:
        return [clear.table for step in self.steps for clear in step.tables]


def _required(*tables: str) -> Tuple[TableClear, ...]:
    return tuple(TableClear(table) for table in tables)


def _optional(*tables: str) -> Tuple[TableClear, ...]:
    return tuple(TableClear(table, optional=True) for table in tables)


ARTICLE_STEPS = (
    ResetStep("Clearing article-related data", _optional("article_media", "article_tags")),
    ResetStep("Clearing articles", _required("articles")),
)

BUSINESS_STEPS = (
    ResetStep("Clearing advertisements", _required("advertisements")),
    ResetStep("Clearing business-related data", _optional("business_media", "business_reviews")),
    ResetStep("Clearing businesses", _required("businesses")),
)

PLANS: Dict[str, ResetPlan] = {
    "articles": ResetPlan(
        name="articles",
        description="Articles and their media and tags. Businesses, users and configuration are kept.",
        steps=ARTICLE_STEPS,
    ),
    "businesses": ResetPlan(
        name="businesses",
        description="Businesses, advertisements, reviews and business media. Articles and users are kept.",
        steps=BUSINESS_STEPS,
    ),
    "content": ResetPlan(
        name="content",
        description="Articles and businesses with everything hanging off them. Users and configuration are kept.",
        steps=(BUSINESS_STEPS[0],) + ARTICLE_STEPS + BUSINESS_STEPS[1:],
    ),
    "database": ResetPlan(
        name="database",
        description="Every content, commerce and profile table. Categories, settings and auth users are kept.",
        steps=(
            ResetStep(
                "Clearing media links and page building blocks",
                _optional(
                    "content_block_media", "gallery_media", "article_media", "business_media",
                    "content_blocks", "galleries", "menu_items", "menus", "form_submissions",
                    "form_fields", "contact_forms", "pages", "faqs", "testimonials",
                    "team_members", "locations", "business_reviews",
                ),
            ),
            ResetStep(
                "Clearing interactions and newsletters",
                (TableClear("article_tags", column="article_id", operator="gt", value=NIL_UUID, optional=True),)
                + _optional(
                    "user_article_interactions", "comments", "push_notifications",
                    "newsletter_campaigns", "newsletter_subscribers",
                ),
            ),
            ResetStep("Clearing advertisements, articles and businesses", _required("advertisements", "articles", "businesses")),
            ResetStep(
                "Clearing payments and user content",
                _optional(
                    "payments", "user_subscriptions", "author_profiles", "content_imports",
                    "audio_recordings", "analytics_events", "media", "tags",
                ),
            ),
            ResetStep("Clearing profiles", _required("profiles")),
        ),
    ),
    "live": ResetPlan(
        name="live",
        description="Everything including auth users, categories and site settings.",
        steps=(
            ResetStep(
                "Clearing dependent content",
                _optional(
                    "advertisements", "business_media", "article_media", "user_sessions",
                    "notifications", "testimonials", "team_members",
                ),
            ),
            ResetStep("Clearing main content", _required("articles", "businesses") + _optional("galleries", "media")),
            ResetStep("Clearing other content", _optional("content_imports", "audio_recordings")),
            ResetStep("Clearing user data", _required("profiles"), delete_auth_users=True),
            ResetStep("Clearing configuration", _optional("rss_sources", "categories", "site_settings")),
        ),
    ),
}


def get_plan(name: str) -> ResetPlan:
    if name not in PLANS:
        raise KeyError(f"Unknown reset plan '{name}' (available: {', '.join(sorted(PLANS))})")
    return PLANS[name]


class DatabaseResetService:
    """Runs reset plans against Supabase"""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def run(self, plan: ResetPlan) -> ResetReport:
        """
        Execute every step of a plan in order.

        Missing tables are skipped. Any other error on a required table
        raises SupabaseError and stops the plan.
        """
        log.warning(f"Running reset plan '{plan.name}': {plan.description}")
        report = ResetReport(plan=plan.name)

        for number, step in enumerate(plan.steps, start=1):
            log.info(f"Step {number}: {step.title}...")

            user_ids: List[str] = []
            if step.delete_auth_users:
                user_ids = await self._profile_ids()

            for clear in step.tables:
                await self._clear(clear, report)

            if user_ids:
                await self._delete_auth_users(user_ids, report)

        log.success(f"Reset plan '{plan.name}' complete: {len(report.cleared)} table(s) cleared")
        return report

    async def _clear(self, clear: TableClear, report: ResetReport) -> None:
        try:
            await self.supabase.table(clear.table).delete().filter(clear.column, clear.operator, clear.value).execute()
        except SupabaseError as e:
            if e.is_missing_table:
                log.warning(f"Table {clear.table} does not exist, skipping")
                report.missing.append(clear.table)
                return
            if clear.optional:
                log.warning(f"Could not clear {clear.table}: {e.message}")
                report.warnings.append(f"{clear.table}: {e.message}")
                return
            log.error(f"Could not clear {clear.table}: {e.message}")
            raise

        log.info(f"Cleared {clear.table}")
        report.cleared.append(clear.table)

    async def _profile_ids(self) -> List[str]:
        try:
            result = await self.supabase.table("profiles").select("id").execute()
        except SupabaseError as e:
            if e.is_missing_table:
                return []
            raise
        return [row["id"] for row in result.data]

    async def _delete_auth_users(self, user_ids: List[str], report: ResetReport) -> None:
        log.info(f"Removing {len(user_ids)} auth user(s)...")
        for user_id in user_ids:
            try:
                await self.supabase.auth.delete_user(user_id)
            except SupabaseError as e:
                log.warning(f"Could not delete auth user {user_id}: {e.message}")
                report.warnings.append(f"auth user {user_id}: {e.message}")
            else:
                report.auth_users_deleted += 1
        log.info(f"Removed {report.auth_users_deleted} auth user(s)")
