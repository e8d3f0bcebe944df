"""
Test reset plans against the in-memory database
"""

import pytest

from harties.core.exceptions import SupabaseError
from harties.services.database_reset import PLANS, DatabaseResetService, get_plan


def test_plans_clear_children_before_parents():
    for plan in PLANS.values():
        tables = plan.tables
        if "articles" in tables and "article_media" in tables:
            assert tables.index("article_media") < tables.index("articles")
        if "businesses" in tables and "advertisements" in tables:
            assert tables.index("advertisements") < tables.index("businesses")
        if "profiles" in tables:
            assert tables.index("profiles") > tables.index("articles")


def test_unknown_plan():
    with pytest.raises(KeyError, match="available"):
        get_plan("everything")


@pytest.mark.asyncio
async def test_articles_plan_keeps_businesses(supabase, fake_supabase):
    fake_supabase.seed("articles", {"slug": "a"}, {"slug": "b"})
    fake_supabase.seed("article_tags", {"tag": "x"})
    fake_supabase.seed("businesses", {"slug": "keep"})

    report = await DatabaseResetService(supabase).run(get_plan("articles"))

    assert fake_supabase.tables["articles"] == []
    assert fake_supabase.tables["article_tags"] == []
    assert len(fake_supabase.tables["businesses"]) == 1
    assert report.cleared == ["article_media", "article_tags", "articles"]
    delete = fake_supabase.requests_for("DELETE", "articles")[0]
    assert delete.url.params["created_at"] == "gte.1970-01-01"


@pytest.mark.asyncio
async def test_missing_tables_are_skipped(supabase, fake_supabase):
    fake_supabase.missing_tables.update({"article_media", "article_tags"})
    fake_supabase.seed("articles", {"slug": "a"})

    report = await DatabaseResetService(supabase).run(get_plan("articles"))

    assert report.missing == ["article_media", "article_tags"]
    assert fake_supabase.tables["articles"] == []


@pytest.mark.asyncio
async def test_optional_table_errors_become_warnings(supabase, fake_supabase):
    fake_supabase.failures["business_reviews"] = (403, {"code": "42501", "message": "permission denied"})

    report = await DatabaseResetService(supabase).run(get_plan("businesses"))

    assert "businesses" in report.cleared
    assert report.warnings == ["business_reviews: permission denied"]


@pytest.mark.asyncio
async def test_required_table_error_stops_the_plan(supabase, fake_supabase):
    fake_supabase.failures["advertisements"] = (500, {"code": "XX000", "message": "boom"})
    fake_supabase.seed("businesses", {"slug": "still-here"})

    with pytest.raises(SupabaseError):
        await DatabaseResetService(supabase).run(get_plan("businesses"))

    assert len(fake_supabase.tables["businesses"]) == 1
    assert fake_supabase.requests_for("DELETE", "businesses") == []


@pytest.mark.asyncio
async def test_live_plan_deletes_auth_users(supabase, fake_supabase):
    fake_supabase.add_user("a@example.com")
    fake_supabase.add_user("b@example.com")
    fake_supabase.seed("categories", {"name": "Local News"})

    report = await DatabaseResetService(supabase).run(get_plan("live"))

    assert report.auth_users_deleted == 2
    assert fake_supabase.users == []
    assert fake_supabase.tables["profiles"] == []
    assert fake_supabase.tables["categories"] == []


@pytest.mark.asyncio
async def test_database_plan_keeps_auth_users(supabase, fake_supabase):
    fake_supabase.add_user("a@example.com")

    report = await DatabaseResetService(supabase).run(get_plan("database"))

    assert report.auth_users_deleted == 0
    assert len(fake_supabase.users) == 1
    assert fake_supabase.tables["profiles"] == []
    tags = fake_supabase.requests_for("DELETE", "article_tags")[0]
    assert tags.url.params["article_id"] == "gt.00000000-0000-0000-0000-000000000000"
