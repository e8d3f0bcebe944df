"""
Operator commands for seeding and resetting the Supabase database
"""
import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from harties.core.config import settings
from harties.core.exceptions import ConfigurationError, SupabaseError
from harties.core.http import create_http_client
from harties.core.logging import setup_logging
from harties.core.seed_config import DEFAULT_PUBLISHER, seed_config
from harties.core.supabase import SupabaseClient
from harties.schemas.common import SeedStatus
from harties.schemas.seed import KeywordProfile
from harties.services.article_importer import ArticleImporter, default_urls
from harties.services.article_scraper import ArticleScraper
from harties.services.business_seeder import BusinessSeeder
from harties.services.database_reset import PLANS, DatabaseResetService, get_plan
from harties.services.image_extractor import ImageExtractor
from harties.services.user_seeder import UserSeeder

app = typer.Typer(help="Harties Local seeding and maintenance tools")
console = Console()

T = TypeVar("T")

STATUS_STYLES = {
    SeedStatus.CREATED: "green",
    SeedStatus.SKIPPED: "yellow",
    SeedStatus.MISSING_PREREQUISITE: "red",
    SeedStatus.FAILED: "red",
}


@app.callback()
def main(log_level: str = typer.Option(settings.log_level, help="Log level for progress output")):
    setup_logging(log_level)


def run_with_supabase(action: Callable[[SupabaseClient], Awaitable[T]]) -> T:
    """Run an async action with a service-role client; exit 1 when credentials are missing"""
    try:
        client = SupabaseClient.from_settings()
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=1)

    async def runner() -> T:
        async with client:
            return await action(client)

    return asyncio.run(runner())


@app.command()
def add_business(keys: Optional[List[str]] = typer.Argument(None, help="Business keys from businesses.yaml (default: all)")):
    """Insert configured businesses, skipping any that already exist"""
    try:
        seeds = [seed_config.get_business(key) for key in keys] if keys else list(seed_config.load_businesses().values())
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=1)

    async def action(supabase: SupabaseClient):
        async with create_http_client() as http_client:
            seeder = BusinessSeeder(supabase, http_client)
            return [(seed, await seeder.seed(seed)) for seed in seeds]

    results = run_with_supabase(action)
    for seed, status in results:
        console.print(f"{seed.business.name}: {status.value}", style=STATUS_STYLES[status])
        if status == SeedStatus.CREATED:
            console.print(f"   • /businesses/{seed.business.slug}")


@app.command()
def link_owner(slug: str = typer.Argument(..., help="Business slug"), email: str = typer.Argument(..., help="Owner email")):
    """Make the profile with EMAIL the owner of business SLUG"""
    linked = run_with_supabase(lambda supabase: BusinessSeeder(supabase).link_owner(slug, email))
    if linked:
        console.print(f"✅ Linked {email} to {slug}", style="green")
    else:
        console.print(f"⚠️  Could not link {email} to {slug}", style="yellow")


@app.command()
def list_businesses():
    """Show businesses currently in the database"""

    async def action(supabase: SupabaseClient):
        result = await supabase.table("businesses").select("name, slug, city, owner_id").order("name").execute()
        return result.data

    rows = run_with_supabase(action)

    table = Table(title="Businesses")
    table.add_column("Name", style="cyan")
    table.add_column("Slug", style="green")
    table.add_column("City")
    table.add_column("Owner", style="yellow")
    for row in rows:
        table.add_row(row.get("name") or "", row.get("slug") or "", row.get("city") or "", row.get("owner_id") or "-")
    console.print(table)


@app.command()
def add_article(
    urls: Optional[List[str]] = typer.Argument(None, help="Article URLs (default: a sample News24 article)"),
    publisher: str = typer.Option(DEFAULT_PUBLISHER, help="Publisher profile from publishers.yaml"),
    author_email: str = typer.Option(settings.default_author_email, help="Email of the author profile"),
):
    """Scrape article pages and add them as published articles"""
    try:
        profile = seed_config.get_publisher(publisher)
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=1)

    urls = urls or default_urls()
    console.print(f"🚀 Adding {len(urls)} {profile.site_name} article{'s' if len(urls) > 1 else ''}...")

    async def action(supabase: SupabaseClient):
        async with create_http_client() as http_client:
            importer = ArticleImporter(supabase, ArticleScraper(http_client, profile), author_email)
            return await importer.import_many(urls)

    report = run_with_supabase(action)

    table = Table(title=f"{profile.site_name} import")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Result")
    table.add_column("Slug / error")
    for outcome in report.outcomes:
        style = STATUS_STYLES[outcome.status]
        table.add_row(outcome.url, f"[{style}]{outcome.status.value}[/{style}]", outcome.slug or outcome.error or "")
    console.print(table)

    console.print(f"✅ Successfully processed: {report.successes} article(s)", style="green")
    if report.failures:
        console.print(f"❌ Failed: {report.failures} article(s)", style="red")


@app.command()
def add_users():
    """Create the configured test accounts and link business owners"""
    try:
        users = seed_config.load_users()
    except ConfigurationError as e:
        console.print(f"❌ {e}", style="red")
        raise typer.Exit(code=1)

    created = run_with_supabase(lambda supabase: UserSeeder(supabase).create_users(users))

    table = Table(title="Test user login credentials")
    table.add_column("Email", style="cyan")
    table.add_column("Password", style="green")
    table.add_column("Role", style="yellow")
    table.add_column("Description")
    for user in users:
        table.add_row(user.email, user.password, user.role.value, user.description or "")
    console.print(table)
    console.print(f"📊 Results: {created}/{len(users)} users created successfully")


@app.command()
def confirm_user(email: str = typer.Argument(..., help="Email of the user to confirm")):
    """Confirm a user's email so they can sign in"""
    user = run_with_supabase(lambda supabase: UserSeeder(supabase).confirm_user(email))
    if not user:
        console.print(f"❌ User {email} not found", style="red")
        raise typer.Exit(code=1)
    console.print(f"✅ {email} confirmed (id {user.get('id')})", style="green")


@app.command()
def list_users(limit: int = typer.Option(10, help="Number of users to show")):
    """Show the newest auth users and profiles"""
    auth_users, profiles = run_with_supabase(lambda supabase: UserSeeder(supabase).list_recent_users(limit))

    table = Table(title=f"Auth users ({len(auth_users)})")
    table.add_column("Email", style="cyan")
    table.add_column("Created")
    table.add_column("Confirmed")
    table.add_column("Last sign in")
    for user in auth_users:
        confirmed = "✅" if user.get("email_confirmed_at") else "❌"
        table.add_row(user.get("email") or "", user.get("created_at") or "", confirmed, user.get("last_sign_in_at") or "Never")
    console.print(table)

    table = Table(title=f"Profiles ({len(profiles)})")
    table.add_column("Email", style="cyan")
    table.add_column("Name")
    table.add_column("Role", style="yellow")
    table.add_column("Created")
    for profile in profiles:
        table.add_row(
            profile.get("email") or "", profile.get("full_name") or "", profile.get("role") or "", profile.get("created_at") or ""
        )
    console.print(table)


@app.command()
def clear(
    plan: str = typer.Argument(..., help=f"Reset plan: {', '.join(PLANS)}"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Delete data table by table in foreign-key order"""
    try:
        reset_plan = get_plan(plan)
    except KeyError as e:
        console.print(f"❌ {e.args[0]}", style="red")
        raise typer.Exit(code=1)

    console.print(f"🔥 {reset_plan.description}", style="bold red")
    console.print(f"Tables: {', '.join(reset_plan.tables)}")
    if not yes:
        typer.confirm("Continue?", abort=True)

    try:
        report = run_with_supabase(lambda supabase: DatabaseResetService(supabase).run(reset_plan))
    except SupabaseError as e:
        console.print(f"❌ Reset aborted: {e}", style="red")
        raise typer.Exit(code=1)

    console.print(f"✅ Cleared {len(report.cleared)} table(s)", style="green")
    if report.missing:
        console.print(f"ℹ️  Missing tables skipped: {', '.join(report.missing)}")
    for warning in report.warnings:
        console.print(f"⚠️  {warning}", style="yellow")
    if report.auth_users_deleted:
        console.print(f"🗑️  Removed {report.auth_users_deleted} auth user(s)")


@app.command()
def extract_images(
    url: str = typer.Argument(..., help="Website to inspect"),
    business: Optional[str] = typer.Option(None, help="Business key whose keywords to use"),
):
    """Show the logo and cover image that would be picked for a website"""
    keywords = KeywordProfile()
    if business:
        try:
            keywords = seed_config.get_business(business).keywords
        except ConfigurationError as e:
            console.print(f"❌ {e}", style="red")
            raise typer.Exit(code=1)

    async def action():
        async with create_http_client() as http_client:
            return await ImageExtractor(http_client, keywords).extract(url)

    images = asyncio.run(action())

    console.print(f"📸 Cover image: {images.cover_image}")
    console.print(f"🏷️  Logo image: {images.logo_image}")
    console.print(f"🖼️  Total images found: {len(images.all_images)}")
    for image in images.all_images:
        console.print(f"   • {image}")


if __name__ == "__main__":
    app()
