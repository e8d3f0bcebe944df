"""
Business seeding service
"""
from typing import Optional

import httpx

from harties.core.http import create_http_client
from harties.core.logging import log
from harties.core.supabase import Row, SupabaseClient
from harties.schemas.common import ExtractedImages, SeedStatus
from harties.schemas.seed import BusinessSeed
from harties.services.image_extractor import ImageExtractor


class BusinessSeeder:
    """Inserts configured businesses, pulling images from their websites"""

    def __init__(self, supabase: SupabaseClient, http_client: Optional[httpx.AsyncClient] = None):
        self.supabase = supabase
        self.http_client = http_client

    async def get_profile(self, email: str) -> Optional[Row]:
        return await (
            self.supabase.table("profiles")
            .select("id, full_name, email")
            .eq("email", email)
            .maybe_single()
        )

    async def exists(self, slug: str) -> bool:
        existing = await self.supabase.table("businesses").select("id").eq("slug", slug).maybe_single()
        return existing is not None

    async def seed(self, seed: BusinessSeed) -> SeedStatus:
        """
        Insert one business.

        Returns MISSING_PREREQUISITE when the owner profile does not exist
        and SKIPPED when the slug is already taken.
        """
        business = seed.business
        log.info(f"Adding {business.name} business...")

        owner = await self.get_profile(seed.owner_email)
        if not owner:
            log.error(f"{business.name} business owner ({seed.owner_email}) not found. Run `harties add-users` first")
            return SeedStatus.MISSING_PREREQUISITE
        log.info(f"Using business owner: {owner.get('full_name')} ({owner.get('email')})")

        if await self.exists(business.slug):
            log.info(f"{business.name} business already exists, skipping")
            return SeedStatus.SKIPPED

        values = business.model_copy(update={"owner_id": owner["id"]})
        if seed.image_source_url:
            images = await self.extract_images(seed)
            values = values.model_copy(
                update={
                    "logo_url": images.logo_image,
                    "cover_image_url": images.cover_image,
                    "available_images": images.all_images,
                }
            )

        result = await (
            self.supabase.table("businesses")
            .insert(values.model_dump(mode="json"), on_conflict="slug", ignore_duplicates=True)
            .execute()
        )
        if not result.data:
            log.info(f"{business.name} business was inserted concurrently, skipping")
            return SeedStatus.SKIPPED

        log.success(f"Added {business.name} business (id {result.data[0].get('id')})")
        log.info(f"Location: {business.address}, {business.city} | cover: {values.cover_image_url}")
        return SeedStatus.CREATED

    async def extract_images(self, seed: BusinessSeed) -> ExtractedImages:
        if self.http_client is not None:
            return await ImageExtractor(self.http_client, seed.keywords).extract(seed.image_source_url)
        async with create_http_client() as client:
            return await ImageExtractor(client, seed.keywords).extract(seed.image_source_url)

    async def link_owner(self, slug: str, email: str) -> bool:
        """Point a business at the profile with the given email"""
        profile = await self.get_profile(email)
        if not profile:
            log.warning(f"Profile not found for {email}")
            return False

        result = await self.supabase.table("businesses").update({"owner_id": profile["id"]}).eq("slug", slug).execute()
        if not result.data:
            log.warning(f"No business with slug '{slug}'")
            return False

        log.success(f"Linked {email} to {slug}")
        return True
