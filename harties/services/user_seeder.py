"""
Test account seeding and user maintenance
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from harties.core.exceptions import SupabaseError
from harties.core.logging import log
from harties.core.supabase import Row, SupabaseClient
from harties.schemas.common import SeedStatus
from harties.schemas.seed import UserSeed
from harties.services.business_seeder import BusinessSeeder


class UserSeeder:
    """Creates confirmed auth users with matching profiles"""

    def __init__(self, supabase: SupabaseClient):
        self.supabase = supabase

    async def create_user(self, user: UserSeed) -> SeedStatus:
        log.info(f"Creating user: {user.full_name} ({user.email})")

        try:
            auth_user = await self.supabase.auth.create_user(
                email=user.email,
                password=user.password,
                email_confirm=True,
                user_metadata={"full_name": user.full_name},
            )
        except SupabaseError as e:
            log.error(f"Auth creation failed for {user.email}: {e.message}")
            return SeedStatus.FAILED
        log.info(f"Auth user created: {auth_user['id']}")

        now = datetime.now(timezone.utc).isoformat()
        try:
            await self.supabase.table("profiles").upsert(
                {
                    "id": auth_user["id"],
                    "email": user.email,
                    "full_name": user.full_name,
                    "role": user.role.value,
                    "created_at": now,
                    "updated_at": now,
                },
                on_conflict="id",
            ).execute()
        except SupabaseError as e:
            log.error(f"Profile creation failed for {user.email}: {e.message}")
            return SeedStatus.FAILED

        log.success(f"Profile created with role: {user.role.value}")
        if user.description:
            log.info(user.description)
        return SeedStatus.CREATED

    async def create_users(self, users: Sequence[UserSeed]) -> int:
        """Create every user, then link business owners. Returns the number created"""
        created = 0
        for user in users:
            if await self.create_user(user) == SeedStatus.CREATED:
                created += 1

        await self.link_business_owners(users)
        log.info(f"Results: {created}/{len(users)} users created successfully")
        return created

    async def link_business_owners(self, users: Sequence[UserSeed]) -> int:
        log.info("Linking business owners to their businesses...")
        businesses = BusinessSeeder(self.supabase)
        linked = 0
        for user in users:
            if not user.business_slug:
                continue
            if await businesses.link_owner(user.business_slug, user.email):
                linked += 1
        return linked

    async def find_auth_user(self, email: str) -> Optional[Row]:
        for user in await self.supabase.auth.list_users(per_page=1000):
            if user.get("email") == email:
                return user
        return None

    async def confirm_user(self, email: str) -> Optional[Row]:
        """Mark a user's email as confirmed so they can log in"""
        log.info(f"Confirming user: {email}")
        user = await self.find_auth_user(email)
        if not user:
            log.error(f"User {email} not found")
            return None

        updated = await self.supabase.auth.update_user(user["id"], {"email_confirm": True})
        log.success(f"User email confirmed: {updated.get('id')} ({updated.get('email')})")
        return updated

    async def list_recent_users(self, limit: int = 10) -> Tuple[List[Row], List[Row]]:
        """Newest auth users and newest profiles"""
        auth_users = await self.supabase.auth.list_users(per_page=1000)
        auth_users.sort(key=lambda user: user.get("created_at") or "", reverse=True)

        result = await (
            self.supabase.table("profiles")
            .select("id, email, full_name, role, created_at")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return auth_users[:limit], result.data
