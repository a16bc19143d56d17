"""Supabase-backed user profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from saycal.domain.profiles import UserProfile, profile_from_record, profile_to_record
from saycal.services.profiles import UserProfileRepository


@dataclass
class SupabaseUserProfileRepository(UserProfileRepository):
    """Supabase implementation for user profile persistence."""

    client: Client

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the profile row for a user, if present."""
        response = (
            self.client.table("user_profiles")
            .select("*")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return profile_from_record(response.data[0])

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        """Insert or replace the profile row keyed by user id."""
        response = (
            self.client.table("user_profiles")
            .upsert(profile_to_record(profile), on_conflict="user_id")
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save user profile in Supabase")
        return profile_from_record(response.data[0])
