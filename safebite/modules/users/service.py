import logging
from supabase import Client
from pydantic import ValidationError
from safebite.modules.users.schemas import UserProfile, UserCreate, UserUpdate
from typing import List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, email, full_name, company_id, role, location_ids, created_at"


class SupabaseProfileRepository:
    """Profile lookup used by the session store"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def fetch_profile(self, identity_id: str) -> Optional[UserProfile]:
        # Backend errors propagate so the store can flag them; an unparseable row is "no profile"
        result = self.supabase.table("profiles")\
            .select(PROFILE_COLUMNS)\
            .eq("id", identity_id)\
            .limit(1)\
            .execute()
        if not result.data:
            return None
        try:
            return UserProfile(**result.data[0])
        except ValidationError as e:
            logger.warning(f"Ignoring invalid profile row for {identity_id}: {e}")
            return None


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_by_id(self, user_id: str) -> UserProfile:
        """Get user profile by ID"""
        try:
            result = self.supabase.table("profiles")\
                .select(PROFILE_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserProfile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error getting user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load user")

    def list_users(
        self,
        company_ids: Optional[List[str]] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[UserProfile]:
        """List profiles, restricted to company_ids unless None (super_user)"""
        try:
            if company_ids is not None and len(company_ids) == 0:
                return []
            query = self.supabase.table("profiles").select(PROFILE_COLUMNS)
            if company_ids is not None:
                query = query.in_("company_id", company_ids)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [UserProfile(**user) for user in result.data]
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            raise HTTPException(status_code=500, detail="Failed to list users")

    def create_profile(self, user_id: str, user_data: UserCreate, company_id: Optional[str]) -> UserProfile:
        """Insert the profile row for a freshly provisioned auth user"""
        try:
            result = self.supabase.table("profiles").insert({
                "id": user_id,
                "email": user_data.email,
                "full_name": user_data.full_name,
                "role": user_data.role.value,
                "company_id": company_id,
                "location_ids": list(user_data.location_ids),
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create user profile")

            return UserProfile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating profile for {user_data.email}: {e}")
            raise HTTPException(status_code=500, detail="Failed to create user profile")

    def update_user(self, user_id: str, user_data: UserUpdate) -> UserProfile:
        """Update user profile"""
        try:
            update_data = {}
            if user_data.full_name is not None:
                update_data["full_name"] = user_data.full_name
            if user_data.role is not None:
                update_data["role"] = user_data.role.value
            if user_data.company_id is not None:
                update_data["company_id"] = user_data.company_id
            if user_data.location_ids is not None:
                update_data["location_ids"] = list(user_data.location_ids)

            if not update_data:
                return self.get_user_by_id(user_id)

            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User not found")

            return UserProfile(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update user")

    def delete_user(self, user_id: str) -> bool:
        """Delete user profile (auth user is removed separately)"""
        try:
            result = self.supabase.table("profiles")\
                .delete()\
                .eq("id", user_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete user")
