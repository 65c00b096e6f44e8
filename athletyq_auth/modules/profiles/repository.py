import logging

from supabase import Client, PostgrestAPIError

from athletyq_auth.core.errors import ProfileCreationError
from athletyq_auth.modules.profiles.models import PROFILES_TABLE, UNIQUE_VIOLATION
from athletyq_auth.modules.profiles.schemas import (
    CreateProfileRequest, InsertOutcome, UserRole
)

logger = logging.getLogger(__name__)


class ProfileRepository:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def exists(self, user_id: str) -> bool:
        """Presence check before insert. Not relied on for correctness: a failed
        lookup reports False and the insert decides."""
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .select("user_id")\
                .eq("user_id", user_id)\
                .maybe_single()\
                .execute()
        except PostgrestAPIError as e:
            logger.warning(f"Profile lookup failed for user {user_id}: {e.code} {e.message}")
            return False
        return bool(result and result.data)


    def insert_if_absent(self, profile: CreateProfileRequest) -> InsertOutcome:
        """Insert the row; a unique violation on user_id means it is already there."""
        try:
            self.supabase.table(PROFILES_TABLE).insert({
                "user_id": profile.user_id,
                "full_name": profile.full_name,
                "role": profile.role.value,
                "email": profile.email,
            }).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Profile already exists for user {profile.user_id}")
                return InsertOutcome.ALREADY_EXISTED
            logger.error(f"Profile insert failed for user {profile.user_id}: {e.code} {e.message}")
            raise ProfileCreationError(code=e.code, details=e.message)
        return InsertOutcome.CREATED

    def create(self, user_id: str, full_name: str, role: UserRole, email: str) -> InsertOutcome:
        return self.insert_if_absent(
            CreateProfileRequest(user_id=user_id, full_name=full_name, role=role, email=email)
        )
