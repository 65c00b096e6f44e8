import logging

from athletyq_auth.modules.auth.schemas import Account
from athletyq_auth.modules.auth.validators import validate_profile_metadata
from athletyq_auth.modules.profiles.repository import ProfileRepository
from athletyq_auth.modules.profiles.schemas import CreateProfileRequest, InsertOutcome, ProfileCreation

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, repository: ProfileRepository):
        self.repository = repository

    def create_profile(self, request: CreateProfileRequest) -> ProfileCreation:
        """Create the profile row for a confirmed account. Safe to call more than once."""
        if self.repository.exists(request.user_id):
            logger.info(f"Profile already exists for user: {request.user_id}")
            return ProfileCreation(user_id=request.user_id, created=False, message="Profile already exists")

        logger.info(f"Creating profile for user: {request.user_id} ({request.role.value})")
        outcome = self.repository.insert_if_absent(request)
        if outcome is InsertOutcome.ALREADY_EXISTED:
            return ProfileCreation(user_id=request.user_id, created=False, message="Profile already exists")
        return ProfileCreation(user_id=request.user_id, created=True)

    def create_from_account(self, account: Account) -> ProfileCreation:
        """Create the profile from the metadata stored on the account at signup"""
        request = validate_profile_metadata(account.id, account.user_metadata, account.email)
        return self.create_profile(request)
