"""
Core dependencies for route handlers
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from athletyq_auth.config.settings import Settings, settings
from athletyq_auth.core.errors import AuthenticationError, InvalidBodyError
from athletyq_auth.database.supabase_client import SupabaseClient, get_supabase_client
from athletyq_auth.modules.auth.service import AuthGateway
from athletyq_auth.modules.profiles.repository import ProfileRepository
from athletyq_auth.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

# auto_error is off so a missing header renders through the error envelope
security = HTTPBearer(auto_error=False)


def get_settings() -> Settings:
    return settings


def get_supabase() -> SupabaseClient:
    return get_supabase_client()


def get_auth_gateway(supabase: SupabaseClient = Depends(get_supabase)) -> AuthGateway:
    return AuthGateway(supabase.create_auth_client())


def get_profile_repository(supabase: SupabaseClient = Depends(get_supabase)) -> ProfileRepository:
    return ProfileRepository(supabase.get_service_client())


def get_profile_service(
    repository: ProfileRepository = Depends(get_profile_repository)
) -> ProfileService:
    return ProfileService(repository)


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract the access token from the Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing auth token")
    return credentials.credentials


async def read_json_object(request: Request) -> Dict[str, Any]:
    """Decode the request body as a JSON object; anything else is an invalid body."""
    raw = await request.body()
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidBodyError()
    if not isinstance(body, dict):
        raise InvalidBodyError()
    return body
