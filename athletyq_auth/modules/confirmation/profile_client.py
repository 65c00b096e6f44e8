"""
HTTP client for the create-profile endpoint, used by the confirmation flow
"""

import logging
from typing import Any, Dict, Optional

import httpx

from athletyq_auth.modules.auth.schemas import Account

logger = logging.getLogger(__name__)

CREATE_PROFILE_PATH = "/api/auth/create-profile"


class ProfileApiClient:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self.transport = transport

    @staticmethod
    def build_payload(account: Account) -> Dict[str, Any]:
        metadata = account.user_metadata or {}
        return {
            "userId": account.id,
            "fullName": metadata.get("full_name"),
            "role": metadata.get("role"),
            "email": account.email,
        }

    async def create_profile(self, account: Account, access_token: Optional[str] = None) -> httpx.Response:
        """POST the account's signup metadata. Transport errors propagate to the caller."""
        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        # No retries and no request timeout: failures surface on first occurrence
        async with httpx.AsyncClient(base_url=self.base_url, transport=self.transport, timeout=None) as client:
            response = await client.post(CREATE_PROFILE_PATH, json=self.build_payload(account), headers=headers)
        logger.debug(f"create-profile responded {response.status_code} for {account.id}")
        return response
