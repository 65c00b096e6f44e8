from typing import Optional

from supabase import create_client, Client

from athletyq_auth.config.settings import Settings, require_supabase_config, settings as app_settings


class SupabaseClient:
    """Builds Supabase clients from an explicit Settings object."""

    def __init__(self, settings: Settings):
        self.settings = require_supabase_config(settings)
        self._service_client: Optional[Client] = None

    def create_auth_client(self) -> Client:
        """Fresh client with the publishable key. sign_up/verify_otp/set_session store
        a session on the client, so auth calls never share one across requests."""
        return create_client(self.settings.supabase_url, self.settings.supabase_key)

    def get_service_client(self) -> Client:
        """Client with service_role key; bypasses RLS. Used for the profiles table."""
        if self._service_client is None:
            self._service_client = create_client(
                self.settings.supabase_url, self.settings.supabase_service_role_key
            )
        return self._service_client


_instance: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    global _instance
    if _instance is None:
        _instance = SupabaseClient(app_settings)
    return _instance
