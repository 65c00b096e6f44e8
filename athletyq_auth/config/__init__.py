from athletyq_auth.config.settings import Settings, require_supabase_config, settings

__all__ = ["Settings", "require_supabase_config", "settings"]
