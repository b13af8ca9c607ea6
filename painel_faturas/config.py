"""Configuration management for Painel de Faturas.

Centralizes all environment variable access for better testability and maintainability.
"""

import os
from typing import Optional

DEFAULT_WEBHOOK_URL = "https://n8n.pagluz.com.br/webhook/celesc-bot"
DEFAULT_STORAGE_BUCKET = "celesc-faturas"

ONCE_FAILURE_POLICIES = ("delete", "deactivate")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Application configuration loaded from environment variables."""

    # Supabase configuration
    @staticmethod
    def supabase_url() -> Optional[str]:
        """Get Supabase project URL from environment."""
        return os.environ.get("SUPABASE_URL")

    @staticmethod
    def supabase_service_role_key() -> Optional[str]:
        """Get Supabase service role key from environment."""
        return os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

    @staticmethod
    def storage_bucket() -> str:
        """Get the Supabase Storage bucket holding generated PDFs."""
        return os.environ.get("STORAGE_BUCKET", DEFAULT_STORAGE_BUCKET)

    @staticmethod
    def signed_url_ttl_seconds() -> int:
        """Lifetime of signed download URLs."""
        return _env_int("SIGNED_URL_TTL_SECONDS", 60)

    # Automation webhook
    @staticmethod
    def webhook_url() -> str:
        """Get the invoice automation webhook endpoint."""
        return os.environ.get("WEBHOOK_URL", DEFAULT_WEBHOOK_URL)

    @staticmethod
    def webhook_timeout_seconds() -> int:
        return _env_int("WEBHOOK_TIMEOUT_SECONDS", 120)

    # Background loops
    @staticmethod
    def enable_background_tasks() -> bool:
        """Whether the scheduler and poller start with the app."""
        return _env_bool("ENABLE_BACKGROUND_TASKS", True)

    @staticmethod
    def scheduler_interval_seconds() -> int:
        return _env_int("SCHEDULER_INTERVAL_SECONDS", 60)

    @staticmethod
    def poller_interval_seconds() -> int:
        return _env_int("POLLER_INTERVAL_SECONDS", 25)

    @staticmethod
    def dispatch_throttle_seconds() -> int:
        """Minimum gap between two webhook calls in one scheduler cycle."""
        return _env_int("DISPATCH_THROTTLE_SECONDS", 180)

    @staticmethod
    def once_failure_policy() -> str:
        """What to do with a one-time dispatch whose webhook call failed.

        'delete' removes it like a successful one. 'deactivate' keeps the row
        with is_active=false so the failure stays visible.
        """
        policy = os.environ.get("ONCE_FAILURE_POLICY", "delete").strip().lower()
        if policy not in ONCE_FAILURE_POLICIES:
            raise ValueError(
                f"Invalid ONCE_FAILURE_POLICY: {policy}. "
                f"Must be one of {', '.join(ONCE_FAILURE_POLICIES)}"
            )
        return policy

    # Logging
    @staticmethod
    def log_level() -> str:
        return os.environ.get("LOG_LEVEL", "INFO").upper()

    # Helper methods
    @staticmethod
    def is_configured() -> bool:
        """Check if all required configuration is present."""
        return all([
            Config.supabase_url(),
            Config.supabase_service_role_key(),
        ])

    @staticmethod
    def get_missing_config() -> list[str]:
        """Get list of missing required configuration keys."""
        missing = []
        if not Config.supabase_url():
            missing.append("SUPABASE_URL")
        if not Config.supabase_service_role_key():
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
        return missing


# Singleton instance for easy access
config = Config()
