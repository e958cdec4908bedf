"""Environment configuration for the notification job."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from shared.errors import SetupError

load_dotenv()

RECORD_STORES = ("github", "supabase")


class Settings(BaseModel):
    """Runtime configuration read from the environment."""

    record_store: str = Field("github", pattern="^(github|supabase)$")
    github_token: str | None = None
    github_data_repo: str = "nastia-data"
    supabase_url: str | None = None
    supabase_key: str | None = None
    vapid_public_key: str | None = None
    vapid_private_key: str | None = None
    vapid_subject: str = "mailto:noreply@nastia-calendar.com"
    enable_llm: bool = True
    ollama_model: str = "llama3.1:8b"
    recipient_name: str = "Nastia"
    app_base_url: str = "https://segigu.github.io/nastia-calendar/"

    @property
    def notifications_url(self) -> str:
        return f"{self.app_base_url.rstrip('/')}/?open=notifications"


def _env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_settings(require_push: bool = True) -> Settings:
    """
    Build Settings from environment variables and check required credentials.

    Args:
        require_push: If False, VAPID keys are optional (dry runs never send)

    Returns:
        Validated Settings

    Raises:
        SetupError: If the record store is unknown or credentials are missing
    """
    record_store = (_env("RECORD_STORE") or "github").lower()
    if record_store not in RECORD_STORES:
        raise SetupError(
            f"RECORD_STORE must be one of {', '.join(RECORD_STORES)}, got '{record_store}'"
        )

    missing = []
    if record_store == "github" and not _env("GITHUB_TOKEN"):
        missing.append("GITHUB_TOKEN")
    if record_store == "supabase":
        if not _env("SUPABASE_URL"):
            missing.append("SUPABASE_URL")
        if not _env("SUPABASE_SERVICE_KEY"):
            missing.append("SUPABASE_SERVICE_KEY")
    if require_push:
        if not _env("VAPID_PUBLIC_KEY"):
            missing.append("VAPID_PUBLIC_KEY")
        if not _env("VAPID_PRIVATE_KEY"):
            missing.append("VAPID_PRIVATE_KEY")

    if missing:
        raise SetupError(f"Missing required environment variables: {', '.join(missing)}")

    overrides = {
        "github_data_repo": _env("GITHUB_DATA_REPO"),
        "vapid_subject": _env("VAPID_SUBJECT"),
        "ollama_model": _env("OLLAMA_MODEL"),
        "recipient_name": _env("RECIPIENT_NAME"),
        "app_base_url": _env("APP_BASE_URL"),
    }

    return Settings(
        record_store=record_store,
        github_token=_env("GITHUB_TOKEN"),
        supabase_url=_env("SUPABASE_URL"),
        supabase_key=_env("SUPABASE_SERVICE_KEY"),
        vapid_public_key=_env("VAPID_PUBLIC_KEY"),
        vapid_private_key=_env("VAPID_PRIVATE_KEY"),
        enable_llm=(_env("ENABLE_LLM") or "true").lower() == "true",
        **{key: value for key, value in overrides.items() if value is not None},
    )
