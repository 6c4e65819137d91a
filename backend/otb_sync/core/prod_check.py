"""
Startup checks for APP_ENV=prod.
Any failure raises RuntimeError and the application does not start.
"""
from otb_sync.core.config import settings

INSECURE_DEFAULTS = {
    "SESSION_SECRET": "change_me_session_secret",
}


def validate_production_config() -> None:
    """Refuse wildcard CORS, the default session secret and placeholder sink credentials in production."""
    if (getattr(settings, "app_env", "dev") or "dev").strip().lower() != "prod":
        return

    errors: list[str] = []

    if not (settings.cors_origins or "").strip():
        errors.append("CORS_ORIGINS must not be empty in production.")
    elif settings.cors_origins.strip() == "*":
        errors.append(
            "CORS_ORIGINS must not be '*' in production. "
            "Configure an explicit list of origins (e.g. https://dashboard.example.com)."
        )

    secret = (settings.session_secret or "").strip()
    if secret in ("", INSECURE_DEFAULTS["SESSION_SECRET"]):
        errors.append("SESSION_SECRET must be set and must not use the default value in production.")
    elif len(secret) < 16:
        errors.append("SESSION_SECRET must be at least 16 characters in production.")

    if "change_me" in (settings.sink_database_url or ""):
        errors.append("SINK_DATABASE_URL must not contain a placeholder password (change_me) in production.")

    if errors:
        raise RuntimeError(
            "Invalid production configuration:\n  - " + "\n  - ".join(errors)
        )
