"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the back-office service."""

    app_name: str = "D-Frames Back-Office API"
    app_env: str = getenv("APP_ENV", "dev")
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./backoffice.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "480"))
    admin_email: str = getenv("ADMIN_EMAIL", "")
    admin_password: str = getenv("ADMIN_PASSWORD", "")
    admin_name: str = getenv("ADMIN_NAME", "Admin User")
    order_enforce_transitions: bool = getenv("ORDER_ENFORCE_TRANSITIONS", "true").strip().lower() in {"1", "true", "yes", "on"}
    audit_retry_attempts: int = int(getenv("AUDIT_RETRY_ATTEMPTS", "3"))
    audit_retry_backoff_seconds: float = float(getenv("AUDIT_RETRY_BACKOFF_SECONDS", "0.05"))
    login_max_attempts: int = int(getenv("LOGIN_MAX_ATTEMPTS", "5"))
    login_window_minutes: int = int(getenv("LOGIN_WINDOW_MINUTES", "15"))
    orders_page_limit_max: int = int(getenv("ORDERS_PAGE_LIMIT_MAX", "100"))


settings: Settings = Settings()
