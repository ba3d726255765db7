from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "ElderEase Access API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains (CORS)
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = Field(None, env="FRONTEND_DOMAIN")
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Role records & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # Table holding one row per role record
    ROLES_TABLE: str = "roles"

    # -------------------------------------------------
    # Access control
    # -------------------------------------------------
    SUPER_ADMIN_ROLE: str = "Super Admin"

    # Entry surface (login) and the Super Admin landing page
    LOGIN_PATH: str = "/"
    DASHBOARD_PATH: str = "/dashboard"

    # Idle sessions are dropped after this long and reloaded from the store
    SESSION_TTL_SECONDS: int = 900

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list after loading settings
# -------------------------------------------------
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    settings.BACKEND_CORS_ORIGINS = sorted({domain.rstrip("/"), *settings.BACKEND_CORS_ORIGINS})
