# caminho: accounts_app/config/settings.py
# Conteúdo:
# - Settings: carrega configurações do .env com validações/tipos
# - URL base de redirecionamento dos e-mails de senha (SITE_URL / DEV_REDIRECT_URL)

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Carrega variáveis de ambiente do .env com defaults sensatos e validações."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Sistema / Log
    # -------------------------------------------------------------------------
    DEPLOYMENT_ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    LOG_LEVEL: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "FATAL"] = "WARNING"
    DEFAULT_LOCALE: str = "es"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000

    # -------------------------------------------------------------------------
    # Supabase (GoTrue + PostgREST)
    # -------------------------------------------------------------------------
    SUPABASE_URL: str = "http://localhost:54321"
    SUPABASE_ANON_KEY: SecretStr = SecretStr("anon-key")
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("service-role-key")
    SUPABASE_JWT_SECRET: Optional[SecretStr] = Field(
        default=None,
        description="Quando informado, o token do chamador é validado localmente antes de consultar o GoTrue.",
    )
    SUPABASE_JWT_ALGORITHM: str = "HS256"
    SUPABASE_JWT_AUDIENCE: str = "authenticated"
    SUPABASE_PROFILES_TABLE: str = "user_profiles"
    SUPABASE_TIMEOUT_S: float = 10.0

    @field_validator("SUPABASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        """Remove a barra final para concatenar os paths do GoTrue/PostgREST."""
        if isinstance(v, str):
            v = v.strip().rstrip("/")
            if not v.startswith(("http://", "https://")):
                raise ValueError("SUPABASE_URL deve usar o esquema 'http://' ou 'https://'.")
        return v

    # -------------------------------------------------------------------------
    # Links enviados por e-mail
    # - DEV_REDIRECT_URL, quando presente, substitui SITE_URL
    # -------------------------------------------------------------------------
    SITE_URL: str = "http://localhost:3000"
    DEV_REDIRECT_URL: Optional[str] = None
    PASSWORD_RESET_PATH: str = "/auth/reset-password"

    # -------------------------------------------------------------------------
    # Redis
    # -------------------------------------------------------------------------
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = True

    # -------------------------------------------------------------------------
    # Segurança adicional
    # -------------------------------------------------------------------------
    PASSWORD_RESET_INTERVAL_SECONDS: int = 60

    # -------------------------------------------------------------------------
    # Painel administrativo
    # -------------------------------------------------------------------------
    ADMIN_USERS_PATH: str = "/admin/usuarios"

    # -------------------------------------------------------------------------
    # Conveniências derivadas
    # -------------------------------------------------------------------------
    @property
    def redirect_base_url(self) -> str:
        """Base usada nos links de redefinição de senha."""
        override = (self.DEV_REDIRECT_URL or "").strip()
        base = override or (self.SITE_URL or "").strip() or "http://localhost:3000"
        return base.rstrip("/")

    def password_reset_redirect(self, *, invited: bool = False) -> str:
        url = f"{self.redirect_base_url}{self.PASSWORD_RESET_PATH}"
        return f"{url}?invited=true" if invited else url
