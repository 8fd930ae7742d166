from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # DB
    database_url: str = Field(
        default="sqlite+pysqlite:///./fantasy_relay.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = False

    # yahoo oauth2
    yahoo_client_id: str | None = Field(default=None, repr=False)
    yahoo_client_secret: str | None = Field(default=None, repr=False)
    yahoo_scopes: list[str] = Field(default_factory=lambda: ["fspt-w"])
    auth_url: str = "https://api.login.yahoo.com/oauth2/request_auth"
    token_url: str = "https://api.login.yahoo.com/oauth2/get_token"

    # fantasy api
    fantasy_base_url: str = "https://fantasysports.yahooapis.com/fantasy/v2"
    response_format: str | None = None
    request_timeout_s: float = 30.0

    # web
    host_name: str = "http://localhost:8000"
    callback_path: str = "/yahoo/auth/callback"
    landing_url: str = "/"
    session_cookie_name: str = "fantasy_session"
    session_cookie_secure: bool = False

    log_level: str = "INFO"

    @property
    def redirect_uri(self) -> str:
        return self.host_name.rstrip("/") + self.callback_path

    # -----------------------------
    # Required-key helpers
    # -----------------------------

    def require_client_id(self) -> str:
        if not self.yahoo_client_id:
            raise RuntimeError(
                "YAHOO_CLIENT_ID is not set. Set it in the environment or .env file."
            )
        return self.yahoo_client_id

    def require_client_secret(self) -> str:
        if not self.yahoo_client_secret:
            raise RuntimeError(
                "YAHOO_CLIENT_SECRET is not set. Set it in the environment or .env file."
            )
        return self.yahoo_client_secret


settings = Settings()
