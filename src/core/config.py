"""Process configuration, read from environment variables (and an optional .env file)."""

import os
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

load_dotenv()


class Settings(BaseModel):
    port: int = 3000
    public_url: Optional[str] = None
    log_level: str = "INFO"

    # Signature verification (Neynar hub API)
    neynar_api_key: str = ""
    neynar_api_url: str = "https://api.neynar.com"
    verify_timeout_seconds: float = 10.0

    # Static link destinations
    base_connect_url: str = "https://wallet.coinbase.com/"
    arb_connect_url: str = "https://portal.arbitrum.io/"
    share_url_base: str = "https://warpcast.com/~/compose"

    # Match store
    match_backend: Literal["memory", "sql"] = "memory"
    database_url: str = "sqlite://"
    match_ttl_seconds: int = 3600  # 0 disables expiry
    sweep_interval_seconds: int = 60

    @field_validator("public_url", "neynar_api_url")
    @classmethod
    def strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return value.rstrip("/")

    @property
    def base_url(self) -> str:
        """Public address the frame is served from. Used to build image and callback URLs."""
        return self.public_url or f"http://localhost:{self.port}"

    @classmethod
    def from_env(cls) -> "Settings":
        env = os.environ
        values: dict[str, object] = {
            "port": env.get("PORT", "3000"),
            "public_url": env.get("PUBLIC_URL") or None,
            "log_level": env.get("LOG_LEVEL", "INFO").upper(),
            "neynar_api_key": env.get("NEYNAR_API_KEY", "").strip(),
            "neynar_api_url": env.get("NEYNAR_API_URL", "https://api.neynar.com"),
            "verify_timeout_seconds": env.get("VERIFY_TIMEOUT_SECONDS", "10"),
            "base_connect_url": env.get(
                "BASE_CONNECT_URL", "https://wallet.coinbase.com/"
            ),
            "arb_connect_url": env.get("ARB_CONNECT_URL", "https://portal.arbitrum.io/"),
            "share_url_base": env.get(
                "SHARE_URL_BASE", "https://warpcast.com/~/compose"
            ),
            "match_backend": env.get("MATCH_BACKEND", "memory").strip().lower(),
            "database_url": env.get("DATABASE_URL", "sqlite://"),
            "match_ttl_seconds": env.get("MATCH_TTL_SECONDS", "3600"),
            "sweep_interval_seconds": env.get("SWEEP_INTERVAL_SECONDS", "60"),
        }
        return cls.model_validate(values)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
