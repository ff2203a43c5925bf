"""Pydantic BaseSettings — signer configuration from env / .env."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from models.chain import EthChain


class Settings(BaseSettings):
    """Central configuration loaded from env / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Application ─────────────────────────────────────────────
    APP_ENV: Literal["dev", "test", "prod"] = "dev"
    APP_NAME: str = "hl-signer"
    LOG_LEVEL: str = "INFO"

    # ── Chain ───────────────────────────────────────────────────
    DEFAULT_CHAIN: EthChain = EthChain.ARBITRUM_GOERLI
    AGENT_SOURCE: str = "https://hyperliquid.xyz"

    # ── Signing pool ────────────────────────────────────────────
    SIGNER_MAX_WORKERS: int = Field(default=2, ge=1)

    # ── Credentials (never commit real values) ──────────────────
    PRIVATE_KEY: str = ""


settings = Settings()
