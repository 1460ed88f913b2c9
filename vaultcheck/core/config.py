"""Core configuration for the vaultcheck harness."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Harness settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VAULTCHECK_",
        case_sensitive=False,
    )

    # ── App ──────────────────────────────────────────────────────────────
    app_name: str = "vaultcheck"
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # ── Actors & assets ──────────────────────────────────────────────────
    actor_count: int = Field(default=3, ge=1)
    max_actors: int = Field(default=16, ge=1)
    asset_decimals: int = Field(default=18, ge=0, le=255)

    # ── Vault under test ─────────────────────────────────────────────────
    vault_variant: Literal["erc4626", "reference"] = "erc4626"
    vault_decimals_offset: int = Field(default=0, ge=0, le=18)

    # ── Campaign ─────────────────────────────────────────────────────────
    campaign_sequences: int = Field(default=50, ge=0)
    campaign_sequence_length: int = Field(default=30, ge=1)
    campaign_seed: int | None = None
    campaign_check_interval: int = Field(default=1, ge=1)
    campaign_enable_shrinking: bool = True

    # ── Sampling ─────────────────────────────────────────────────────────
    safety_cap_bits: int = Field(default=128, ge=8, le=256)

    @property
    def safety_cap(self) -> int:
        return 2**self.safety_cap_bits - 1


@lru_cache
def get_settings() -> Settings:
    """Return cached settings singleton."""
    return Settings()
