"""Settings for alias delegation.

Values are read from environment variables prefixed with
``ALIAS_DELEGATION_`` (e.g. ``ALIAS_DELEGATION_STORE_PATH``), falling back to
the defaults below.
"""
from __future__ import annotations

import datetime
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DelegationSettings(BaseSettings):
    """Configuration shared by the alias store, session and follow registry."""

    model_config = SettingsConfigDict(env_prefix="ALIAS_DELEGATION_", extra="ignore")

    # Local persistence
    storage_key: str = Field(default="aliases", min_length=1)
    store_path: Optional[Path] = None

    # Server-side acceptance window for alias bindings
    validity_window_days: int = Field(default=30, gt=0)
    alias_lookup_limit: int = Field(default=1, gt=0)

    # Follow registry
    follows_limit: int = Field(default=500, gt=0)
    follow_session_retries: int = Field(default=1, ge=0)

    # User-facing failure text for guarded actions
    failure_message: str = "Oops, something went wrong!"

    # EIP-712 domain used when signing envelopes
    envelope_domain: str = "snapshot"
    envelope_version: str = "0.1.4"

    @property
    def validity_window(self) -> datetime.timedelta:
        """The validity window as a :class:`datetime.timedelta`."""
        return datetime.timedelta(days=self.validity_window_days)
