"""
equiprent.settings
==================

Configuration settings for the equiprent application.

This module provides centralized configuration options that can be used across
the engine, the persistence adapters and the HTTP layer. It includes default
values that can be overridden via environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------------
# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent.parent

# Database settings
# ---------------------------------------------------------------------------
DB_FILE = os.environ.get("EQUIPRENT_DB_FILE", BASE_DIR / "equiprent.db")
DB_URL = os.environ.get("EQUIPRENT_DB_URL", f"sqlite:///{DB_FILE}")
DB_ECHO = os.environ.get("EQUIPRENT_DB_ECHO", "False").lower() == "true"

# API settings
# ---------------------------------------------------------------------------
API_HOST = os.environ.get("EQUIPRENT_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("EQUIPRENT_API_PORT", "8000"))
API_DEBUG = os.environ.get("EQUIPRENT_API_DEBUG", "False").lower() == "true"


# ---------------------------------------------------------------------------
# Pydantic settings model for business defaults
# ---------------------------------------------------------------------------
class Settings(BaseSettings):
    """Pydantic model for application settings, loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EQUIPRENT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Placeholders stored when the caller leaves a field blank
    default_delivery_address: str = Field("To be defined", description="Stored when no delivery address is given")
    unknown_customer_name: str = Field("Unknown customer", description="Customer name snapshot when the lookup fails")
    unknown_equipment_name: str = Field("Unknown equipment", description="Equipment name snapshot when the lookup fails")

    # Payment
    default_payment_method: str = Field("pix", description="Payment method for extensions whose source has none")

    # Extension note, e.g. "Extension of rental ID: 7. Original period from 01/01/2024 to 05/01/2024."
    note_date_format: str = Field("%d/%m/%Y", description="strftime format used in generated notes")

    # HTTP layer
    allowed_origins: List[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="CORS origins accepted by the API",
    )


# Initialize settings
settings = Settings()
