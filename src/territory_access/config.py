"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TERRITORY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Territory Access API"
    api_prefix: str = "/api"
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:5174",
            "http://127.0.0.1:5174",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    users_table: str = Field(default="users", description="Table holding principals and the user population.")
    territory_column: str = Field(
        default="admin_assigned_location",
        description="JSON column storing each administrator's territory blob.",
    )
    zipcode_column: str = Field(default="zipcode", description="Column used for exact zipcode filtering.")
    zipcode_candidate_fields: tuple[str, ...] = Field(
        default=("zipcode", "postal_code", "zip_code", "pincode", "pin_code", "zip", "postal"),
        description="Record fields checked, in order, for a zipcode-like value.",
    )

    # Assigned-territory cache and catalog tuning
    zipcode_cache_ttl_seconds: float = Field(default=30.0, ge=0.0)
    users_per_synthetic_zipcode: int = Field(default=5, ge=1)
    max_synthetic_zipcodes: int = Field(default=10, ge=1)
    max_listed_synthetic_zipcodes: int = Field(default=5, ge=1)
    suggestion_limit: int = Field(default=10, ge=1)

    @field_validator("frontend_allowed_origins", "zipcode_candidate_fields", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()


settings = Settings()
