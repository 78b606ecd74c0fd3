"""
Configuration management for the Blue Carbon registry

Loads settings from:
1. config/config.yaml
2. Environment variables (.env, BLUECARBON_ prefix)
3. Default values
"""

from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment variables
load_dotenv()


class Config(BaseSettings):
    """Central configuration for the registry service."""

    model_config = SettingsConfigDict(
        env_prefix="BLUECARBON_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- API Settings ---
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_key: str = Field(default="")
    cors_origins: str = "http://localhost:5173"  # Comma-separated string
    rate_limit_per_minute: int = 60
    rate_limit_calculate_per_minute: int = 120

    # --- Calculation defaults ---
    default_horizon_years: int = Field(default=20, ge=1)
    initial_credibility_score: int = Field(default=100, ge=0, le=100)

    # --- Ledger (mock Polygon testnet) ---
    ledger_log_delay_seconds: float = Field(default=2.0, ge=0)
    ledger_mint_delay_seconds: float = Field(default=3.0, ge=0)
    ledger_chain_id: int = 80001
    ledger_explorer_url: str = "https://mumbai.polygonscan.com/"

    # --- Logging ---
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # --- Feature Flags ---
    demo_mode: bool = False

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @classmethod
    def from_yaml(cls, yaml_path: str | Path = "config/config.yaml") -> "Config":
        """Load configuration from YAML file; keys set in the file take precedence over env vars, which still fill unset keys"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            return cls()

        with open(yaml_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = Config.from_yaml()
    return _config


def reload_config(yaml_path: Optional[str | Path] = None) -> Config:
    """Reload configuration from file"""
    global _config
    _config = Config.from_yaml(yaml_path) if yaml_path else Config.from_yaml()
    return _config
