"""
Configuration for DFA Simulator.

Settings come from an optional YAML file and are then overridden by
environment variables:

    DFA_SIM_CONFIG        path to a settings.yaml (default: ./config/settings.yaml)
    DFA_DB_PATH           SQLite file for saved DFAs
    DFA_LOG_DIR           directory for rotating log files
    DFA_LOG_LEVEL         DEBUG, INFO, WARNING, ERROR
    DFA_MAX_INPUT_LENGTH  longest input string accepted by the API
    CORS_ALLOWED_ORIGINS  comma-separated origins
    ENVIRONMENT           "development" allows all origins
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

SERVICE_DIR = Path(__file__).parent.parent

_ENV_FIELDS = {
    "DFA_DB_PATH": "db_path",
    "DFA_LOG_DIR": "log_dir",
    "DFA_LOG_LEVEL": "log_level",
    "DFA_MAX_INPUT_LENGTH": "max_input_length",
    "ENVIRONMENT": "environment",
}


class Settings(BaseModel):
    db_path: str = Field(default=str(SERVICE_DIR / ".data" / "dfas.db"))
    log_dir: str = Field(default=str(SERVICE_DIR / "logs"))
    log_level: str = "INFO"
    max_input_length: int = Field(default=1000, gt=0)
    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000", "http://localhost:8501"]
    )
    environment: str = "production"

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Unknown log level: {v}")
        return v

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v

    @property
    def allowed_origins(self) -> List[str]:
        # In development, allow all origins
        if self.environment == "development":
            return ["*"]
        return self.cors_allowed_origins


def _find_config_file(config_path: Optional[str]) -> Optional[Path]:
    if config_path:
        return Path(config_path)
    env_path = os.environ.get("DFA_SIM_CONFIG")
    if env_path:
        return Path(env_path)
    default = Path(os.getcwd()) / "config" / "settings.yaml"
    return default if default.exists() else None


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build Settings from YAML (if any) plus environment overrides."""
    data = {}
    path = _find_config_file(config_path)
    if path is not None:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    for env_name, field in _ENV_FIELDS.items():
        value = os.environ.get(env_name)
        if value:
            data[field] = value

    origins = os.environ.get("CORS_ALLOWED_ORIGINS")
    if origins:
        data["cors_allowed_origins"] = origins

    return Settings(**data)
