import yaml
import re
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv
import os

# Load .env from project root
project_root = Path(__file__).parent.parent.parent
env_path = project_root / ".env"
load_dotenv(env_path)


def substitute_env_vars(value):
    """
    Recursively substitute ${VAR_NAME} or ${VAR_NAME:-default} patterns
    with environment variable values.
    """
    if isinstance(value, str):
        # Pattern matches ${VAR_NAME} or ${VAR_NAME:-default_value}
        pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

        def replace_match(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.environ.get(var_name, default_value)

        return re.sub(pattern, replace_match, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(item) for item in value]
    return value


def load_yaml_with_env(yaml_path: Path) -> dict:
    """Load YAML file with environment variable substitution."""
    if not yaml_path.exists():
        return {}

    with open(yaml_path) as f:
        raw_config = yaml.safe_load(f) or {}

    return substitute_env_vars(raw_config)


class AppSettings(BaseSettings):
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


class StorageSettings(BaseSettings):
    upload_dir: str = "uploads"
    max_files: int = 10


class OcrSettings(BaseSettings):
    """Settings for text recognition and PDF rasterization."""
    model_config = SettingsConfigDict(env_prefix="OCR_")

    language: str = "eng"
    pdf_dpi: int = 300
    denoise: bool = True
    enhance_contrast: bool = True


class GeminiSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GEMINI_")

    model: str = "gemini-1.5-flash"
    api_key: Optional[str] = None
    temperature: float = 0.0


class ScoringSettings(BaseSettings):
    """External prediction service the feature vector is relayed to."""
    model_config = SettingsConfigDict(env_prefix="SCORING_")

    enabled: bool = True
    url: str = "http://localhost:8000/predict"
    timeout: float = 10.0


class CatalogSettings(BaseSettings):
    """Optional YAML override for the lab field catalog."""
    model_config = SettingsConfigDict(env_prefix="LAB_FIELDS_")

    path: Optional[str] = None


class Settings(BaseSettings):
    app: AppSettings = AppSettings()
    storage: StorageSettings = StorageSettings()
    ocr: OcrSettings = OcrSettings()
    gemini: GeminiSettings = GeminiSettings()
    scoring: ScoringSettings = ScoringSettings()
    catalog: CatalogSettings = CatalogSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",  # Ignore extra fields not in the model
    )


def _clean_config(value):
    """Drop empty strings left by unset ${VAR} substitutions so model defaults apply."""
    if isinstance(value, dict):
        return {k: _clean_config(v) for k, v in value.items() if v != ""}
    if isinstance(value, list):
        return [_clean_config(item) for item in value if item != ""]
    return value


@lru_cache()
def get_settings() -> Settings:
    """Load settings from YAML config file with environment variable substitution."""
    config_path = project_root / "config" / "settings.yaml"

    # Load YAML with ${VAR_NAME} substitution from .env
    yaml_config = _clean_config(load_yaml_with_env(config_path))

    return Settings(**yaml_config)
