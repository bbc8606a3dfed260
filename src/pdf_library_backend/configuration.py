from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"
CONFIG_ENV_VAR = "PDF_LIBRARY_CONFIG"


class StorageSettings(BaseModel):
    db_file: Path = Path("data/books.json")
    upload_dir: Path = Path("libros")
    public_prefix: str = "/libros"
    max_upload_bytes: int = Field(default=50 * 1024 * 1024, gt=0)


class ServiceSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int


class CorsSettings(BaseModel):
    allow_origins: List[str] = ["*"]


class LoggingSettings(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    storage: StorageSettings = StorageSettings()
    upload_service: ServiceSettings = ServiceSettings(port=5000)
    admin_service: ServiceSettings = ServiceSettings(port=3000)
    cors: CorsSettings = CorsSettings()
    logging: LoggingSettings = LoggingSettings()


def load_config(override_path: Optional[Path] = None) -> DictConfig:
    """
    Load the packaged defaults and merge an optional override file on top.

    ``override_path`` falls back to the ``PDF_LIBRARY_CONFIG`` environment variable.
    """
    if not DEFAULT_CONFIG_PATH.exists():
        raise FileNotFoundError(f"Default config not found at {DEFAULT_CONFIG_PATH}")
    config = OmegaConf.load(DEFAULT_CONFIG_PATH)

    override = override_path or os.environ.get(CONFIG_ENV_VAR)
    if override:
        override_file = Path(override)
        if not override_file.exists():
            raise FileNotFoundError(f"Config override not found at {override_file}")
        config = OmegaConf.merge(config, OmegaConf.load(override_file))
    return DictConfig(config)


def build_settings(overrides: Optional[Dict[str, Any]] = None, override_path: Optional[Path] = None) -> Settings:
    config = load_config(override_path)
    if overrides:
        config = DictConfig(OmegaConf.merge(config, OmegaConf.create(overrides)))
    container = OmegaConf.to_container(config, resolve=True)
    return Settings.model_validate(container)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return build_settings()
