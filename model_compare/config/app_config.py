#!filepath: model_compare/config/app_config.py
import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import os

from .log_config import LogConfig
from .data_config import DataConfig
from .comparison_config import ComparisonConfig


def package_root() -> str:
    """
    model_compare/config/app_config.py -> model_compare/config -> model_compare
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def project_root() -> str:
    return os.path.abspath(os.path.join(package_root(), ".."))


class AppConfig(BaseModel):
    log: LogConfig = Field(default_factory=LogConfig)
    data: DataConfig
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        Load YAML config + .env

        - default file: <package_root>/config/base.yml
        - environment overrides:
            MODEL_COMPARE_SOURCE     -> data.source
            MODEL_COMPARE_LOG_LEVEL  -> log.level
        """
        load_dotenv(os.path.join(project_root(), ".env"))

        if path is None:
            path = os.path.join(package_root(), "config", "base.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        source = os.getenv("MODEL_COMPARE_SOURCE")
        if source:
            raw.setdefault("data", {})["source"] = source

        level = os.getenv("MODEL_COMPARE_LOG_LEVEL")
        if level:
            raw.setdefault("log", {})["level"] = level

        return cls(**raw)
