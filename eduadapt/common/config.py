"""
Centralized Configuration for the Adaptive Assessment Engine

Every grading threshold, classification cut-off, allocation table entry and
scoring weight lives here as a named, overridable setting. Values come from
defaults, an optional YAML or JSON file and environment variables, in
increasing order of priority.
"""

import os
import json
import math
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from eduadapt.common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "EDUADAPT_CONFIG_PATH"


def _check_fraction(value: float) -> float:
    if not math.isfinite(value) or not 0.0 <= value <= 1.0:
        raise ValueError(f"must be between 0 and 1, got {value}")
    return value


class GradingConfig(BaseModel):
    """Answer grading thresholds"""
    keyword_overlap_threshold: float = Field(default=0.65)
    edit_similarity_threshold: float = Field(default=0.75)
    # Keywords match by containment in either direction, so at 2 a reply of
    # "is" counts as finding "photosynthesis". Pending product-owner review.
    min_token_length: int = Field(default=2, ge=1)

    @field_validator('keyword_overlap_threshold', 'edit_similarity_threshold')
    @classmethod
    def validate_threshold(cls, v):
        return _check_fraction(v)


class LevelConfig(BaseModel):
    """Learning level classification cut-offs"""
    beginner_easy_accuracy: float = Field(default=0.70)
    beginner_medium_accuracy: float = Field(default=0.30)
    advanced_medium_accuracy: float = Field(default=0.70)
    advanced_hard_accuracy: float = Field(default=0.50)

    @field_validator('*')
    @classmethod
    def validate_accuracy(cls, v):
        return _check_fraction(v)


class MixConfig(BaseModel):
    """One row of the base difficulty allocation table"""
    easy: float
    medium: float
    hard: float

    @field_validator('easy', 'medium', 'hard')
    @classmethod
    def validate_fraction(cls, v):
        return _check_fraction(v)

    @model_validator(mode='after')
    def validate_total(self):
        if self.easy + self.medium + self.hard <= 0:
            raise ValueError("allocation row must have positive mass")
        return self


class AllocationConfig(BaseModel):
    """Difficulty allocation table and the high-accuracy shift"""
    beginner: MixConfig = Field(default_factory=lambda: MixConfig(easy=0.60, medium=0.30, hard=0.10))
    intermediate: MixConfig = Field(default_factory=lambda: MixConfig(easy=0.30, medium=0.50, hard=0.20))
    advanced: MixConfig = Field(default_factory=lambda: MixConfig(easy=0.20, medium=0.40, hard=0.40))
    boost_easy_accuracy: float = Field(default=0.90)
    boost_min_attempts: int = Field(default=5, ge=0)
    boost_shift: float = Field(default=0.10)
    easy_floor: float = Field(default=0.10)

    @field_validator('boost_easy_accuracy', 'boost_shift', 'easy_floor')
    @classmethod
    def validate_fraction(cls, v):
        return _check_fraction(v)

    def base_for(self, level: str) -> MixConfig:
        """Get the base row for a learning level value"""
        try:
            return getattr(self, level)
        except AttributeError:
            raise ConfigurationError(f"No allocation row for level {level!r}", config_key=level)


class ScoringConfig(BaseModel):
    """Selection ranker weights"""
    unseen_score: float = Field(default=100.0, ge=0)
    weakness_weight: float = Field(default=80.0, ge=0)
    recency_points_per_day: float = Field(default=2.0, ge=0)
    recency_cap: float = Field(default=20.0, ge=0)
    practice_bonus: float = Field(default=10.0, ge=0)
    practice_decay: float = Field(default=2.0, ge=0)


class CacheConfig(BaseModel):
    """Analytics cache configuration"""
    enabled: bool = Field(default=True)
    default_ttl: float = Field(default=300.0, ge=0)  # 5 minutes
    max_size: int = Field(default=10000, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = Field(default="INFO")
    json_output: bool = Field(default=False)
    file_path: Optional[str] = Field(default=None)

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class SessionConfig(BaseModel):
    """Personalized session defaults"""
    default_question_count: int = Field(default=10, ge=0)


class EngineConfig(BaseSettings):
    """
    Main engine configuration.

    Environment variables use the ``EDUADAPT_`` prefix and ``__`` to reach
    nested sections, e.g. ``EDUADAPT_GRADING__EDIT_SIMILARITY_THRESHOLD=0.8``.
    """

    model_config = SettingsConfigDict(
        env_prefix="EDUADAPT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    grading: GradingConfig = Field(default_factory=GradingConfig)
    levels: LevelConfig = Field(default_factory=LevelConfig)
    allocation: AllocationConfig = Field(default_factory=AllocationConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values read from a config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings


class ConfigLoader:
    """
    Configuration loader for the engine.

    Loads configuration from:
    1. Default values
    2. Config file
    3. Environment variables (highest priority)
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the config loader.

        Args:
            config_path: Path to config file (YAML or JSON)
        """
        self.config_path = config_path or os.environ.get(CONFIG_PATH_ENV)
        self._config: Optional[EngineConfig] = None

    def load(self) -> EngineConfig:
        """
        Load configuration from all sources.

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If the file cannot be parsed or a value is invalid
        """
        if self._config is not None:
            return self._config

        file_config: Dict[str, Any] = {}
        if self.config_path:
            file_config = self._load_from_file(self.config_path)

        try:
            self._config = EngineConfig(**file_config)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e
        return self._config

    def _load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            path: Path to config file

        Returns:
            Loaded configuration dictionary
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return {}

        suffix = path.suffix.lower()
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif suffix == '.json':
                    data = json.load(f)
                else:
                    raise ConfigurationError(f"Unsupported config file format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Error loading config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data


_config_loader: Optional[ConfigLoader] = None


def get_config() -> EngineConfig:
    """
    Get the process-wide configuration, loading it on first use.

    Returns:
        Loaded configuration
    """
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader.load()


def reload_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Reload the configuration.

    Args:
        config_path: Path to config file

    Returns:
        Reloaded configuration
    """
    global _config_loader
    _config_loader = ConfigLoader(config_path)
    return _config_loader.load()
