"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SearchSettings(BaseModel):
    """Tunable constants for the query session.

    The caps only bound how much is surfaced; ordering and tie-break rules
    are fixed in code.
    """

    debounce: str = Field("200ms", description="Quiet period before a rebuild runs")
    recents_limit: int = Field(12, ge=0, description="Jobs listed while the query is empty")
    quick_filters_per_kind: int = Field(4, ge=0, description="Top status/creator filters each")
    quick_filters_total: int = Field(8, ge=0, description="Cap on the combined filter list")
    aggregate_results: bool = Field(
        True, description="Group results by address + job number instead of listing jobs"
    )

    # Computed field
    debounce_seconds: Optional[float] = None

    @field_validator("debounce")
    @classmethod
    def validate_debounce(cls, v: str) -> str:
        """Validate the debounce duration parses and is at most 5 seconds."""
        try:
            validate_duration_range(parse_duration(v))
            return v
        except DurationParseError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def compute_debounce_seconds(self):
        self.debounce_seconds = parse_duration(self.debounce)
        return self


class CorpusConfig(BaseModel):
    """Where the job corpus fixture is read from."""

    path: Optional[Path] = Field(None, description="YAML or JSON corpus file")

    @field_validator("path")
    @classmethod
    def validate_suffix(cls, v: Optional[Path]) -> Optional[Path]:
        """Only YAML and JSON corpus files are supported."""
        if v is not None and v.suffix.lower() not in (".yaml", ".yml", ".json"):
            raise ValueError(f"Corpus file must be .yaml, .yml or .json, got: {v.name}")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class AppConfig(BaseModel):
    """Root configuration object for the job search engine."""

    search: SearchSettings = Field(default_factory=SearchSettings, description="Session tuning")
    corpus: CorpusConfig = Field(default_factory=CorpusConfig, description="Corpus location")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
