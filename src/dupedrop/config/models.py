"""Configuration models describing dupedrop settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DupedropBaseModel(BaseModel):
    """Shared configuration for dupedrop Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class IngestionOptions(DupedropBaseModel):
    """Options governing how a batch of files is ingested.

    Attributes:
        max_concurrency: Upper bound on files processed at once (0 = unbounded).
        recurse_directories: Whether selected folders are walked recursively.
        include_hidden_files: Whether dot-files and dot-directories are ingested.
    """

    max_concurrency: int = Field(default=0, ge=0)
    recurse_directories: bool = True
    include_hidden_files: bool = False


class PreviewOptions(DupedropBaseModel):
    """Preview generation settings.

    Attributes:
        enabled: Whether previews are generated at all.
        text_max_chars: Optional cap on decoded text previews.
        image_max_edge: When set, images are thumbnailed to this edge length.
    """

    enabled: bool = True
    text_max_chars: Optional[int] = Field(default=None, gt=0)
    image_max_edge: Optional[int] = Field(default=None, gt=0)


class SharingSettings(DupedropBaseModel):
    """Settings for generated share links.

    Attributes:
        base_url: Origin that share links are rooted at.
    """

    base_url: str = "http://localhost:8000"


class LoggingSettings(DupedropBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class CLIOptions(DupedropBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class DupedropConfig(DupedropBaseModel):
    """Top-level configuration struct for dupedrop.

    Attributes:
        ingestion: Ingestion settings.
        previews: Preview generation settings.
        sharing: Share link settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    ingestion: IngestionOptions = Field(default_factory=IngestionOptions)
    previews: PreviewOptions = Field(default_factory=PreviewOptions)
    sharing: SharingSettings = Field(default_factory=SharingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DupedropBaseModel",
    "IngestionOptions",
    "PreviewOptions",
    "SharingSettings",
    "LoggingSettings",
    "CLIOptions",
    "DupedropConfig",
]
