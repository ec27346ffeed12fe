"""
Typed configuration models using Pydantic.

Only the outer surfaces (upload handling, HTTP server, logging) are
configurable. The normalization rules are fixed in code.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Hard ceiling on sources compared side by side (palette and layout assume it)
MAX_SOURCES = 6


class UploadConfig(BaseModel):
    """Configuration for batches of uploaded measurement files."""

    model_config = ConfigDict(frozen=True)

    max_files: int = Field(
        default=MAX_SOURCES,
        ge=1,
        le=MAX_SOURCES,
        description="Maximum number of files accepted in one batch",
    )
    upload_dir: Path = Field(
        default=Path("./uploads"),
        description="Directory where uploaded files are stored transiently",
    )
    delete_after_processing: bool = Field(
        default=True,
        description="Delete each stored file once it has been read",
    )


class ServerConfig(BaseModel):
    """HTTP upload endpoint configuration."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="localhost")
    port: int = Field(default=3001, ge=0, le=65535)
    cors_origin: str = Field(
        default="*", description="Value of the Access-Control-Allow-Origin header"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO")
    json_output: bool = Field(default=False, description="Render logs as JSON")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Ensure the level is one the logging module knows."""
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return normalized


class AppConfig(BaseModel):
    """Complete application configuration."""

    model_config = ConfigDict(frozen=True)

    upload: UploadConfig = Field(default_factory=UploadConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def max_files(self) -> int:
        """Convenience accessor for the batch size limit."""
        return self.upload.max_files
