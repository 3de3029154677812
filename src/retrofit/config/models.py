from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Config models map the YAML sections to typed structures.


class ResolutionConfig(BaseModel):
    # Matching knobs shared by every adaptation made through one Retrofitter.
    model_config = ConfigDict(extra="forbid")
    numeric_promotion: bool = True
    cache: bool = True
    aliases: dict[str, str] = Field(default_factory=dict)

    @field_validator("aliases")
    @classmethod
    def _aliases_are_names(cls, value: dict[str, str]) -> dict[str, str]:
        for source, target in value.items():
            if not source.isidentifier() or not target.isidentifier():
                raise ValueError(f"alias {source!r} -> {target!r} must map identifiers")
        return value


class LoggingConfig(BaseModel):
    # Log sink selection; kind names an adapter registered for the log_sink role.
    model_config = ConfigDict(extra="forbid")
    kind: str = "null"
    settings: dict[str, Any] = Field(default_factory=dict)


class RetrofitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
