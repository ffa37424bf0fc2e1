from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import ConflictStrategy


class ReplicatorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REPLICATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    templates_dir: Path | None = None
    destination: Path = Path(".")
    template_suffix: str = ".j2"
    zip: bool = False
    on_conflict: ConflictStrategy | None = None
    assume_yes: bool = False
    write_data_file: bool = True
    data_file_suffix: str = "-data.json"
    write_retries: int = 3
    strict_undefined: bool = False
