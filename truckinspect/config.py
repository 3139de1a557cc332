from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    app_name: str = 'Truck Inspection'

    # Base template: a filesystem path or an http(s) URL
    template_source: str = Field(
        default='template.pdf',
        validation_alias=AliasChoices('template_source', 'TEMPLATE_PDF'),
    )
    template_timeout_seconds: float = 15.0

    # Coordinate registry override; the packaged layout.json is used when unset
    layout_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices('layout_path', 'COORDINATES_PATH'),
    )

    output_dir: Path = Field(default=Path('./output'))

    # PDF overlay
    pdf_font_name: str = 'helv'
    header_font_size: float = 10.0
    mark_size: float = 10.0
    mark_line_width: float = 1.2

    log_level: str = 'INFO'


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings()
    settings.output_dir.mkdir(parents=True, exist_ok=True)
    return settings
