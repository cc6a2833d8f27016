from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    board_radius: int = Field(default=4, ge=1)
    tray_size: int = Field(default=3, ge=1)
    random_seed: int | None = None

    # Piece generation
    use_procedural_generation: bool = False
    use_adaptive_sizing: bool = True
    guarantee_solvability: bool = True
    require_round_solution: bool = False
    max_generation_attempts: int = Field(default=100, ge=1)

    # Snapshots
    snapshot_max_age_days: int = Field(default=30, ge=0)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="HEXFIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def with_overrides(self, **changes) -> Settings:
        """Validated copy with changes applied. Raises pydantic.ValidationError."""
        return type(self).model_validate({**self.model_dump(), **changes})


settings = Settings()
