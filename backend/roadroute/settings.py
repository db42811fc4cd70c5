from __future__ import annotations

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_catalogue_path() -> str:
    # The bundled sample network ships next to the package.
    return str(Path(__file__).resolve().parent / "data" / "sample_catalogue.json")


class Settings(BaseSettings):
    """Validated settings (env-driven), keeping search limits out of code."""

    model_config = SettingsConfigDict(
        # Support both "repo root/.env" and "backend/.env" (local dev)
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    out_dir: str = Field(default="out", alias="OUT_DIR")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    catalogue_path: str = Field(default_factory=_default_catalogue_path, alias="CATALOGUE_PATH")

    # Request limits
    max_routes: int = Field(default=3, ge=1, le=50, alias="MAX_ROUTES")
    max_routes_limit: int = Field(default=10, ge=1, le=50, alias="MAX_ROUTES_LIMIT")
    max_via_points: int = Field(default=5, ge=0, le=50, alias="MAX_VIA_POINTS")

    # Search safety valves. These are heuristic guards, not derived bounds.
    tied_path_round_factor: int = Field(default=10, ge=1, le=1000, alias="TIED_PATH_ROUND_FACTOR")
    k_shortest_round_factor: int = Field(default=20, ge=1, le=1000, alias="K_SHORTEST_ROUND_FACTOR")
    tie_epsilon: float = Field(default=1e-9, ge=0.0, le=1.0, alias="TIE_EPSILON")

    @model_validator(mode="after")
    def _clamp_default_routes(self) -> "Settings":
        if self.max_routes > self.max_routes_limit:
            self.max_routes = self.max_routes_limit
        return self


settings = Settings()
