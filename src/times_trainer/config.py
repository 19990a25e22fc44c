"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from times_trainer.models.rules import DrillRules

# settings.yaml section -> {yaml key: Settings field}
_YAML_SECTIONS: dict[str, dict[str, str]] = {
    "server": {"host": "host", "port": "port"},
    "player": {"name": "player_name"},
    "storage": {"data_dir": "data_dir"},
    "drill": {
        "level_count": "level_count",
        "problems_per_level": "problems_per_level",
        "requeue_offset": "requeue_offset",
        "feedback_delay_ms": "feedback_delay_ms",
        "xp_per_correct": "xp_per_correct",
        "difficulty_ceiling": "difficulty_ceiling",
        "difficulty_step": "difficulty_step",
        "widen_above_accuracy": "widen_above_accuracy",
        "narrow_below_accuracy": "narrow_below_accuracy",
    },
    "leaderboard": {"capacity": "leaderboard_capacity"},
}


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested sections to match Settings field names
        flattened = {}
        for section, keys in _YAML_SECTIONS.items():
            values = data.get(section) or {}
            for yaml_key, field_name in keys.items():
                flattened[field_name] = values.get(yaml_key)

        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="TIMES_TRAINER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)

    # Player
    player_name: str = Field(default="Student")

    # Drill
    level_count: int = Field(default=50, ge=1)
    problems_per_level: int = Field(default=10, ge=1)
    requeue_offset: int = Field(default=3, ge=1)
    feedback_delay_ms: int = Field(default=1500, ge=0)
    xp_per_correct: int = Field(default=10, ge=0)
    difficulty_ceiling: int = Field(default=20)
    difficulty_step: int = Field(default=2, ge=0)
    widen_above_accuracy: float = Field(default=90.0)
    narrow_below_accuracy: float = Field(default=50.0)

    # Leaderboard
    leaderboard_capacity: int = Field(default=100, ge=1)

    # Paths
    project_root: Path = Field(default_factory=lambda: _find_project_root())
    data_dir: Path | None = Field(default=None)

    @property
    def progress_dir(self) -> Path:
        d = self.data_dir or self.project_root / "data" / "progress"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def drill_rules(self) -> DrillRules:
        """Engine policy derived from these settings."""
        return DrillRules(
            problems_per_level=self.problems_per_level,
            requeue_offset=self.requeue_offset,
            feedback_delay_ms=self.feedback_delay_ms,
            xp_per_correct=self.xp_per_correct,
            leaderboard_capacity=self.leaderboard_capacity,
            player_name=self.player_name,
            difficulty_ceiling=self.difficulty_ceiling,
            difficulty_step=self.difficulty_step,
            widen_above_accuracy=self.widen_above_accuracy,
            narrow_below_accuracy=self.narrow_below_accuracy,
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables, TIMES_TRAINER_ prefix)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (config/settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
