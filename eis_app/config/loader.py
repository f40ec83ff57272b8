"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import DefaultConfig, config_from_dict, get_default_config

PROFILES_FILE = "eis.yaml"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_profile_config(self, profile: str) -> dict[str, Any]:
        """Load the overrides of one named profile."""
        profiles_file = self.config_dir / PROFILES_FILE

        if not profiles_file.exists():
            raise ConfigurationError(
                f"Profile file not found: {profiles_file}", field="profile", value=profile
            )

        try:
            with open(profiles_file) as f:
                profiles_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in {profiles_file}: {e}", field="profile", value=profile
            ) from e

        profiles = profiles_config.get("profiles") or {}
        if profile not in profiles:
            raise ConfigurationError(f"Unknown profile: {profile}", field="profile", value=profile)

        return profiles[profile] or {}  # type: ignore[no-any-return]

    def merge_config(
        self,
        profile: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides, e.g. CLI flags (highest priority)
        2. Named profile from the profiles file
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        if profile:
            config = self._deep_merge(config, self.load_profile_config(profile))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(
        self,
        profile: Optional[str] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> DefaultConfig:
        """Merged configuration as typed dataclasses."""
        merged = self.merge_config(profile, overrides)
        try:
            return config_from_dict(merged)
        except TypeError as e:
            raise ConfigurationError(f"Unknown configuration key: {e}") from e

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
