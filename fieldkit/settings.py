"""fieldkit project settings loader.

Reads project-specific configuration from .fieldkit.yaml in the project
root. This lets a team choose where values are stored, how long the
debounce window is, and where logs go.

Example .fieldkit.yaml:
    fieldkit:
      store_path: ./.fieldkit/values.json   # Where field values persist
      store_key: inputValues                # Key the value map lives under
      debounce_ms: 200                      # Quiescence window for typing
      log_file: ./fieldkit.log
      log_level: DEBUG
      json_logs: false
      format_chars:                         # Extra mask markers
        h: "[0-9A-Fa-f]"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from fieldkit.constants import DEBOUNCE_WAIT, DEFAULT_FORMAT_CHARS, DEFAULT_STORE_KEY

logger = logging.getLogger(__name__)

SETTINGS_FILE = ".fieldkit.yaml"


@dataclass
class FieldKitSettings:
    """fieldkit configuration settings."""

    # JSON file the value map is persisted to
    store_path: str = "./.fieldkit/values.json"

    # Key inside the JSON document holding the value map
    store_key: str = DEFAULT_STORE_KEY

    # Debounce window for "changing" events
    debounce_ms: int = int(DEBOUNCE_WAIT * 1000)

    log_file: str | None = None
    log_level: str = "INFO"
    json_logs: bool = False

    # Mask markers, merged over the built-in digit/letter/alphanumeric set
    format_chars: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_FORMAT_CHARS)
    )

    @classmethod
    def load(cls, project_root: Path | None = None) -> "FieldKitSettings":
        """Load settings from .fieldkit.yaml in project root.

        Args:
            project_root: Project root directory. Defaults to cwd.

        Returns:
            FieldKitSettings with values from config file or defaults.
        """
        root = project_root or Path.cwd()
        config_path = root / SETTINGS_FILE

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}

            section = config.get("fieldkit", {}) or {}
            defaults = cls()
            format_chars = dict(DEFAULT_FORMAT_CHARS)
            format_chars.update(
                {str(k): str(v) for k, v in (section.get("format_chars") or {}).items()}
            )
            return cls(
                store_path=section.get("store_path", defaults.store_path),
                store_key=section.get("store_key", defaults.store_key),
                debounce_ms=int(section.get("debounce_ms", defaults.debounce_ms)),
                log_file=section.get("log_file", defaults.log_file),
                log_level=str(section.get("log_level", defaults.log_level)),
                json_logs=bool(section.get("json_logs", defaults.json_logs)),
                format_chars=format_chars,
            )
        except (OSError, yaml.YAMLError, AttributeError, TypeError, ValueError) as exc:
            # If config file is malformed, use defaults
            logger.warning("Ignoring malformed %s: %s", config_path, exc)
            return cls()

    @property
    def debounce_wait(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000.0

    def get_store_path(self, project_root: Path | None = None) -> Path:
        """Get absolute path to the value store file."""
        root = project_root or Path.cwd()
        return (root / self.store_path).resolve()


# Global settings instance (loaded on first access)
_settings: FieldKitSettings | None = None


def get_settings(reload: bool = False) -> FieldKitSettings:
    """Get the global fieldkit settings.

    Args:
        reload: Force reload from config file.

    Returns:
        FieldKitSettings instance.
    """
    global _settings
    if _settings is None or reload:
        _settings = FieldKitSettings.load()
    return _settings
