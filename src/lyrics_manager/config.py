"""Configuration management for lyrics-manager.

Handles loading, saving, and validating TOML configuration stored in:
- macOS: ~/.config/lyrics-manager/config.toml
- Linux: ~/.config/lyrics-manager/config.toml (XDG_CONFIG_HOME)
- Windows: %APPDATA%\\lyrics-manager\\config.toml
"""

import os
import sys
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional

import tomllib
import tomli_w

LIBRARY_ENV_VAR = "LYRICS_MANAGER_LIBRARY"

_TRUE_STRINGS = ("true", "1", "yes")
_FALSE_STRINGS = ("false", "0", "no")


def _coerce(key: str, current: Any, value: Any) -> Any:
    """Convert a raw value to the type of the setting it replaces.

    Args:
        key: Setting name, used in error messages
        current: Current value of the setting
        value: Value from TOML, a backup file or the command line

    Returns:
        The converted value

    Raises:
        ValueError: If the value cannot be converted
    """
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in _TRUE_STRINGS + _FALSE_STRINGS:
            return value.strip().lower() in _TRUE_STRINGS
        raise ValueError(f"Invalid value for {key}: expected a boolean, got {value!r}")

    if isinstance(current, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ValueError(f"Invalid value for {key}: expected an integer, got {value!r}")

    if isinstance(current, Path):
        if isinstance(value, (str, Path)) and str(value):
            return Path(value)
        raise ValueError(f"Invalid value for {key}: expected a path, got {value!r}")

    if not isinstance(value, str):
        raise ValueError(f"Invalid value for {key}: expected a string, got {value!r}")
    return value


def _field_names(obj: Any) -> set[str]:
    return {f.name for f in fields(obj)} if is_dataclass(obj) else set()


# DisplaySettings field -> backup "settings" key
_BACKUP_KEYS = {
    "default_scroll_speed": "defaultScrollSpeed",
    "default_lines_per_scroll": "defaultLinesPerScroll",
    "default_tempo": "defaultTempo",
    "default_background_color": "defaultBackgroundColor",
    "default_text_color": "defaultTextColor",
    "default_text_size": "defaultTextSize",
    "default_is_bold": "defaultIsBold",
}


@dataclass
class DisplaySettings:
    """Default display attributes for newly created songs.

    Attributes:
        default_scroll_speed: Auto-scroll speed
        default_lines_per_scroll: Lines advanced per scroll step
        default_tempo: Tempo in beats per minute
        default_background_color: Background color during playback
        default_text_color: Lyric color during playback
        default_text_size: Lyric font size
        default_is_bold: Whether lyrics render bold
    """

    default_scroll_speed: int = 5
    default_lines_per_scroll: int = 1
    default_tempo: int = 120
    default_background_color: str = "#000000"
    default_text_color: str = "#ffffff"
    default_text_size: int = 24
    default_is_bold: bool = False

    def to_backup_dict(self) -> dict[str, Any]:
        """Convert to the camelCase "settings" object of a backup file."""
        return {camel: getattr(self, name) for name, camel in _BACKUP_KEYS.items()}

    @classmethod
    def from_backup_dict(cls, data: dict[str, Any]) -> "DisplaySettings":
        """Create settings from a backup file's "settings" object.

        Missing keys fall back to defaults.

        Raises:
            ValueError: If a value has the wrong type
        """
        settings = cls()
        for name, camel in _BACKUP_KEYS.items():
            if camel in data:
                setattr(settings, name, _coerce(camel, getattr(settings, name), data[camel]))
        return settings


@dataclass
class LibraryConfig:
    """Configuration for lyrics-manager.

    Attributes:
        library_path: JSON library file holding all songs and set lists
        export_dir: Default directory for song, set list and backup files
        log_dir: Directory for the session log
        log_level: Level for the session log file
        display: Default display attributes for new songs
    """

    library_path: Path = field(default_factory=lambda: get_default_library_path())
    export_dir: Path = field(default_factory=lambda: Path.home() / "LyricsManager")

    log_dir: Path = field(default_factory=lambda: get_config_dir() / "logs")
    log_level: str = "DEBUG"

    display: DisplaySettings = field(default_factory=DisplaySettings)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "LibraryConfig":
        """Load configuration from TOML file.

        Args:
            path: Path to config file (defaults to standard location)

        Returns:
            LibraryConfig instance with loaded values

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If a setting has the wrong type
        """
        if path is None:
            path = get_config_path()

        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        config = cls()

        if "library" in data:
            library = data["library"]
            if library.get("path"):
                config.library_path = Path(library["path"])
            if library.get("export_dir"):
                config.export_dir = Path(library["export_dir"])

        if "logging" in data:
            logging_data = data["logging"]
            if logging_data.get("dir"):
                config.log_dir = Path(logging_data["dir"])
            if "level" in logging_data:
                config.log_level = _coerce("logging.level", config.log_level, logging_data["level"])

        if "display" in data:
            display = data["display"]
            for name in _field_names(config.display):
                if name in display:
                    current = getattr(config.display, name)
                    setattr(config.display, name, _coerce(f"display.{name}", current, display[name]))

        # Environment variable takes precedence over the file
        env_library = os.environ.get(LIBRARY_ENV_VAR)
        if env_library:
            config.library_path = Path(env_library)

        return config

    def save(self, path: Optional[Path] = None) -> None:
        """Save configuration to TOML file.

        Args:
            path: Path to save config (defaults to standard location)
        """
        if path is None:
            path = get_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "library": {
                "path": str(self.library_path),
                "export_dir": str(self.export_dir),
            },
            "logging": {
                "dir": str(self.log_dir),
                "level": self.log_level,
            },
            "display": dict(vars(self.display)),
        }

        with open(path, "wb") as f:
            tomli_w.dump(data, f)

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """Get a configuration value by key.

        Supports dot notation for nested values (e.g., "display.default_tempo").

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self

        for part in key.split("."):
            if part not in _field_names(value):
                return default
            value = getattr(value, part)

        if isinstance(value, Path):
            return str(value)
        return value

    def set(self, key: str, value: str) -> None:
        """Set a configuration value by key.

        Supports dot notation for nested values (e.g., "display.default_tempo").

        Args:
            key: Configuration key
            value: Configuration value

        Raises:
            ValueError: If the key is unknown or the value cannot be converted
        """
        parts = key.split(".")
        target: Any = self

        for part in parts[:-1]:
            if part not in _field_names(target):
                raise ValueError(f"Invalid config key: {key}")
            target = getattr(target, part)

        final_key = parts[-1]
        if final_key not in _field_names(target) or isinstance(getattr(target, final_key), DisplaySettings):
            raise ValueError(f"Invalid config key: {key}")

        # Preserve the type of the current value
        setattr(target, final_key, _coerce(key, getattr(target, final_key), value))


def get_config_dir() -> Path:
    """Get the platform-specific config directory.

    Returns:
        Path to the config directory for lyrics-manager.
    """
    if sys.platform == "darwin" or sys.platform == "linux":
        xdg_config = os.environ.get("XDG_CONFIG_HOME")
        if xdg_config:
            return Path(xdg_config) / "lyrics-manager"
        return Path.home() / ".config" / "lyrics-manager"
    elif sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "lyrics-manager"
        return Path.home() / "AppData" / "Roaming" / "lyrics-manager"
    else:
        return Path.home() / ".config" / "lyrics-manager"


def get_config_path() -> Path:
    """Get the path to the config.toml file.

    Returns:
        Path to config.toml
    """
    return get_config_dir() / "config.toml"


def get_default_library_path() -> Path:
    """Get the default library file path.

    Returns:
        Path to default library location
    """
    return get_config_dir() / "library.json"


def ensure_config_exists() -> LibraryConfig:
    """Ensure config file exists, creating default if needed.

    Returns:
        LibraryConfig instance
    """
    config_path = get_config_path()

    if config_path.exists():
        try:
            return LibraryConfig.load(config_path)
        except (tomllib.TOMLDecodeError, ValueError, TypeError):
            # Corrupted config is replaced with defaults below
            pass

    config = LibraryConfig()
    config.save(config_path)
    return config
