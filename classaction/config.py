"""
Config system - Layered typed configuration for class actions.

Merge precedence (later overrides earlier):
defaults < config files (JSON/YAML) < .env file < environment variables < overrides
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
import json
import os

from dotenv import dotenv_values

from .faults import ConfigInvalidFault


@dataclass
class ClassActionConfig:
    """
    Typed class-action settings.

    Attributes:
        action_packages: Packages searched by the default module resolver
        action_suffix: Suffix of conventional action class names (``ShowAction``)
        default_format: Format used when the request does not ask for one
        template_dirs: Search paths for the Jinja2 template engine
        autoescape: Enable HTML autoescaping in templates
        warn_on_mime_conflict: Log a warning when MIME injection hits an excluded format
    """

    action_packages: List[str] = field(default_factory=list)
    action_suffix: str = "Action"
    default_format: str = "html"
    template_dirs: List[str] = field(default_factory=list)
    autoescape: bool = True
    warn_on_mime_conflict: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "CA_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[List[str]] = None,
        env_prefix: str = "CA_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: Config file paths (``.json``, ``.yaml``/``.yml``)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for path in paths or []:
            loader._load_file(Path(path))

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_file(self, path: Path):
        if not path.exists():
            return
        if path.suffix == ".json":
            self._load_json_file(path)
        elif path.suffix in (".yaml", ".yml"):
            self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
            self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
            if data:
                self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load config from .env file."""
        if not Path(path).exists():
            return

        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert CA_TEMPLATES__DIRS to nested dict."""
        key = key[len(self.env_prefix):]

        # Double underscore separates nesting levels
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def to_config(self) -> ClassActionConfig:
        """
        Build a validated :class:`ClassActionConfig`.

        Unknown keys are ignored. Comma-separated strings are accepted for
        list settings so that ``CA_ACTION_PACKAGES=app.actions,lib.actions``
        works from the environment.

        Raises:
            ConfigInvalidFault: If a value has the wrong type
        """
        kwargs: Dict[str, Any] = {}
        defaults = ClassActionConfig()

        for f in fields(ClassActionConfig):
            if f.name not in self.config_data:
                continue
            value = self.config_data[f.name]
            expected = getattr(defaults, f.name)

            if isinstance(expected, list):
                if isinstance(value, str):
                    value = [part.strip() for part in value.split(",") if part.strip()]
                if not isinstance(value, list):
                    raise ConfigInvalidFault(f.name, f"expected a list, got {type(value).__name__}")
            elif isinstance(expected, bool):
                if not isinstance(value, bool):
                    raise ConfigInvalidFault(f.name, f"expected a boolean, got {value!r}")
            elif isinstance(expected, str):
                if not isinstance(value, str) or not value:
                    raise ConfigInvalidFault(f.name, f"expected a non-empty string, got {value!r}")

            kwargs[f.name] = value

        return ClassActionConfig(**kwargs)


_active_config: Optional[ClassActionConfig] = None


def get_config() -> ClassActionConfig:
    """Return the active configuration, loading it from the environment on first use."""
    global _active_config
    if _active_config is None:
        _active_config = ConfigLoader.load().to_config()
    return _active_config


def set_config(config: Optional[ClassActionConfig]) -> None:
    """Replace the active configuration (``None`` reloads lazily)."""
    global _active_config
    _active_config = config
