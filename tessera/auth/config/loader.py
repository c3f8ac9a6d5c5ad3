"""Reading the ``auth`` section of a YAML file into an ``AuthConfig``.

String values anywhere in the section may reference the environment:

- ``${NAME}`` is replaced by the variable, which must be set
- ``${NAME:-fallback}`` uses ``fallback`` when the variable is unset
- ``${NAME:?hint}`` fails with ``hint`` when the variable is unset

Substitution happens before pydantic validation, so ``"${TTL:-900}"`` still
validates as an integer field.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .schema import AuthConfig

DEFAULT_CONFIG_FILE = "tessera.yaml"

_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<op>[-?])(?P<arg>[^}]*))?\}")


def _resolve_reference(match: re.Match) -> str:
    name, op, arg = match.group("name", "op", "arg")
    resolved = os.environ.get(name)
    if resolved is not None:
        return resolved
    if op == "-":
        return arg
    if op == "?":
        raise ConfigurationError(f"Required environment variable '{name}' not set: {arg}")
    raise ConfigurationError(f"Environment variable '{name}' not set")


class AuthConfigLoader:
    """Loads and validates authentication configuration."""

    @classmethod
    def load_auth_config(cls, config_path: Path | str) -> AuthConfig:
        """Load authentication configuration from a YAML file.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        document = cls._read_yaml(Path(config_path))
        if not isinstance(document, dict):
            raise ConfigurationError("Configuration file must contain a mapping")
        return cls.parse_auth_config(document.get("auth"))

    @classmethod
    def parse_auth_config(cls, auth_config: Any) -> AuthConfig:
        """Validate an ``auth`` section that was already loaded."""
        if not auth_config:
            raise ConfigurationError("No 'auth' section found in configuration")
        if not isinstance(auth_config, dict):
            raise ConfigurationError("The 'auth' section must be a mapping")

        try:
            return AuthConfig.model_validate(cls._substitute_env_vars(auth_config))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid auth configuration: {e}") from e

    @staticmethod
    def _read_yaml(path: Path) -> Any:
        try:
            text = path.read_text()
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {path}") from None
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {path}: {e}") from e

        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e

        if not document:
            raise ConfigurationError(f"Configuration file is empty: {path}")
        return document

    @classmethod
    def _substitute_env_vars(cls, node: Any) -> Any:
        """Expand environment references in every string of ``node``."""
        match node:
            case dict():
                return {key: cls._substitute_env_vars(value) for key, value in node.items()}
            case list():
                return [cls._substitute_env_vars(item) for item in node]
            case str():
                return _REFERENCE.sub(_resolve_reference, node)
            case _:
                return node

    @classmethod
    def get_default_config_path(cls) -> Path:
        """``tessera.yaml`` in the current working directory."""
        return Path.cwd() / DEFAULT_CONFIG_FILE

    @classmethod
    def validate_config_exists(cls, config_path: Path | None = None) -> Path:
        """Return ``config_path`` (or the default path) if it names a regular file."""
        path = config_path or cls.get_default_config_path()
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")
        if not path.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {path}")
        return path
