"""
Action inputs.

The Actions runner exposes each ``with:`` input as an environment variable
named ``INPUT_<NAME>`` (upper-cased, spaces replaced by underscores, hyphens
kept). ``ActionInputs`` wraps that flat mapping and gives the routines a
small, explicit API for required, optional and boolean inputs.

For local runs the same inputs can be read from a YAML mapping, with
``${VAR}`` and ``${VAR:-default}`` references resolved from the environment.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from asana_sync.exceptions import ConfigurationError

INPUT_PREFIX = "INPUT_"

# ${VAR_NAME} or ${VAR_NAME:-default}
_ENV_REFERENCE = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def input_env_name(name: str) -> str:
    """Environment variable the runner uses for an input name."""
    return INPUT_PREFIX + name.replace(" ", "_").upper()


def _normalize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ActionInputs(BaseModel):
    """Flat mapping of action input names to string values.

    Names are stored lower-cased with hyphens, exactly as they appear in
    ``action.yml`` (``asana-pat``, ``trigger-phrase``...).
    """

    values: dict[str, str] = Field(default_factory=dict)

    @field_validator("values", mode="before")
    @classmethod
    def _normalize(cls, raw: Any) -> dict[str, str]:
        if not isinstance(raw, Mapping):
            raise ValueError("inputs must be a mapping")
        return {str(k).strip().lower(): _normalize_value(v) for k, v in raw.items()}

    def get(self, name: str, default: str = "", strip: bool = True) -> str:
        """Return an optional input, or ``default`` when empty or absent.

        Values are trimmed like the runner does unless ``strip`` is False,
        which keeps meaningful surrounding whitespace (trigger phrases).
        """
        value = self.values.get(name.lower(), "")
        if strip:
            value = value.strip()
        return value or default

    def require(self, name: str) -> str:
        """Return a required input.

        Raises:
            ConfigurationError: If the input is absent or empty
        """
        value = self.values.get(name.lower(), "").strip()
        if not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value

    def get_bool(self, name: str) -> bool:
        """Boolean input; only the string ``true`` (any case) is true."""
        return self.get(name).lower() == "true"

    def merged(self, overrides: ActionInputs) -> ActionInputs:
        """Return a copy where non-empty values from ``overrides`` win."""
        values = dict(self.values)
        values.update({k: v for k, v in overrides.values.items() if v})
        return ActionInputs(values=values)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> ActionInputs:
        """Collect every ``INPUT_*`` variable from the environment."""
        environ = os.environ if environ is None else environ
        values = {
            key[len(INPUT_PREFIX) :].replace("_", "-").lower(): value
            for key, value in environ.items()
            if key.upper().startswith(INPUT_PREFIX)
        }
        return cls(values=values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ActionInputs:
        """Load inputs from a YAML mapping with environment interpolation.

        Raises:
            ConfigurationError: If the file is missing, unreadable or not a mapping
        """
        inputs_file = Path(path)
        if not inputs_file.exists():
            raise ConfigurationError(f"Inputs file not found: {path}")

        try:
            content = inputs_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read inputs file: {path}") from e

        try:
            content = _interpolate_env_vars(content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in inputs: {e}") from e

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Inputs file must be a YAML mapping, not a list or scalar")
        return cls(values=data)


def _interpolate_env_vars(content: str) -> str:
    """Replace ``${VAR}`` / ``${VAR:-default}`` outside YAML comment lines.

    Raises:
        ValueError: If a referenced variable is unset and has no default
    """

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default_value = match.group(2)
        value = os.getenv(var_name)
        if value is not None:
            return value
        if default_value is not None:
            return default_value
        raise ValueError(f"Environment variable {var_name} is not set")

    def process_line(line: str) -> str:
        if line.lstrip().startswith("#"):
            return line
        return _ENV_REFERENCE.sub(replace_var, line)

    return "\n".join(process_line(line) for line in content.split("\n"))
