"""
Shared utilities for avocado-client.

Provides:
- Environment variable handling with a central registry
- Timestamp conversion for time-windowed queries
"""

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ============================================================================
# Timestamp Utilities
# ============================================================================

def to_epoch_seconds(value: datetime | int | float) -> int:
    """
    Convert a point in time to integer Unix seconds.

    Args:
        value: datetime (naive values are taken as UTC) or a Unix timestamp

    Returns:
        Whole seconds since the epoch
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return int(value)


# ============================================================================
# Environment Variable Registry
# ============================================================================

class EnvVarType(str, Enum):
    """Type of environment variable."""

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"


_TRUTHY = ("true", "1", "yes", "on")


@dataclass
class EnvVarInfo:
    """Information about a registered environment variable."""

    name: str
    var_type: EnvVarType
    default: Any
    description: str = ""
    domain: str = ""
    required: bool = False
    secret: bool = False  # If True, mask value in dumps

    def get_current_value(self) -> Any:
        """Get current value from environment."""
        raw = os.environ.get(self.name)
        if raw is None or raw == "":
            return self.default

        if self.var_type == EnvVarType.INT:
            try:
                return int(raw)
            except ValueError:
                return self.default
        elif self.var_type == EnvVarType.FLOAT:
            try:
                return float(raw)
            except ValueError:
                return self.default
        elif self.var_type == EnvVarType.BOOL:
            return raw.lower() in _TRUTHY
        return raw

    def is_set(self) -> bool:
        """Check if variable is explicitly set in environment."""
        return bool(os.environ.get(self.name))

    def to_dict(self, include_value: bool = True) -> dict[str, Any]:
        """Convert to dictionary representation."""
        result = {
            "name": self.name,
            "type": self.var_type.value,
            "default": self.default,
            "description": self.description,
            "domain": self.domain,
            "required": self.required,
            "is_set": self.is_set(),
        }
        if include_value:
            if self.secret and self.is_set():
                result["value"] = "***REDACTED***"
            else:
                result["value"] = self.get_current_value()
        return result


class EnvRegistry:
    """
    Registry of every environment variable the client reads.

    Variables register themselves the first time a get_env_* helper reads
    them, so the registry can document and validate configuration.
    """

    def __init__(self) -> None:
        self._vars: dict[str, EnvVarInfo] = {}

    def register(
        self,
        name: str,
        var_type: EnvVarType,
        default: Any,
        description: str = "",
        domain: str = "",
        required: bool = False,
        secret: bool = False,
    ) -> EnvVarInfo:
        """Register an environment variable, merging details into an existing entry."""
        if name in self._vars:
            existing = self._vars[name]
            if description and not existing.description:
                existing.description = description
            if domain and not existing.domain:
                existing.domain = domain
            existing.required = existing.required or required
            existing.secret = existing.secret or secret
            return existing

        info = EnvVarInfo(
            name=name,
            var_type=var_type,
            default=default,
            description=description,
            domain=domain,
            required=required,
            secret=secret,
        )
        self._vars[name] = info
        return info

    def get(self, name: str) -> EnvVarInfo | None:
        return self._vars.get(name)

    def all(self) -> dict[str, EnvVarInfo]:
        return dict(self._vars)

    def to_dict(self, include_values: bool = True) -> dict[str, Any]:
        return {
            name: info.to_dict(include_value=include_values)
            for name, info in sorted(self._vars.items())
        }

    def to_json(self, include_values: bool = True, indent: int = 2) -> str:
        return json.dumps(self.to_dict(include_values), indent=indent)

    def to_markdown(self, include_values: bool = False) -> str:
        """Export registry as a markdown table."""
        lines = ["# Environment Variables", ""]
        if include_values:
            lines.append("| Variable | Type | Default | Current | Description |")
            lines.append("|----------|------|---------|---------|-------------|")
        else:
            lines.append("| Variable | Type | Default | Description |")
            lines.append("|----------|------|---------|-------------|")

        for name, info in sorted(self._vars.items()):
            default_str = f"`{info.default}`" if info.default != "" else '""'
            row = f"| `{name}` | {info.var_type.value} | {default_str} |"
            if include_values:
                if info.secret and info.is_set():
                    value_str = "***"
                else:
                    value_str = f"`{info.get_current_value()}`"
                row += f" {value_str} |"
            lines.append(f"{row} {info.description} |")

        return "\n".join(lines)

    def to_env_example(self) -> str:
        """Export registry as .env.example file content."""
        lines = ["# Environment Variables for avocado-client"]
        for name, info in sorted(self._vars.items()):
            if info.description:
                lines.append(f"# {info.description}")
            if info.secret:
                lines.append(f"# {name}=your-secret-here")
            else:
                default = str(info.default).lower() if isinstance(info.default, bool) else info.default
                lines.append(f"{name}={default}")
        return "\n".join(lines)

    def validate(self) -> list[str]:
        """
        Validate required variables are set.

        Returns:
            List of error messages for missing required variables
        """
        return [
            f"Required environment variable {name} is not set"
            for name, info in sorted(self._vars.items())
            if info.required and not info.is_set()
        ]

    def clear(self) -> None:
        """Clear all registered variables (mainly for testing)."""
        self._vars.clear()


# Global registry instance
_registry = EnvRegistry()


def get_env_registry() -> EnvRegistry:
    """Get the global environment variable registry."""
    return _registry


def get_env_str(
    key: str,
    default: str = "",
    description: str = "",
    domain: str = "",
    required: bool = False,
    secret: bool = False,
) -> str:
    """Get a string from environment variable."""
    info = _registry.register(key, EnvVarType.STRING, default, description, domain, required, secret)
    return info.get_current_value()


def get_env_int(key: str, default: int, description: str = "", domain: str = "") -> int:
    """Get an integer from environment variable, falling back to default if invalid."""
    info = _registry.register(key, EnvVarType.INT, default, description, domain)
    return info.get_current_value()


def get_env_float(key: str, default: float, description: str = "", domain: str = "") -> float:
    """Get a float from environment variable, falling back to default if invalid."""
    info = _registry.register(key, EnvVarType.FLOAT, default, description, domain)
    return info.get_current_value()


def get_env_bool(key: str, default: bool = False, description: str = "", domain: str = "") -> bool:
    """Get a boolean from environment variable (true/1/yes/on = True)."""
    info = _registry.register(key, EnvVarType.BOOL, default, description, domain)
    return info.get_current_value()


def dump_env_config(format: str = "json", include_values: bool = True) -> str:
    """
    Dump all registered environment variables.

    Args:
        format: Output format ("json", "markdown"/"md", "env")
        include_values: Include current values

    Returns:
        Formatted string
    """
    if format in ("markdown", "md"):
        return _registry.to_markdown(include_values=include_values)
    elif format == "env":
        return _registry.to_env_example()
    return _registry.to_json(include_values=include_values)


def validate_env_config() -> list[str]:
    """Validate all required environment variables are set."""
    return _registry.validate()
