"""Configuration classes for the email document core.

This module provides configuration objects for the serializer, the history
engine and the response recovery parser, plus an immutable aggregate used by
the editor session.
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class SerializerConfig:
    """Configuration for markup serialization."""

    indent: str = "  "
    node_class_prefix: str = "ebb-node-"
    emit_node_ids: bool = True
    include_empty_preview: bool = False

    def __post_init__(self) -> None:
        """Validate serializer configuration."""
        if self.indent.strip():
            raise ValueError("indent must contain whitespace only")
        if not self.node_class_prefix or " " in self.node_class_prefix:
            raise ValueError("node_class_prefix must be a non-empty class token")


@dataclass
class HistoryConfig:
    """Configuration for undo/redo history and change notification."""

    max_entries: int = 100
    emit_delay_ms: float = 300.0

    def __post_init__(self) -> None:
        """Validate history configuration."""
        if self.max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if self.emit_delay_ms < 0:
            raise ValueError("emit_delay_ms must be >= 0")


@dataclass
class RecoveryConfig:
    """Configuration for the response recovery parser."""

    min_candidate_length: int = 50
    strip_line_comments: bool = True
    max_bracket_candidates: Optional[int] = None
    max_node_depth: int = 32

    def __post_init__(self) -> None:
        """Validate recovery configuration."""
        if self.min_candidate_length < 2:
            raise ValueError("min_candidate_length must be >= 2")
        if self.max_bracket_candidates is not None and self.max_bracket_candidates <= 0:
            raise ValueError("max_bracket_candidates must be > 0 or None")
        if self.max_node_depth < 1:
            raise ValueError("max_node_depth must be >= 1")


_SECTIONS = {
    "serializer": SerializerConfig,
    "history": HistoryConfig,
    "recovery": RecoveryConfig,
}


@dataclass(frozen=True)
class EditorConfig:
    """Immutable configuration for an editor session.

    Thread-safe due to frozen dataclass implementation; derive variants with
    ``override`` instead of mutating.
    """

    serializer: SerializerConfig = field(default_factory=SerializerConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)

    name: Optional[str] = None
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete editor configuration."""
        try:
            self.serializer.__post_init__()
            self.history.__post_init__()
            self.recovery.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(f"Configuration validation failed: {e}") from e

    def override(self, **kwargs: Any) -> "EditorConfig":
        """Create a new configuration with overridden values.

        Dotted keys address nested fields, e.g.
        ``config.override(**{"history.max_entries": 20})``.

        Raises:
            ConfigValidationError: If a key is unknown or a value is invalid
        """
        sections: Dict[str, Any] = {}
        top_level: Dict[str, Any] = {}

        for key, value in kwargs.items():
            if "." in key:
                section_name, field_name = key.split(".", 1)
                if section_name not in _SECTIONS:
                    raise ConfigValidationError(
                        f"Unknown configuration section: {section_name}",
                        field_name=key,
                        suggestions=sorted(_SECTIONS),
                    )
                section = sections.get(section_name, getattr(self, section_name))
                valid = {f.name for f in fields(section)}
                if field_name not in valid:
                    raise ConfigValidationError(
                        f"Unknown field {field_name} in section {section_name}",
                        field_name=key,
                        suggestions=sorted(valid),
                    )
                try:
                    sections[section_name] = replace(section, **{field_name: value})
                except ValueError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                top_level[key] = value

        try:
            return replace(self, **sections, **top_level)
        except TypeError as e:
            raise ConfigValidationError(f"Invalid configuration override: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary."""
        result: Dict[str, Any] = {
            "name": self.name,
            "correlation_id": self.correlation_id,
        }
        for section_name in _SECTIONS:
            section = getattr(self, section_name)
            result[section_name] = {f.name: getattr(section, f.name) for f in fields(section)}
        return result

    def to_json(self, indent: int = 2) -> str:
        """Serialize configuration to JSON."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorConfig":
        """Create configuration from a dictionary.

        Raises:
            ConfigValidationError: If the dictionary contains invalid values
        """
        kwargs: Dict[str, Any] = {}
        try:
            for section_name, section_cls in _SECTIONS.items():
                if section_name in data:
                    kwargs[section_name] = section_cls(**data[section_name])
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

        return cls(
            name=data.get("name"),
            correlation_id=data.get("correlation_id"),
            **kwargs,
        )

    @classmethod
    def from_json(cls, json_str: str) -> "EditorConfig":
        """Create configuration from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    @classmethod
    def default(cls) -> "EditorConfig":
        """Balanced defaults used by the editor."""
        return cls(name="default")

    @classmethod
    def interactive(cls) -> "EditorConfig":
        """Shorter notification window and deeper history for hands-on editing."""
        return cls(
            history=HistoryConfig(max_entries=250, emit_delay_ms=150.0),
            name="interactive",
        )

    @classmethod
    def strict_recovery(cls) -> "EditorConfig":
        """Recovery that only considers a few large candidates and keeps comments."""
        return cls(
            recovery=RecoveryConfig(
                min_candidate_length=100,
                strip_line_comments=False,
                max_bracket_candidates=10,
            ),
            name="strict_recovery",
        )
