"""Configuration classes for forgiving HTML parsing.

Configuration never changes the shape of the produced tree: the tokenizer and
tree construction rules are fixed. It controls the surrounding behavior
(diagnostics, the synthetic root's tag name, correlation tracking and the
never-fail policy of the API layer).
"""

import json
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from .elements import RESERVED_NAME_PREFIX, ROOT_TAG_NAME, WHITESPACE


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class TokenizerConfig:
    """Configuration for the tokenizer."""

    record_diagnostics: bool = True


@dataclass(frozen=True)
class TreeConfig:
    """Configuration for tree construction."""

    root_tag_name: str = ROOT_TAG_NAME
    record_diagnostics: bool = True
    # Nesting deeper than this is reported, never truncated.
    max_tree_depth: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if not self.root_tag_name:
            raise ConfigValidationError(
                "root_tag_name cannot be empty", field_name="root_tag_name"
            )
        if not self.root_tag_name.startswith(RESERVED_NAME_PREFIX):
            raise ConfigValidationError(
                f"root_tag_name must start with {RESERVED_NAME_PREFIX!r}",
                field_name="root_tag_name",
                suggestions=[RESERVED_NAME_PREFIX + self.root_tag_name, ROOT_TAG_NAME],
            )
        if any(char in WHITESPACE for char in self.root_tag_name):
            raise ConfigValidationError(
                "root_tag_name cannot contain whitespace",
                field_name="root_tag_name",
                suggestions=[f"Use the default {ROOT_TAG_NAME!r}"],
            )
        if self.max_tree_depth is not None and self.max_tree_depth <= 0:
            raise ConfigValidationError(
                "max_tree_depth must be > 0 or None", field_name="max_tree_depth"
            )


@dataclass(frozen=True)
class ApiConfig:
    """Configuration for API layer behavior."""

    never_fail_mode: bool = True


@dataclass(frozen=True)
class GlobalConfig:
    """Settings that apply across all components."""

    enable_correlation_tracking: bool = True


_COMPONENTS = ("tokenizer", "tree", "api", "global_")


@dataclass(frozen=True)
class ParserConfig:
    """Immutable configuration for all parser components.

    Thread-safe: a single instance may be shared by concurrent parses.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use the
                ``component__field`` notation

        Returns:
            New ParserConfig instance with overrides applied

        Raises:
            ConfigValidationError: If a key names an unknown component or field

        Example:
            >>> config = ParserConfig().override(
            ...     tree__root_tag_name="#document",
            ...     api__never_fail_mode=False,
            ... )
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, overrides in nested_overrides.items():
            current = getattr(self, component)
            known = {f.name for f in fields(current)}
            unknown = sorted(set(overrides) - known)
            if unknown:
                raise ConfigValidationError(
                    f"Unknown {component} field(s): {', '.join(unknown)}",
                    field_name=f"{component}__{unknown[0]}",
                    suggestions=sorted(known),
                )
            new_fields[component] = replace(current, **overrides)

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component_field in fields(self):
            value = getattr(self, component_field.name)
            if component_field.name in _COMPONENTS:
                result[component_field.name] = {
                    f.name: getattr(value, f.name) for f in fields(value)
                }
            else:
                result[component_field.name] = value
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from a dictionary produced by :meth:`to_dict`.

        Missing keys fall back to defaults.

        Raises:
            ConfigValidationError: If the data holds unknown keys or bad values
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration key(s): {', '.join(unknown)}",
                field_name=unknown[0],
            )

        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in _COMPONENTS:
                component_class = type(getattr(cls(), key))
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"Configuration component {key} must be a mapping",
                        field_name=key,
                    )
                try:
                    values[key] = component_class(**value)
                except TypeError as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                values[key] = value
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def default(cls) -> "ParserConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Create a preset that propagates internal failures to the caller."""
        return cls(
            api=ApiConfig(never_fail_mode=False),
            name="strict",
            description="Internal failures raise instead of returning a failed result",
        )

    @classmethod
    def performance_optimized(cls) -> "ParserConfig":
        """Create a preset that skips diagnostic bookkeeping."""
        return cls(
            tokenizer=TokenizerConfig(record_diagnostics=False),
            tree=TreeConfig(record_diagnostics=False),
            global_=GlobalConfig(enable_correlation_tracking=False),
            name="performance_optimized",
            description="No diagnostics or correlation IDs are generated",
        )
