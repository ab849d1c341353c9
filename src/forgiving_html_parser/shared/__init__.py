"""Shared utilities for forgiving HTML parsing.

This module provides configuration objects, diagnostic and metrics types,
fixed element tables and the correlation-aware logging facade used across the
tokenizer, tree builder and API layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    ApiConfig,
    ConfigError,
    ConfigValidationError,
    GlobalConfig,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .elements import (
    ESCAPABLE_RAW_TEXT_ELEMENTS,
    RAW_TEXT_ELEMENTS,
    RESERVED_NAME_PREFIX,
    ROOT_TAG_NAME,
    VOID_ELEMENTS,
    WHITESPACE,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "ApiConfig",
    "ConfigError",
    "ConfigValidationError",
    "GlobalConfig",
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
    "ESCAPABLE_RAW_TEXT_ELEMENTS",
    "RAW_TEXT_ELEMENTS",
    "RESERVED_NAME_PREFIX",
    "ROOT_TAG_NAME",
    "VOID_ELEMENTS",
    "WHITESPACE",
    "CorrelationLogger",
    "get_logger",
]
