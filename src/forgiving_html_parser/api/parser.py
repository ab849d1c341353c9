"""Core parser API with progressive disclosure for forgiving HTML parsing.

Level 1: ``parse_html(source)`` returns the root element.
Level 2: ``parse(source)`` returns a ParseResult with diagnostics and metrics.
Level 3: ``HTMLParser(config)`` holds a configuration for repeated parses.

Acquiring the source text (files, network) is the caller's concern; every
function here takes an in-memory string.
"""

import time
import uuid
from typing import Any, Dict, Optional

from forgiving_html_parser.shared import (
    DiagnosticSeverity,
    ParserConfig,
    get_logger,
)
from forgiving_html_parser.tokenization import HTMLTokenizer
from forgiving_html_parser.tree import Element, HTMLTreeBuilder, ParseResult

# Max length for content preview in logs
PREVIEW_LENGTH = 100
MS_PER_SECOND = 1000


def parse_html(source: str) -> Element:
    """Parse markup and return the synthetic root element of its tree.

    Args:
        source: Markup text

    Returns:
        Root element whose single element child is ``html``

    Raises:
        TypeError: If ``source`` is not a string

    Examples:
        >>> root = parse_html('<p class="x">hi</p>')
        >>> root.get_elements_by_class_name('x')[0].text_content
        'hi'
    """
    config = ParserConfig.performance_optimized()
    return _run_pipeline(source, config, None).root


def parse(
    source: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Parse markup and return the tree with diagnostics and metrics.

    Args:
        source: Markup text
        config: Parser configuration (defaults to ParserConfig())
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult containing the tree and comprehensive metadata

    Raises:
        TypeError: If ``source`` is not a string

    Examples:
        >>> result = parse('<div><span></div></em>')
        >>> result.success
        True
        >>> [d.severity.name for d in result.diagnostics][-1]
        'WARNING'
    """
    return HTMLParser(config, correlation_id).parse(source)


def _run_pipeline(
    source: str,
    config: ParserConfig,
    correlation_id: Optional[str]
) -> ParseResult:
    """Tokenize and build; no exception handling."""
    start_time = time.perf_counter()
    tokenizer = HTMLTokenizer(config.tokenizer, correlation_id)
    tree_builder = HTMLTreeBuilder(config.tree, correlation_id)

    result = tree_builder.build(tokenizer.tokenize(source))
    result.performance.processing_time_ms = (
        (time.perf_counter() - start_time) * MS_PER_SECOND
    )
    return result


def _create_error_result(
    message: str,
    config: ParserConfig,
    correlation_id: Optional[str],
    processing_time_ms: float,
    exception: Exception
) -> ParseResult:
    """Build the result returned when never-fail mode absorbs a failure."""
    result = ParseResult(
        root=Element(config.tree.root_tag_name),
        success=False,
        correlation_id=correlation_id,
    )
    result.performance.processing_time_ms = processing_time_ms
    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        message,
        "html_parser",
        details={"exception_type": type(exception).__name__}
    )
    return result


class HTMLParser:
    """Configured parser for repeated use.

    Examples:
        >>> parser = HTMLParser(ParserConfig.strict())
        >>> parser.parse('<title>t</title>').root.get_elements_by_tag_name('title')[0].text_content
        't'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ParserConfig())
            correlation_id: Correlation ID used for every parse; when omitted
                and correlation tracking is enabled, each parse gets a fresh one
        """
        self.config = config or ParserConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_parser")

        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0

    def parse(self, source: str) -> ParseResult:
        """Parse markup according to this parser's configuration.

        In never-fail mode, unexpected internal failures are logged and
        returned as a result with ``success=False`` and an empty tree.

        Raises:
            TypeError: If ``source`` is not a string
        """
        if not isinstance(source, str):
            raise TypeError(f"source must be str, not {type(source).__name__}")

        correlation_id = self.correlation_id
        if correlation_id is None and self.config.global_.enable_correlation_tracking:
            correlation_id = uuid.uuid4().hex

        self.logger.debug(
            "Starting parse operation",
            extra={
                "correlation_id": correlation_id,
                "content_length": len(source),
                "preview": (
                    source[:PREVIEW_LENGTH] + "..."
                    if len(source) > PREVIEW_LENGTH else source
                ),
            }
        )

        start_time = time.perf_counter()
        try:
            result = _run_pipeline(source, self.config, correlation_id)
        except Exception as e:
            processing_time = (time.perf_counter() - start_time) * MS_PER_SECOND
            self._record(False, processing_time)
            if not self.config.api.never_fail_mode:
                raise
            self.logger.exception(
                "Parse operation failed",
                extra={
                    "correlation_id": correlation_id,
                    "processing_time_ms": processing_time,
                }
            )
            return _create_error_result(
                f"Parse failed: {e}",
                self.config,
                correlation_id,
                processing_time,
                e,
            )

        self._record(True, result.performance.processing_time_ms)
        self.logger.info(
            "Parse completed",
            extra={
                "correlation_id": correlation_id,
                "element_count": result.performance.elements_created,
                "diagnostic_count": len(result.diagnostics),
                "processing_time_ms": result.performance.processing_time_ms,
            }
        )
        return result

    def _record(self, success: bool, processing_time: float) -> None:
        self._parse_count += 1
        self._total_processing_time += processing_time
        if success:
            self._successful_parses += 1

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics."""
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._successful_parses = 0
        self._total_processing_time = 0.0
