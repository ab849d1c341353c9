"""Single-pass HTML tokenizer.

This module converts a markup string into an ordered list of tokens in one
left-to-right pass. The only lookahead is a bounded forward search for a
terminator (``-->``, ``>`` or a raw-text closing tag). Malformed input never
raises: unterminated constructs degrade to text and end tokenization, and
nameless tags are demoted to literal text.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import ClassVar, Dict, List, Optional, Pattern, Tuple, Union

from forgiving_html_parser.shared import (
    CorrelationLogger,
    DiagnosticEntry,
    DiagnosticSeverity,
    TokenizerConfig,
    get_logger,
)
from forgiving_html_parser.shared.elements import (
    LITERAL_TEXT_ELEMENTS,
    VOID_ELEMENTS,
    WHITESPACE,
    is_whitespace,
)

COMMENT_OPEN = "<!--"
COMMENT_CLOSE = "-->"

# Closing sequences searched for after a raw-text or escapable raw-text open
# tag. ASCII-only case folding keeps match offsets aligned with the source.
_LITERAL_TEXT_CLOSERS: Dict[str, Pattern[str]] = {
    name: re.compile(re.escape(f"</{name}>"), re.IGNORECASE | re.ASCII)
    for name in LITERAL_TEXT_ELEMENTS
}


class TokenType(Enum):
    """Kinds of token produced by the tokenizer."""

    TEXT = auto()
    COMMENT = auto()
    DOCTYPE = auto()
    OPEN_TAG = auto()
    CLOSE_TAG = auto()
    SELF_CLOSE_TAG = auto()


@dataclass(frozen=True)
class TextToken:
    """Character data between tags (never whitespace-only when tokenized)."""

    value: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.TEXT


@dataclass(frozen=True)
class CommentToken:
    """Contents of a ``<!-- ... -->`` comment."""

    value: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.COMMENT


@dataclass(frozen=True)
class DoctypeToken:
    """Trimmed contents of a ``<!...>`` declaration."""

    value: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.DOCTYPE


@dataclass(frozen=True)
class OpenTagToken:
    """Start tag of an element that may receive children."""

    tag_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.OPEN_TAG


@dataclass(frozen=True)
class CloseTagToken:
    """End tag."""

    tag_name: str
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.CLOSE_TAG


@dataclass(frozen=True)
class SelfCloseTagToken:
    """Tag with an explicit trailing slash, or any void element."""

    tag_name: str
    attributes: Dict[str, str] = field(default_factory=dict)
    offset: int = field(default=0, compare=False)

    type: ClassVar[TokenType] = TokenType.SELF_CLOSE_TAG


Token = Union[
    TextToken,
    CommentToken,
    DoctypeToken,
    OpenTagToken,
    CloseTagToken,
    SelfCloseTagToken,
]


@dataclass
class TokenizationResult:
    """Result of tokenization with metadata and diagnostics."""

    tokens: List[Token]
    character_count: int = 0
    processing_time_ms: float = 0.0
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)

    @property
    def token_count(self) -> int:
        """Get the total number of tokens."""
        return len(self.tokens)

    @property
    def token_type_distribution(self) -> Dict[str, int]:
        """Count tokens per type name."""
        distribution: Dict[str, int] = {}
        for token in self.tokens:
            distribution[token.type.name] = distribution.get(token.type.name, 0) + 1
        return distribution


def parse_tag_body(inner: str) -> Tuple[str, Dict[str, str]]:
    """Split the trimmed inside of a tag into its name and attributes.

    Args:
        inner: Tag text between ``<`` and ``>`` with any trailing ``/`` removed

    Returns:
        Lowercased tag name (empty if the tag has none) and attribute mapping
    """
    length = len(inner)
    cursor = 0
    while cursor < length and inner[cursor] not in WHITESPACE:
        cursor += 1
    tag_name = inner[:cursor].lower()
    if not tag_name:
        return "", {}

    attributes: Dict[str, str] = {}
    while cursor < length:
        while cursor < length and inner[cursor] in WHITESPACE:
            cursor += 1
        if cursor >= length:
            break

        name_start = cursor
        while (
            cursor < length
            and inner[cursor] not in WHITESPACE
            and inner[cursor] != "="
        ):
            cursor += 1
        attr_name = inner[name_start:cursor].lower()
        if not attr_name:
            # A stray "=" ends attribute parsing for this tag.
            break

        while cursor < length and inner[cursor] in WHITESPACE:
            cursor += 1

        attr_value = ""
        if cursor < length and inner[cursor] == "=":
            cursor += 1
            while cursor < length and inner[cursor] in WHITESPACE:
                cursor += 1

            if cursor < length and inner[cursor] in "\"'":
                quote = inner[cursor]
                cursor += 1
                value_start = cursor
                while cursor < length and inner[cursor] != quote:
                    cursor += 1
                attr_value = inner[value_start:cursor]
                cursor += 1
            else:
                value_start = cursor
                while (
                    cursor < length
                    and inner[cursor] not in WHITESPACE
                    and inner[cursor] != ">"
                ):
                    cursor += 1
                attr_value = inner[value_start:cursor]

        attributes[attr_name] = attr_value

    return tag_name, attributes


class _Scanner:
    """Cursor and output buffers for one tokenization run."""

    def __init__(
        self,
        source: str,
        record_diagnostics: bool,
        correlation_id: Optional[str],
        logger: CorrelationLogger
    ) -> None:
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []
        self.diagnostics: List[DiagnosticEntry] = []
        self.record_diagnostics = record_diagnostics
        self.correlation_id = correlation_id
        self.logger = logger

    def run(self) -> None:
        source = self.source
        length = len(source)
        while self.pos < length:
            if source[self.pos] == "<":
                if not self._scan_markup():
                    break
            else:
                self._scan_text()

    def _diagnose(
        self,
        severity: DiagnosticSeverity,
        message: str,
        offset: int,
        **details: str
    ) -> None:
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(message, extra={"offset": offset, **details})
        if not self.record_diagnostics:
            return
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component="html_tokenizer",
            position={"offset": offset},
            details=details or None,
            correlation_id=self.correlation_id,
        ))

    def _emit_rest_as_text(self, start: int, construct: str) -> bool:
        self.tokens.append(TextToken(self.source[start:], offset=start))
        self._diagnose(
            DiagnosticSeverity.WARNING,
            f"Unterminated {construct}; remainder of input kept as text",
            start,
            construct=construct,
        )
        return False

    def _scan_markup(self) -> bool:
        """Consume one construct starting at ``<``; False ends tokenization."""
        source = self.source
        start = self.pos

        if source.startswith(COMMENT_OPEN, start):
            return self._scan_comment(start)

        end = source.find(">", start)

        if source.startswith("<!", start):
            if end == -1:
                return self._emit_rest_as_text(start, "declaration")
            value = source[start + 2:end].strip(WHITESPACE)
            self.tokens.append(DoctypeToken(value, offset=start))
            self.pos = end + 1
            return True

        if source.startswith("</", start):
            if end == -1:
                return self._emit_rest_as_text(start, "close tag")
            tag_name = source[start + 2:end].strip(WHITESPACE).lower()
            self.tokens.append(CloseTagToken(tag_name, offset=start))
            self.pos = end + 1
            return True

        if end == -1:
            return self._emit_rest_as_text(start, "tag")
        self._scan_tag(start, end)
        return True

    def _scan_comment(self, start: int) -> bool:
        source = self.source
        body_start = start + len(COMMENT_OPEN)
        close = source.find(COMMENT_CLOSE, body_start)
        if close == -1:
            self.tokens.append(CommentToken(source[body_start:], offset=start))
            self._diagnose(
                DiagnosticSeverity.WARNING,
                "Unterminated comment; remainder of input kept as comment",
                start,
                construct="comment",
            )
            return False
        self.tokens.append(CommentToken(source[body_start:close], offset=start))
        self.pos = close + len(COMMENT_CLOSE)
        return True

    def _scan_tag(self, start: int, end: int) -> None:
        source = self.source
        trimmed = source[start + 1:end].strip(WHITESPACE)
        explicit_self_close = trimmed.endswith("/")
        inner = trimmed[:-1].strip(WHITESPACE) if explicit_self_close else trimmed

        tag_name, attributes = parse_tag_body(inner)
        if not tag_name:
            raw_tag = source[start:end + 1]
            self.tokens.append(TextToken(raw_tag, offset=start))
            self._diagnose(
                DiagnosticSeverity.INFO,
                "Tag without a name kept as text",
                start,
                raw=raw_tag,
            )
            self.pos = end + 1
            return

        if explicit_self_close or tag_name in VOID_ELEMENTS:
            self.tokens.append(SelfCloseTagToken(tag_name, attributes, offset=start))
            self.pos = end + 1
            return

        self.tokens.append(OpenTagToken(tag_name, attributes, offset=start))
        self.pos = end + 1
        if tag_name in LITERAL_TEXT_ELEMENTS:
            self._capture_literal_text(tag_name)

    def _capture_literal_text(self, tag_name: str) -> None:
        """Emit everything up to ``</tag_name>`` as one text token."""
        source = self.source
        content_start = self.pos
        match = _LITERAL_TEXT_CLOSERS[tag_name].search(source, content_start)
        if match is None:
            # Scanning resumes normally; markup-like content is tokenized.
            self._diagnose(
                DiagnosticSeverity.WARNING,
                f"No closing tag for <{tag_name}>; content tokenized as markup",
                content_start,
                tag_name=tag_name,
            )
            return

        content = source[content_start:match.start()]
        if not is_whitespace(content):
            self.tokens.append(TextToken(content, offset=content_start))
        self.tokens.append(CloseTagToken(tag_name, offset=match.start()))
        self.pos = match.end()

    def _scan_text(self) -> None:
        source = self.source
        start = self.pos
        end = source.find("<", start)
        if end == -1:
            end = len(source)
        value = source[start:end]
        if not is_whitespace(value):
            self.tokens.append(TextToken(value, offset=start))
        self.pos = end


class HTMLTokenizer:
    """Forgiving HTML tokenizer.

    Instances hold configuration only; every call to :meth:`tokenize` uses
    fresh state, so one instance can be shared between threads.
    """

    def __init__(
        self,
        config: Optional[TokenizerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the tokenizer.

        Args:
            config: Tokenizer configuration (defaults to TokenizerConfig())
            correlation_id: Optional correlation ID for tracking requests
        """
        self.config = config or TokenizerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_tokenizer")

    def tokenize(self, source: str) -> TokenizationResult:
        """Tokenize markup into an ordered token list.

        Args:
            source: Markup text

        Returns:
            TokenizationResult with tokens, timing and diagnostics

        Raises:
            TypeError: If ``source`` is not a string
        """
        if not isinstance(source, str):
            raise TypeError(
                f"source must be str, not {type(source).__name__}"
            )

        start_time = time.perf_counter()
        self.logger.debug(
            "Starting tokenization",
            extra={"char_count": len(source)}
        )

        scanner = _Scanner(
            source,
            self.config.record_diagnostics,
            self.correlation_id,
            self.logger,
        )
        scanner.run()

        result = TokenizationResult(
            tokens=scanner.tokens,
            character_count=len(source),
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            diagnostics=scanner.diagnostics,
        )

        self.logger.debug(
            "Tokenization completed",
            extra={
                "token_count": result.token_count,
                "diagnostic_count": len(result.diagnostics),
                "processing_time_ms": result.processing_time_ms,
            }
        )
        return result


def tokenize(source: str) -> List[Token]:
    """Tokenize markup with the default configuration.

    Examples:
        >>> [token.type.name for token in tokenize('<p class=x>hi</p>')]
        ['OPEN_TAG', 'TEXT', 'CLOSE_TAG']
    """
    return HTMLTokenizer(TokenizerConfig(record_diagnostics=False)).tokenize(source).tokens
