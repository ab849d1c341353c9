"""Tree construction from token streams.

This module implements a reduced HTML insertion-mode state machine. It keeps
an explicit insertion mode and an explicit stack of open elements, both local
to one build, and synthesizes the ``html``, ``head`` and ``body`` elements the
source leaves out. Close tags pop the stack up to their innermost match; close
tags with no match are discarded. Nothing in the token stream can make a build
fail.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from forgiving_html_parser.shared import (
    CorrelationLogger,
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    TreeConfig,
    get_logger,
)
from forgiving_html_parser.shared.elements import (
    HEAD_TEXT_ELEMENTS,
    HEAD_VOID_ELEMENTS,
    ROOT_TAG_NAME,
    VOID_ELEMENTS,
    is_whitespace,
)
from forgiving_html_parser.tokenization import (
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    OpenTagToken,
    SelfCloseTagToken,
    TextToken,
    Token,
    TokenizationResult,
)

from .nodes import Element, TextNode
from .query import iter_elements

_TOKEN_CLASSES = (
    TextToken,
    CommentToken,
    DoctypeToken,
    OpenTagToken,
    CloseTagToken,
    SelfCloseTagToken,
)

class InsertionMode(Enum):
    """States of the tree construction state machine."""

    INITIAL = auto()
    BEFORE_HTML = auto()
    BEFORE_HEAD = auto()
    IN_HEAD = auto()
    AFTER_HEAD = auto()
    IN_BODY = auto()
    AFTER_BODY = auto()


@dataclass
class ParseResult:
    """Tree produced by a parse together with diagnostics and metrics."""

    root: Element = field(default_factory=lambda: Element(ROOT_TAG_NAME))
    success: bool = True
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    tokenization_result: Optional[TokenizationResult] = None
    correlation_id: Optional[str] = None

    @property
    def element_count(self) -> int:
        """Number of elements in the tree, excluding the synthetic root."""
        return sum(1 for _ in iter_elements(self.root)) - 1

    @property
    def processing_time_ms(self) -> float:
        """Get processing time in milliseconds."""
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        position: Optional[Dict[str, int]] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(DiagnosticEntry(
            severity=severity,
            message=message,
            component=component,
            position=position,
            details=details,
            correlation_id=self.correlation_id
        ))

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def summary(self) -> Dict[str, Any]:
        """Get a compact, JSON-ready overview of the result."""
        severity_counts: Dict[str, int] = {}
        for diag in self.diagnostics:
            name = diag.severity.name
            severity_counts[name] = severity_counts.get(name, 0) + 1
        return {
            "success": self.success,
            "element_count": self.element_count,
            "token_count": self.performance.tokens_generated,
            "recovery_operations": self.performance.recovery_operations,
            "diagnostics": severity_counts,
            "processing_time_ms": self.performance.processing_time_ms,
            "correlation_id": self.correlation_id,
        }


class _TreeConstruction:
    """Insertion mode, open-element stack and output of one build."""

    def __init__(
        self,
        config: TreeConfig,
        result: ParseResult,
        logger: CorrelationLogger
    ) -> None:
        self.config = config
        self.result = result
        self.logger = logger
        self.root = result.root
        self.stack: List[Element] = [self.root]
        self.mode = InsertionMode.INITIAL
        self.html: Optional[Element] = None
        self.head: Optional[Element] = None
        self.body: Optional[Element] = None
        self.elements_created = 0
        self.recoveries = 0
        self._depth_reported = False
        self._handlers: Dict[InsertionMode, Callable[[Token], Optional[InsertionMode]]] = {
            InsertionMode.INITIAL: self._initial,
            InsertionMode.BEFORE_HTML: self._before_html,
            InsertionMode.BEFORE_HEAD: self._before_head,
            InsertionMode.IN_HEAD: self._in_head,
            InsertionMode.AFTER_HEAD: self._after_head,
            InsertionMode.IN_BODY: self._in_body,
            InsertionMode.AFTER_BODY: self._after_body,
        }

    def process(self, token: Token) -> None:
        """Run ``token`` through the state machine, reprocessing as directed."""
        if not isinstance(token, _TOKEN_CLASSES):
            raise TypeError(f"Unsupported token: {token!r}")
        if isinstance(token, (CommentToken, DoctypeToken)):
            return

        reprocess_in: Optional[InsertionMode] = self.mode
        while reprocess_in is not None:
            self.mode = reprocess_in
            reprocess_in = self._handlers[self.mode](token)

    def finish(self) -> None:
        """Apply end-of-input rules."""
        if self.html is None:
            self.html = self._insert("html", {}, push=False)
            self._note(DiagnosticSeverity.INFO, "Implied <html> element inserted", None)

        if self.body is None:
            return
        still_open = [
            element.tag_name for element in self.stack[1:]
            if all(element is not landmark for landmark in (self.html, self.head, self.body))
        ]
        if still_open:
            self._note(
                DiagnosticSeverity.INFO,
                "Elements implicitly closed at end of input",
                None,
                tag_names=still_open,
            )
        self._pop_through(self.html)

    # State handlers. Each returns the mode to reprocess the token in, or None
    # once the token has been consumed.

    def _initial(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        return InsertionMode.BEFORE_HTML

    def _before_html(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        if isinstance(token, OpenTagToken) and token.tag_name == "html":
            self.html = self._insert("html", token.attributes, push=True)
            self.mode = InsertionMode.BEFORE_HEAD
            return None
        self.html = self._insert("html", {}, push=True)
        self._note(DiagnosticSeverity.INFO, "Implied <html> element inserted", token)
        return InsertionMode.BEFORE_HEAD

    def _before_head(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        if isinstance(token, OpenTagToken) and token.tag_name == "head":
            self.head = self._insert("head", token.attributes, push=True)
            self.mode = InsertionMode.IN_HEAD
            return None
        self.head = self._insert("head", {}, push=True)
        self._note(DiagnosticSeverity.INFO, "Implied <head> element inserted", token)
        return InsertionMode.IN_HEAD

    def _in_head(self, token: Token) -> Optional[InsertionMode]:
        current = self.stack[-1]
        if current.tag_name in HEAD_TEXT_ELEMENTS:
            if isinstance(token, TextToken):
                self._append_text(token.value)
                return None
            if isinstance(token, CloseTagToken) and token.tag_name == current.tag_name:
                self.stack.pop()
                return None
            # Without its closing tag the element ends at the next other token.
            self.stack.pop()
            self._note(
                DiagnosticSeverity.INFO,
                f"Unterminated <{current.tag_name}> closed",
                token,
            )

        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        if isinstance(token, (OpenTagToken, SelfCloseTagToken)):
            if token.tag_name in HEAD_VOID_ELEMENTS:
                self._insert(token.tag_name, token.attributes, push=False)
                return None
            if token.tag_name in HEAD_TEXT_ELEMENTS:
                self._insert(
                    token.tag_name,
                    token.attributes,
                    push=isinstance(token, OpenTagToken),
                )
                return None
        if isinstance(token, CloseTagToken) and token.tag_name == "head":
            self._pop_through(self.head)
            self.mode = InsertionMode.AFTER_HEAD
            return None
        self._pop_through(self.head)
        return InsertionMode.AFTER_HEAD

    def _after_head(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        if isinstance(token, OpenTagToken):
            if token.tag_name == "body":
                self.body = self._insert("body", token.attributes, push=True)
                self.mode = InsertionMode.IN_BODY
                return None
            if token.tag_name == "html":
                return None
        if self.body is None:
            self.body = self._insert("body", {}, push=True)
            self._note(DiagnosticSeverity.INFO, "Implied <body> element inserted", token)
        return InsertionMode.IN_BODY

    def _in_body(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken):
            self._append_text(token.value)
        elif isinstance(token, SelfCloseTagToken):
            self._insert(token.tag_name, token.attributes, push=False)
        elif isinstance(token, OpenTagToken):
            self._insert(
                token.tag_name,
                token.attributes,
                push=token.tag_name not in VOID_ELEMENTS,
            )
        elif isinstance(token, CloseTagToken):
            if token.tag_name == "body":
                self._pop_through(self.body)
                self.mode = InsertionMode.AFTER_BODY
            else:
                self._close_element(token)
        return None

    def _after_body(self, token: Token) -> Optional[InsertionMode]:
        if isinstance(token, TextToken) and is_whitespace(token.value):
            return None
        return InsertionMode.IN_BODY

    # Tree and stack operations

    def _insert(
        self,
        tag_name: str,
        attributes: Dict[str, str],
        push: bool
    ) -> Element:
        element = Element(tag_name, dict(attributes))
        self.stack[-1].children.append(element)
        self.elements_created += 1
        if push:
            self.stack.append(element)
            self._check_depth()
        return element

    def _append_text(self, value: str) -> None:
        children = self.stack[-1].children
        if children and isinstance(children[-1], TextNode):
            children[-1].value += value
        else:
            children.append(TextNode(value))

    def _pop_through(self, target: Optional[Element]) -> bool:
        """Pop the stack up to and including ``target`` if it is open."""
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index] is target:
                del self.stack[index:]
                return True
        return False

    def _close_element(self, token: CloseTagToken) -> None:
        # Index 0 is the synthetic root and never matches.
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].tag_name == token.tag_name:
                implied = [element.tag_name for element in self.stack[index + 1:]]
                if implied:
                    self._note(
                        DiagnosticSeverity.INFO,
                        f"</{token.tag_name}> implicitly closed open elements",
                        token,
                        tag_names=implied,
                    )
                del self.stack[index:]
                return
        self._note(
            DiagnosticSeverity.WARNING,
            f"Discarded </{token.tag_name}> with no matching open element",
            token,
            tag_name=token.tag_name,
        )

    def _check_depth(self) -> None:
        limit = self.config.max_tree_depth
        if limit is None or self._depth_reported or len(self.stack) - 1 <= limit:
            return
        self._depth_reported = True
        self._note(
            DiagnosticSeverity.WARNING,
            f"Nesting depth exceeds {limit}",
            None,
            depth=len(self.stack) - 1,
        )

    def _note(
        self,
        severity: DiagnosticSeverity,
        message: str,
        token: Optional[Token],
        **details: Any
    ) -> None:
        self.recoveries += 1
        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(message, extra={"mode": self.mode.name, **details})
        if not self.config.record_diagnostics:
            return
        self.result.add_diagnostic(
            severity,
            message,
            "html_tree_builder",
            position={"offset": token.offset} if token is not None else None,
            details=details or None,
        )


class HTMLTreeBuilder:
    """Builds document trees from token streams.

    Instances hold configuration only; every call to :meth:`build` uses fresh
    state, so one instance can be shared between threads.
    """

    def __init__(
        self,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            config: Tree configuration (defaults to TreeConfig())
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "html_tree_builder")

    def build(
        self,
        tokens: Union[TokenizationResult, Sequence[Token]]
    ) -> ParseResult:
        """Build a document tree from a token stream.

        Args:
            tokens: Either a TokenizationResult or a sequence of tokens

        Returns:
            ParseResult whose ``root`` is the synthetic root element

        Raises:
            TypeError: If the stream contains something other than a token
        """
        start_time = time.perf_counter()

        if isinstance(tokens, TokenizationResult):
            token_list: Sequence[Token] = tokens.tokens
            tokenization_result: Optional[TokenizationResult] = tokens
        else:
            token_list = tokens
            tokenization_result = None

        self.logger.debug(
            "Starting tree building",
            extra={"token_count": len(token_list)}
        )

        result = ParseResult(
            root=Element(self.config.root_tag_name),
            tokenization_result=tokenization_result,
            correlation_id=self.correlation_id,
        )
        if tokenization_result is not None:
            result.diagnostics.extend(tokenization_result.diagnostics)

        construction = _TreeConstruction(self.config, result, self.logger)
        for token in token_list:
            construction.process(token)
        construction.finish()

        performance = result.performance
        performance.processing_time_ms = (time.perf_counter() - start_time) * 1000
        performance.tokens_generated = len(token_list)
        performance.elements_created = construction.elements_created
        performance.recovery_operations = construction.recoveries
        if tokenization_result is not None:
            performance.characters_processed = tokenization_result.character_count

        self.logger.info(
            "Tree building completed",
            extra={
                "element_count": construction.elements_created,
                "recovery_operations": construction.recoveries,
                "final_mode": construction.mode.name,
            }
        )
        return result


def build(tokens: Sequence[Token]) -> Element:
    """Build a tree with the default configuration and return its root."""
    return HTMLTreeBuilder(TreeConfig(record_diagnostics=False)).build(tokens).root
