"""Comprehensive tests for HTML tokenization functionality."""

import logging

import pytest

from forgiving_html_parser.shared import DiagnosticSeverity, TokenizerConfig
from forgiving_html_parser.tokenization import (
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    HTMLTokenizer,
    OpenTagToken,
    SelfCloseTagToken,
    TextToken,
    TokenizationResult,
    TokenType,
    parse_tag_body,
    tokenize,
)


class TestTokenVariants:
    """Tests for the token dataclasses."""

    def test_token_types_are_fixed_per_class(self):
        """Each token class carries its own discriminator."""
        assert TextToken("a").type is TokenType.TEXT
        assert CommentToken("a").type is TokenType.COMMENT
        assert DoctypeToken("a").type is TokenType.DOCTYPE
        assert OpenTagToken("a").type is TokenType.OPEN_TAG
        assert CloseTagToken("a").type is TokenType.CLOSE_TAG
        assert SelfCloseTagToken("a").type is TokenType.SELF_CLOSE_TAG

    def test_offset_is_ignored_by_equality(self):
        """Tokens compare by content, not by source position."""
        assert TextToken("hi", offset=4) == TextToken("hi")
        assert OpenTagToken("p", {"id": "x"}, offset=9) == OpenTagToken("p", {"id": "x"})

    def test_tokens_are_immutable(self):
        """Token fields cannot be reassigned."""
        token = TextToken("hi")
        with pytest.raises(AttributeError):
            token.value = "bye"  # type: ignore[misc]


class TestParseTagBody:
    """Tests for tag name and attribute extraction."""

    def test_name_and_attributes_are_lowercased(self):
        """Tag and attribute names are lowercased, values are not."""
        assert parse_tag_body('DIV ID="Main" Data-X=Y') == (
            "div", {"id": "Main", "data-x": "Y"}
        )

    def test_empty_body_has_no_name(self):
        """An empty tag body yields an empty name."""
        assert parse_tag_body("") == ("", {})

    def test_value_less_attribute(self):
        """Attributes without "=" get an empty value."""
        assert parse_tag_body("input disabled") == ("input", {"disabled": ""})

    def test_whitespace_around_equals(self):
        """Whitespace on either side of "=" is skipped."""
        assert parse_tag_body('a href = "x"') == ("a", {"href": "x"})

    def test_single_quoted_value_keeps_spaces(self):
        """Quoted values may contain whitespace."""
        assert parse_tag_body("div data-value='a b'") == ("div", {"data-value": "a b"})

    def test_unterminated_quote_consumes_rest(self):
        """An unterminated quote runs to the end of the tag."""
        assert parse_tag_body('a title="abc def') == ("a", {"title": "abc def"})

    def test_adjacent_attributes_after_quote(self):
        """A new attribute may start right after a closing quote."""
        assert parse_tag_body('a x="1"y="2"') == ("a", {"x": "1", "y": "2"})

    def test_last_duplicate_wins(self):
        """A repeated attribute keeps its last value."""
        assert parse_tag_body('a href="1" HREF="2"') == ("a", {"href": "2"})

    def test_stray_equals_stops_attribute_parsing(self):
        """An attribute with an empty name ends parsing for the tag."""
        assert parse_tag_body("a =x href=y") == ("a", {})


class TestTokenize:
    """Tests for the tokenize() function."""

    def test_empty_input(self):
        """Empty input produces no tokens."""
        assert tokenize("") == []

    def test_whitespace_only_input(self):
        """Whitespace-only input produces no tokens."""
        assert tokenize("  \n\t\r\f ") == []

    def test_simple_element(self):
        """Open tag, text and close tag."""
        assert tokenize("<p>hi</p>") == [
            OpenTagToken("p"),
            TextToken("hi"),
            CloseTagToken("p"),
        ]

    def test_offsets_point_into_source(self):
        """Each token records where it starts."""
        assert [token.offset for token in tokenize("<p>hi</p>")] == [0, 3, 5]

    def test_whitespace_between_tags_is_dropped(self):
        """Whitespace-only runs never become tokens."""
        assert tokenize("<p>  \n </p>") == [OpenTagToken("p"), CloseTagToken("p")]

    def test_text_keeps_surrounding_whitespace(self):
        """Runs with visible characters are kept verbatim."""
        assert tokenize("<b> a b </b>") == [
            OpenTagToken("b"),
            TextToken(" a b "),
            CloseTagToken("b"),
        ]

    def test_doctype(self):
        """Declarations become trimmed doctype tokens."""
        assert tokenize("<!DOCTYPE html >") == [DoctypeToken("DOCTYPE html")]

    def test_comment(self):
        """Comments keep their raw content."""
        assert tokenize("<!-- note -->x") == [CommentToken(" note "), TextToken("x")]

    def test_comment_may_contain_markup(self):
        """Markup inside a comment is not interpreted."""
        assert tokenize("<!--<p>-->") == [CommentToken("<p>")]

    def test_unterminated_comment_takes_rest(self):
        """An unterminated comment absorbs the remaining input."""
        assert tokenize("a<!-- open <p>b") == [
            TextToken("a"),
            CommentToken(" open <p>b"),
        ]

    def test_unterminated_declaration_is_text(self):
        """A declaration without ">" becomes text and ends tokenizing."""
        assert tokenize("x<!DOCTYPE html") == [TextToken("x"), TextToken("<!DOCTYPE html")]

    def test_close_tag_is_trimmed_and_lowercased(self):
        """Close tag names are trimmed and lowercased."""
        assert tokenize("</ DIV >") == [CloseTagToken("div")]

    def test_unterminated_close_tag_is_text(self):
        """A close tag without ">" becomes text."""
        assert tokenize("<p>x</p") == [
            OpenTagToken("p"),
            TextToken("x"),
            TextToken("</p"),
        ]

    def test_unterminated_open_tag_is_text(self):
        """An open tag without ">" becomes text and ends tokenizing."""
        assert tokenize('a<div class="x"') == [TextToken("a"), TextToken('<div class="x"')]

    def test_less_than_in_text(self):
        """A lone "<" without a later ">" stays text."""
        assert tokenize("1 < 2") == [TextToken("1 "), TextToken("< 2")]

    def test_nameless_tags_are_text(self):
        """Tags with no name are demoted to their raw text."""
        assert tokenize("<>") == [TextToken("<>")]
        assert tokenize("a< >b") == [TextToken("a"), TextToken("< >"), TextToken("b")]
        assert tokenize("</>") == [CloseTagToken("")]

    def test_attributes(self):
        """Quoted, unquoted and bare attributes."""
        assert tokenize("<div class=container data-value='a b' disabled>") == [
            OpenTagToken(
                "div",
                {"class": "container", "data-value": "a b", "disabled": ""},
            )
        ]

    def test_duplicate_attribute_last_wins(self):
        """The last occurrence of a repeated attribute wins."""
        assert tokenize('<a href="1" href="2">') == [OpenTagToken("a", {"href": "2"})]

    def test_uppercase_names(self):
        """Tag and attribute names are lowercased."""
        assert tokenize("<DIV ID=Main></DIV>") == [
            OpenTagToken("div", {"id": "Main"}),
            CloseTagToken("div"),
        ]

    def test_void_elements_self_close(self):
        """Void elements are self-closing even without a slash."""
        assert tokenize('<br><img src="a.png"><hr/>') == [
            SelfCloseTagToken("br"),
            SelfCloseTagToken("img", {"src": "a.png"}),
            SelfCloseTagToken("hr"),
        ]

    def test_explicit_self_close(self):
        """A trailing slash marks any element self-closing."""
        assert tokenize('<div/><span class="a" />') == [
            SelfCloseTagToken("div"),
            SelfCloseTagToken("span", {"class": "a"}),
        ]

    @pytest.mark.parametrize("tag", ["script", "style", "title", "textarea"])
    def test_literal_text_elements(self, tag):
        """Content of literal-text elements is one verbatim text token."""
        source = f"<{tag}><b>x</b> & y</{tag}>"
        assert tokenize(source) == [
            OpenTagToken(tag),
            TextToken("<b>x</b> & y"),
            CloseTagToken(tag),
        ]

    def test_script_with_less_than(self):
        """Comparison operators inside scripts are not markup."""
        assert tokenize("<script>if (a < b) {}</script>") == [
            OpenTagToken("script"),
            TextToken("if (a < b) {}"),
            CloseTagToken("script"),
        ]

    def test_literal_text_closer_is_case_insensitive(self):
        """The closing tag search ignores case."""
        assert tokenize("<style>p{}</STYLE><p>") == [
            OpenTagToken("style"),
            TextToken("p{}"),
            CloseTagToken("style"),
            OpenTagToken("p"),
        ]

    def test_empty_literal_text_element(self):
        """No text token is emitted for empty or blank content."""
        assert tokenize("<script></script>") == [
            OpenTagToken("script"),
            CloseTagToken("script"),
        ]
        assert tokenize("<script> \n </script>") == [
            OpenTagToken("script"),
            CloseTagToken("script"),
        ]

    def test_unterminated_literal_text_falls_back(self):
        """Without a closing tag, content is tokenized as ordinary markup."""
        assert tokenize("<script>a <b>c") == [
            OpenTagToken("script"),
            TextToken("a "),
            OpenTagToken("b"),
            TextToken("c"),
        ]

    def test_self_closing_script_does_not_capture(self):
        """Only open tags start literal text capture."""
        assert tokenize("<script src=x /><p>y</p></script>") == [
            SelfCloseTagToken("script", {"src": "x"}),
            OpenTagToken("p"),
            TextToken("y"),
            CloseTagToken("p"),
            CloseTagToken("script"),
        ]

    def test_rejects_non_string(self):
        """Bytes input is a caller error."""
        with pytest.raises(TypeError, match="source must be str"):
            tokenize(b"<p>")  # type: ignore[arg-type]


class TestHTMLTokenizer:
    """Tests for the configured tokenizer and its result object."""

    def test_result_metadata(self):
        """Results report counts and type distribution."""
        result = HTMLTokenizer().tokenize("<!doctype html><p>a<br>b</p>")

        assert isinstance(result, TokenizationResult)
        assert result.token_count == 6
        assert result.character_count == 28
        assert result.processing_time_ms >= 0.0
        assert result.token_type_distribution == {
            "DOCTYPE": 1,
            "OPEN_TAG": 1,
            "TEXT": 2,
            "SELF_CLOSE_TAG": 1,
            "CLOSE_TAG": 1,
        }

    def test_well_formed_input_has_no_diagnostics(self):
        """Nothing is reported for clean markup."""
        result = HTMLTokenizer().tokenize("<p class='a'>x</p>")
        assert result.diagnostics == []

    def test_unterminated_comment_diagnostic(self):
        """Unterminated comments are reported as warnings."""
        result = HTMLTokenizer(correlation_id="req-1").tokenize("ab<!-- x")

        assert len(result.diagnostics) == 1
        diag = result.diagnostics[0]
        assert diag.severity is DiagnosticSeverity.WARNING
        assert diag.component == "html_tokenizer"
        assert diag.position == {"offset": 2}
        assert diag.correlation_id == "req-1"

    def test_unterminated_tag_diagnostic(self):
        """Unterminated tags report which construct was cut short."""
        result = HTMLTokenizer().tokenize("<p")
        assert result.diagnostics[0].details == {"construct": "tag"}

    def test_nameless_tag_diagnostic(self):
        """Demoted tags are reported at INFO level."""
        result = HTMLTokenizer().tokenize("<>")
        assert result.diagnostics[0].severity is DiagnosticSeverity.INFO
        assert result.diagnostics[0].details == {"raw": "<>"}

    def test_literal_text_fallback_diagnostic(self):
        """A missing raw-text closing tag is reported."""
        result = HTMLTokenizer().tokenize("<title>x")
        assert result.diagnostics[0].severity is DiagnosticSeverity.WARNING
        assert result.diagnostics[0].details == {"tag_name": "title"}

    def test_diagnostics_can_be_disabled(self):
        """Disabling diagnostics leaves tokens unchanged."""
        source = "<title>x<!-- y"
        quiet = HTMLTokenizer(TokenizerConfig(record_diagnostics=False)).tokenize(source)
        loud = HTMLTokenizer().tokenize(source)

        assert quiet.diagnostics == []
        assert loud.diagnostics
        assert quiet.tokens == loud.tokens

    def test_instance_is_reusable(self):
        """State does not leak between calls."""
        tokenizer = HTMLTokenizer()
        first = tokenizer.tokenize("<p>a</p><!--")
        second = tokenizer.tokenize("<p>a</p>")

        assert len(first.diagnostics) == 1
        assert second.diagnostics == []
        assert second.tokens == first.tokens[:3]

    def test_recoveries_logged_at_debug(self, caplog):
        """Recoveries are logged at DEBUG even when not recorded."""
        tokenizer = HTMLTokenizer(TokenizerConfig(record_diagnostics=False))
        with caplog.at_level(logging.DEBUG, logger="forgiving_html_parser"):
            tokenizer.tokenize("ab<!-- x")

        records = [
            record for record in caplog.records
            if record.getMessage().startswith("Unterminated comment")
        ]
        assert len(records) == 1
        assert records[0].offset == 2
        assert records[0].construct == "comment"
