"""Tokenization engine for forgiving HTML parsing.

Key Components:
    HTMLTokenizer: Configured tokenizer returning a TokenizationResult
    tokenize: Convenience function returning the bare token list
    Token: Union of the six token variants
    TokenType: Discriminator carried by every token variant
"""

from .tokenizer import (
    CloseTagToken,
    CommentToken,
    DoctypeToken,
    HTMLTokenizer,
    OpenTagToken,
    SelfCloseTagToken,
    TextToken,
    Token,
    TokenizationResult,
    TokenType,
    parse_tag_body,
    tokenize,
)

__all__ = [
    "CloseTagToken",
    "CommentToken",
    "DoctypeToken",
    "HTMLTokenizer",
    "OpenTagToken",
    "SelfCloseTagToken",
    "TextToken",
    "Token",
    "TokenizationResult",
    "TokenType",
    "parse_tag_body",
    "tokenize",
]
