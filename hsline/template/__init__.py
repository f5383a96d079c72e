"""
Разбор Handlebars-шаблонов: токены, лексер, AST и парсер блоков.
"""

from __future__ import annotations

from .lexer import HandlebarsLexer, tokenize_template
from .nodes import (
    BlockKind, BlockNode, CommentNode, CommentStyle, ExpressionNode, TagSpan,
    TemplateAST, TemplateNode, TextNode,
)
from .parser import TemplateParser, parse_template
from .tokens import Token, TokenType

__all__ = [
    "Token",
    "TokenType",
    "HandlebarsLexer",
    "tokenize_template",
    "BlockKind",
    "BlockNode",
    "CommentNode",
    "CommentStyle",
    "ExpressionNode",
    "TagSpan",
    "TemplateAST",
    "TemplateNode",
    "TextNode",
    "TemplateParser",
    "parse_template",
]
