"""
Парсер Handlebars-шаблонов.

Преобразует последовательность токенов в AST с явным стеком открытых
блоков: сопоставляет открывающие и закрывающие теги, обрабатывает ветки
else (включая цепочки {{else if}}) и блоки-комментарии.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .lexer import HandlebarsLexer
from .nodes import (
    BlockKind, BlockNode, CommentNode, CommentStyle, ExpressionNode, TagSpan,
    TemplateAST, TemplateNode, TextNode, block_kind,
)
from .tokens import Token, TokenType
from ..errors import MisplacedElseError, UnbalancedBlockError, UnclosedBlockError
from ..expressions.parser import ExpressionParser


# Заголовок {{#each items as |item index|}}
_EACH_HEADER_PATTERN = re.compile(
    r'^(?P<iterable>.*?)\s+as\s+\|\s*(?P<params>[^|]*?)\s*\|\s*$',
    re.DOTALL,
)


@dataclass
class _OpenBlock:
    """Открытый блок на стеке парсера."""
    tag: TagSpan
    keyword: str
    header: str
    sigil: str
    children: List[TemplateNode] = field(default_factory=list)
    else_children: Optional[List[TemplateNode]] = None
    else_tag: Optional[TagSpan] = None
    # Неявный блок, открытый маркером {{else if ...}}
    chained: bool = False

    @property
    def insertion(self) -> List[TemplateNode]:
        """Текущая точка вставки: тело блока или ветка else."""
        return self.else_children if self.else_children is not None else self.children


class TemplateParser:
    """
    Парсер для Handlebars-шаблонов.

    Обрабатывает последовательность токенов и строит AST, корректно
    обрабатывая вложенные блоки и проверяя их сбалансированность.
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.expression_parser = ExpressionParser()
        self._stack: List[_OpenBlock] = []
        self._ast: TemplateAST = []

    def parse(self) -> TemplateAST:
        """
        Парсит всю последовательность токенов в AST.

        Returns:
            Список корневых узлов AST

        Raises:
            UnbalancedBlockError: Закрывающий тег не соответствует открытому блоку
            UnclosedBlockError: Блоки не закрыты к концу текста
            MisplacedElseError: else вне блока или повторный else
        """
        self._stack = []
        self._ast = []

        for token in self.tokens:
            if token.type == TokenType.TEXT:
                self._insertion().append(TextNode(text=token.value))
            elif token.type == TokenType.EXPRESSION:
                self._insertion().append(self._parse_expression(token))
            elif token.type == TokenType.COMMENT:
                self._insertion().append(self._parse_comment(token))
            elif token.type == TokenType.BLOCK_OPEN:
                self._open_block(token)
            elif token.type == TokenType.ELSE:
                self._parse_else(token)
            elif token.type == TokenType.BLOCK_CLOSE:
                self._close_block(token)
            else:
                raise ValueError(f"Unknown token type: {token.type}")

        if self._stack:
            raise UnclosedBlockError([
                (open_block.keyword, open_block.tag.line, open_block.tag.column, open_block.tag.position)
                for open_block in self._stack
                if not open_block.chained
            ])

        return self._ast

    def _insertion(self) -> List[TemplateNode]:
        return self._stack[-1].insertion if self._stack else self._ast

    # ---- Листовые узлы ----

    def _parse_expression(self, token: Token) -> ExpressionNode:
        tag = TagSpan.from_token(token)
        return ExpressionNode(expression=self.expression_parser.parse(tag.content), tag=tag)

    def _parse_comment(self, token: Token) -> CommentNode:
        style = CommentStyle.LONG if token.open_delim.endswith("!--") else CommentStyle.SHORT
        return CommentNode(
            text=token.body,
            style=style,
            open_delim=token.open_delim,
            close_delim=token.close_delim,
            line=token.line,
            column=token.column,
        )

    # ---- Блоки ----

    def _open_block(self, token: Token) -> None:
        tag = TagSpan.from_token(token)
        content = tag.content
        sigil = content[0]
        self._stack.append(_OpenBlock(
            tag=tag,
            keyword=token.keyword,
            header=self._split_header(content[1:]),
            sigil=sigil,
        ))

    @staticmethod
    def _split_header(rest: str) -> str:
        """Отделяет имя блока (и декоратор > или *) от заголовка."""
        rest = rest.lstrip()
        if rest[:1] in (">", "*"):
            rest = rest[1:].lstrip()
        parts = rest.split(None, 1)
        return parts[1].strip() if len(parts) > 1 else ""

    def _parse_else(self, token: Token) -> None:
        tag = TagSpan.from_token(token)
        if not self._stack:
            raise MisplacedElseError(
                "'else' outside of any block", token.line, token.column, token.position
            )

        current = self._stack[-1]
        if current.else_children is not None:
            raise MisplacedElseError(
                f"Duplicate 'else' in block '#{current.keyword}' opened at "
                f"{current.tag.line}:{current.tag.column}",
                token.line, token.column, token.position,
            )

        content = tag.content
        chained_rest = content[4:].strip() if content.startswith("else") else ""
        current.else_children = []

        if not chained_rest:
            current.else_tag = tag
            return

        # {{else if cond}} открывает неявный вложенный блок в ветке else
        keyword = chained_rest.split(None, 1)[0]
        self._stack.append(_OpenBlock(
            tag=tag,
            keyword=keyword,
            header=self._split_header(chained_rest),
            sigil="#",
            chained=True,
        ))

    def _close_block(self, token: Token) -> None:
        close_tag = TagSpan.from_token(token)

        # Неявные блоки цепочки else if закрываются тегом исходного блока
        while self._stack and self._stack[-1].chained:
            chained = self._stack.pop()
            self._stack[-1].else_children.append(self._build_block(chained, None))

        if not self._stack:
            raise UnbalancedBlockError(
                token.keyword, token.line, token.column, token.position,
            )

        current = self._stack[-1]
        if current.keyword != token.keyword:
            raise UnbalancedBlockError(
                token.keyword, token.line, token.column, token.position,
                open_keyword=current.keyword,
                open_line=current.tag.line,
                open_column=current.tag.column,
            )

        self._stack.pop()
        self._insertion().append(self._build_block(current, close_tag))

    def _build_block(self, open_block: _OpenBlock, close_tag: Optional[TagSpan]) -> TemplateNode:
        """Создает узел блока из открытого блока на стеке."""
        kind = block_kind(open_block.keyword, open_block.sigil)

        if kind == BlockKind.COMMENT and close_tag is not None:
            # Лексер гарантирует, что внутри только текст
            inner = "".join(
                child.text for child in open_block.children if isinstance(child, TextNode)
            )
            return CommentNode(
                text=inner,
                style=CommentStyle.BLOCK,
                open_delim=open_block.tag.render(),
                close_delim=close_tag.render(),
                line=open_block.tag.line,
                column=open_block.tag.column,
            )

        expression = None
        alias = None
        block_params: Tuple[str, ...] = ()
        if kind == BlockKind.ITERATION:
            iterable, block_params = self._split_block_params(open_block.header)
            expression = self.expression_parser.parse(iterable)
            alias = block_params[0] if block_params else None
        elif kind in (BlockKind.CONDITIONAL, BlockKind.NEGATED_CONDITIONAL):
            expression = self.expression_parser.parse(open_block.header)

        return BlockNode(
            keyword=open_block.keyword,
            header=open_block.header,
            tag=open_block.tag,
            close_tag=close_tag,
            children=open_block.children,
            else_children=open_block.else_children,
            else_tag=open_block.else_tag,
            sigil=open_block.sigil,
            expression=expression,
            alias=alias,
            block_params=block_params,
            chained=open_block.chained,
        )

    @staticmethod
    def _split_block_params(header: str) -> Tuple[str, Tuple[str, ...]]:
        """
        Разбирает заголовок итерации на итерируемое выражение и block params.

        Returns:
            Кортеж (итерируемое выражение, имена параметров)
        """
        match = _EACH_HEADER_PATTERN.match(header)
        if not match:
            return header.strip(), ()
        params = tuple(match.group("params").split())
        return match.group("iterable").strip(), params


def parse_template(text: str) -> TemplateAST:
    """
    Удобная функция для парсинга Handlebars-шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        AST шаблона

    Raises:
        TemplateStructureError: При структурной ошибке шаблона
    """
    tokens = HandlebarsLexer(text).tokenize()
    return TemplateParser(tokens).parse()


__all__ = [
    "TemplateParser",
    "parse_template",
]
