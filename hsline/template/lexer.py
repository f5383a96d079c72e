"""
Лексический анализатор Handlebars-шаблонов.

Разбивает исходный текст на последовательность токенов: текстовые фрагменты,
открывающие и закрывающие теги блоков, маркеры else, комментарии и
теги-выражения. Токены покрывают весь вход без пропусков и наложений.
"""

from __future__ import annotations

import re
from typing import List

from .tokens import Token, TokenType
from ..errors import UnterminatedTagError


# Имя блока, содержимое которого не токенизируется
COMMENT_BLOCK_KEYWORD = "comment"


class HandlebarsLexer:
    """
    Лексер шаблонов Handlebars.

    Распознает следующие конструкции:
    - {{#keyword header}}, {{^keyword}}, {{#> partial}}, {{#*inline "x"}}
    - {{/keyword}}
    - {{else}}, {{else if cond}}, {{^}}
    - {{!-- comment --}}, {{! comment }}
    - {{#comment}}...{{/comment}} (содержимое забирается как есть)
    - {{expr}}, {{{expr}}}
    Маркеры управления пробелами ~ считаются частью разделителей.
    """

    _OPEN = "{{"

    # Порядок важен: тройные скобки и длинные комментарии проверяются первыми
    _TRIPLE_PATTERN = re.compile(r'\{\{\{(~?)(.*?)(~?)\}\}\}', re.DOTALL)
    _LONG_COMMENT_PATTERN = re.compile(r'\{\{(~?)!--(.*?)--(~?)\}\}', re.DOTALL)
    _SHORT_COMMENT_PATTERN = re.compile(r'\{\{(~?)!(.*?)(~?)\}\}', re.DOTALL)
    _TAG_PATTERN = re.compile(r'\{\{(~?)(.*?)(~?)\}\}', re.DOTALL)

    _COMMENT_BLOCK_CLOSE_PATTERN = re.compile(
        r'\{\{~?\s*/\s*' + COMMENT_BLOCK_KEYWORD + r'\s*~?\}\}'
    )
    _ELSE_PATTERN = re.compile(r'^(?:else(?:\s|$)|\^$)')

    def __init__(self, text: str):
        self.text = text
        self.length = len(text)
        self.position = 0
        self.line = 1
        self.column = 1
        self._tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Raises:
            UnterminatedTagError: Если открывающий маркер не закрыт до конца текста
        """
        self.position = 0
        self.line = 1
        self.column = 1
        self._tokens = []

        while self.position < self.length:
            tag_start = self.text.find(self._OPEN, self.position)
            if tag_start == -1:
                self._emit_text(self.length)
                break

            if tag_start > self.position:
                self._emit_text(tag_start)

            token = self._read_tag()
            if token.type == TokenType.BLOCK_OPEN and token.keyword == COMMENT_BLOCK_KEYWORD:
                self._read_comment_block_body()

        return self._tokens

    # ---- Чтение тегов ----

    def _read_tag(self) -> Token:
        """Читает один тег, начинающийся в текущей позиции."""
        text = self.text
        pos = self.position

        match = self._TRIPLE_PATTERN.match(text, pos)
        if match:
            return self._emit_tag(
                TokenType.EXPRESSION, match,
                open_delim="{{{" + match.group(1),
                close_delim=match.group(3) + "}}}",
            )

        match = self._LONG_COMMENT_PATTERN.match(text, pos)
        if match:
            return self._emit_tag(
                TokenType.COMMENT, match,
                open_delim="{{" + match.group(1) + "!--",
                close_delim="--" + match.group(3) + "}}",
            )

        if text.startswith("{{{", pos):
            raise self._unterminated("Unterminated triple-stash tag")

        if self._looks_like_long_comment(pos):
            # {{!-- без закрывающего --}} не должен проглатываться как короткий комментарий
            raise self._unterminated("Unterminated comment tag")

        match = self._SHORT_COMMENT_PATTERN.match(text, pos)
        if match:
            return self._emit_tag(
                TokenType.COMMENT, match,
                open_delim="{{" + match.group(1) + "!",
                close_delim=match.group(3) + "}}",
            )

        match = self._TAG_PATTERN.match(text, pos)
        # Вложенный "{{" означает, что текущий тег так и не был закрыт
        if not match or "{{" in match.group(2):
            raise self._unterminated("Unterminated tag")

        body = match.group(2)
        token_type, keyword = self._classify(body)
        return self._emit_tag(
            token_type, match,
            open_delim="{{" + match.group(1),
            close_delim=match.group(3) + "}}",
            keyword=keyword,
        )

    def _looks_like_long_comment(self, pos: int) -> bool:
        head = self.text[pos + 2:pos + 6]
        return head.startswith("!--") or head.startswith("~!--")

    def _classify(self, body: str) -> tuple[TokenType, str]:
        """
        Определяет тип тега по его содержимому.

        Returns:
            Кортеж (тип токена, имя блока или пустая строка)
        """
        stripped = body.strip()

        if self._ELSE_PATTERN.match(stripped):
            return TokenType.ELSE, ""

        if stripped.startswith("#") or stripped.startswith("^"):
            rest = stripped[1:].lstrip()
            # Partial-блоки {{#> layout}} и декораторы {{#*inline}}
            if rest[:1] in (">", "*"):
                rest = rest[1:].lstrip()
            keyword = rest.split(None, 1)[0] if rest else ""
            return TokenType.BLOCK_OPEN, keyword

        if stripped.startswith("/"):
            return TokenType.BLOCK_CLOSE, stripped[1:].strip()

        return TokenType.EXPRESSION, ""

    def _read_comment_block_body(self) -> None:
        """
        Забирает содержимое {{#comment}}...{{/comment}} без токенизации.

        Если закрывающий тег не найден, остаток текста становится TEXT,
        а незакрытый блок обнаруживает парсер.
        """
        close = self._COMMENT_BLOCK_CLOSE_PATTERN.search(self.text, self.position)
        if close is None:
            self._emit_text(self.length)
            return

        if close.start() > self.position:
            self._emit_text(close.start())

        match = self._TAG_PATTERN.match(self.text, close.start())
        self._emit_tag(
            TokenType.BLOCK_CLOSE, match,
            open_delim="{{" + match.group(1),
            close_delim=match.group(3) + "}}",
            keyword=COMMENT_BLOCK_KEYWORD,
        )

    # ---- Формирование токенов ----

    def _emit_text(self, end: int) -> None:
        value = self.text[self.position:end]
        if not value:
            return
        self._tokens.append(Token(TokenType.TEXT, value, self.position, self.line, self.column))
        self._advance(value)

    def _emit_tag(
        self,
        token_type: TokenType,
        match: re.Match,
        open_delim: str,
        close_delim: str,
        keyword: str = "",
    ) -> Token:
        value = match.group(0)
        token = Token(
            type=token_type,
            value=value,
            position=self.position,
            line=self.line,
            column=self.column,
            open_delim=open_delim,
            body=value[len(open_delim):len(value) - len(close_delim)],
            close_delim=close_delim,
            keyword=keyword,
        )
        self._tokens.append(token)
        self._advance(value)
        return token

    def _advance(self, value: str) -> None:
        """
        Перемещает позицию на длину фрагмента,
        обновляя номера строк и колонок.
        """
        self.position += len(value)
        newlines = value.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(value) - value.rfind("\n")
        else:
            self.column += len(value)

    def _unterminated(self, message: str) -> UnterminatedTagError:
        return UnterminatedTagError(message, self.line, self.column, self.position)


def tokenize_template(text: str) -> List[Token]:
    """
    Удобная функция для токенизации Handlebars-шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов

    Raises:
        UnterminatedTagError: Если тег не закрыт до конца текста
    """
    return HandlebarsLexer(text).tokenize()


__all__ = [
    "COMMENT_BLOCK_KEYWORD",
    "HandlebarsLexer",
    "tokenize_template",
]
