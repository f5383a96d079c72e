"""
Лексические типы.

Определяет типы токенов Handlebars-шаблона и токен с позиционной
информацией.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    # Текстовый контент вне тегов (включая пробелы и переводы строк)
    TEXT = "TEXT"

    # {{#keyword ...}} и {{^keyword}}
    BLOCK_OPEN = "BLOCK_OPEN"
    # {{/keyword}}
    BLOCK_CLOSE = "BLOCK_CLOSE"
    # {{else}}, {{else if ...}}, {{^}}
    ELSE = "ELSE"

    # {{expr}} и {{{expr}}}
    EXPRESSION = "EXPRESSION"
    # {{!-- ... --}} и {{! ... }}
    COMMENT = "COMMENT"


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.

    value всегда равен точному фрагменту исходного текста, поэтому
    конкатенация value всех токенов восстанавливает вход побайтно.
    Для тегов дополнительно хранятся разделители и содержимое.
    """
    type: TokenType
    value: str
    position: int        # Позиция в исходном тексте
    line: int           # Номер строки (начиная с 1)
    column: int         # Номер колонки (начиная с 1)
    open_delim: str = ""   # "{{", "{{~", "{{{", "{{!--", ...
    body: str = ""         # Содержимое между разделителями
    close_delim: str = ""  # "}}", "~}}", "}}}", "--}}", ...
    keyword: str = ""      # Имя блока для BLOCK_OPEN/BLOCK_CLOSE

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["TokenType", "Token"]
