"""
Модели данных для выражений в тегах.

Содержит ссылки на пути (с квалификаторами области видимости) и
разобранное выражение, которое умеет собираться обратно в текст
с подменой отдельных путей.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Tuple, Union

from .lexer import ExprToken


# Устаревший разделитель a/b вне [literal] сегментов
_SLASH_SEPARATOR = re.compile(r"/(?![^\[]*\])")


class Qualifier(Enum):
    """Квалификатор ссылки на путь."""
    NONE = "none"      # title, product.title
    SELF = "self"      # this, this.title, ./title
    PARENT = "parent"  # ../title, ../../title


class ExpressionKind(Enum):
    """Типы выражений в тегах."""
    EMPTY = "empty"
    PATH = "path"            # одиночная ссылка
    LITERAL = "literal"      # одиночный литерал
    COMPOUND = "compound"    # ссылки и литералы, связанные операторами
    HELPER = "helper"        # вызов хелпера: путь с аргументами
    PARTIAL = "partial"      # {{> name}}
    OPAQUE = "opaque"        # нераспознанный синтаксис


@dataclass(frozen=True)
class PathRef:
    """
    Ссылка на путь внутри выражения.

    Квалификатор всегда один: смешанная запись вида ../this.x
    нормализуется к PARENT с хвостом x.
    """
    raw: str
    qualifier: Qualifier = Qualifier.NONE
    depth: int = 0               # Количество ../
    explicit_this: bool = False  # Ссылка записана через this
    tail: str = ""               # Путь после квалификаторов, "" для голого this/..

    @classmethod
    def parse(cls, raw: str) -> "PathRef":
        """Разбирает текст пути на квалификатор и хвост."""
        rest = raw
        depth = 0
        while rest.startswith("../"):
            depth += 1
            rest = rest[3:]
        if rest == "..":
            depth += 1
            rest = ""

        self_qualified = False
        explicit_this = False
        if rest.startswith("./"):
            self_qualified = True
            rest = rest[2:]
        elif rest == ".":
            self_qualified = True
            rest = ""
        elif rest == "this":
            self_qualified = explicit_this = True
            rest = ""
        elif rest.startswith("this.") or rest.startswith("this/"):
            self_qualified = explicit_this = True
            rest = rest[5:]

        if depth:
            qualifier = Qualifier.PARENT
        elif self_qualified:
            qualifier = Qualifier.SELF
        else:
            qualifier = Qualifier.NONE

        return cls(
            raw=raw,
            qualifier=qualifier,
            depth=depth,
            explicit_this=explicit_this,
            tail=_SLASH_SEPARATOR.sub(".", rest),
        )

    def is_qualified(self) -> bool:
        return self.qualifier != Qualifier.NONE


# Элемент выражения: либо ссылка на путь, либо любой другой токен
ExpressionPart = Union[PathRef, ExprToken]


@dataclass(frozen=True)
class Expression:
    """
    Разобранное содержимое тега.

    parts в сумме дают исходный текст; render() собирает их обратно,
    позволяя подменить каждую ссылку на путь.
    """
    source: str
    kind: ExpressionKind
    parts: Tuple[ExpressionPart, ...] = ()

    def references(self) -> Iterator[PathRef]:
        """Перебирает все ссылки на пути в порядке появления."""
        for part in self.parts:
            if isinstance(part, PathRef):
                yield part

    def is_resolvable(self) -> bool:
        """Можно ли переписывать ссылки в выражении."""
        return self.kind in (ExpressionKind.PATH, ExpressionKind.LITERAL, ExpressionKind.COMPOUND)

    def render(self, resolve: Optional[Callable[[PathRef], str]] = None) -> str:
        """
        Собирает выражение в текст.

        Args:
            resolve: Функция подмены ссылок; без нее выражение выводится как есть

        Returns:
            Текст выражения
        """
        if resolve is None or not self.is_resolvable():
            return self.source
        pieces = []
        for part in self.parts:
            if isinstance(part, PathRef):
                pieces.append(resolve(part))
            else:
                pieces.append(part.value)
        return "".join(pieces)

    def __str__(self) -> str:
        return self.source


__all__ = [
    "Qualifier",
    "ExpressionKind",
    "PathRef",
    "ExpressionPart",
    "Expression",
]
