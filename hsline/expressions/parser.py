"""
Парсер выражений в тегах.

Не вычисляет выражение и не строит дерево операторов: разбивает текст
на ссылки, литералы и операторы и определяет вид выражения.

Правила классификации (по значимым токенам, без пробелов):
- нет токенов                                → EMPTY
- есть нераспознанные символы                → OPAQUE
- первый токен '>'                           → PARTIAL
- есть '=' (hash-аргументы)                  → HELPER
- два операнда подряд или путь перед '('     → HELPER
- есть операторы или скобки                  → COMPOUND
- единственный путь / литерал                → PATH / LITERAL
"""

from __future__ import annotations

from typing import List

from .lexer import ExpressionLexer, ExprToken
from .model import Expression, ExpressionKind, ExpressionPart, PathRef

# Типы токенов, которые могут быть аргументом
_OPERANDS = {'PATH', 'STRING', 'NUMBER', 'LITERAL'}


class ExpressionParser:
    """
    Парсер содержимого тегов.

    Преобразует строку в Expression, сохраняя все исходные фрагменты,
    так что неизменённое выражение выводится побайтно так же.
    """

    def __init__(self):
        self.lexer = ExpressionLexer()

    def parse(self, text: str) -> Expression:
        """
        Парсит строку выражения.

        Args:
            text: Содержимое тега или заголовок блока

        Returns:
            Разобранное выражение (никогда не бросает исключений на плохом синтаксисе)
        """
        tokens = self.lexer.tokenize(text)
        kind = self._classify([t for t in tokens if t.type != 'WHITESPACE'])

        parts: List[ExpressionPart] = []
        for token in tokens:
            if token.type == 'PATH':
                parts.append(PathRef.parse(token.value))
            else:
                parts.append(token)

        return Expression(source=text, kind=kind, parts=tuple(parts))

    def _classify(self, significant: List[ExprToken]) -> ExpressionKind:
        """Определяет вид выражения по значимым токенам."""
        if not significant:
            return ExpressionKind.EMPTY

        if any(t.type == 'UNKNOWN' for t in significant):
            return ExpressionKind.OPAQUE

        first = significant[0]
        if first.type == 'OPERATOR' and first.value == '>':
            return ExpressionKind.PARTIAL

        if any(t.type == 'ASSIGN' for t in significant):
            return ExpressionKind.HELPER

        for current, following in zip(significant, significant[1:]):
            # helper arg, helper (subexpr), (a) b
            if current.type in _OPERANDS | {'RPAREN'} and following.type in _OPERANDS | {'LPAREN'}:
                return ExpressionKind.HELPER

        if len(significant) == 1:
            if first.type == 'PATH':
                return ExpressionKind.PATH
            if first.type in _OPERANDS:
                return ExpressionKind.LITERAL

        return ExpressionKind.COMPOUND


def parse_expression(text: str) -> Expression:
    """
    Удобная функция для разбора выражения.

    Args:
        text: Строка выражения

    Returns:
        Разобранное выражение
    """
    return ExpressionParser().parse(text)


__all__ = ["ExpressionParser", "parse_expression"]
