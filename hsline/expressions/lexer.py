"""
Лексер для разбора выражений внутри тегов.

Выполняет токенизацию содержимого тега, разбивая его на значимые элементы:
- Пути (title, this.title, ./price, ../shop.name, items.[0], @index)
- Литералы (строки, числа, true/false/null/undefined)
- Операторы сравнения и логики (==, !=, >, <, >=, <=, &&, ||, !)
- Скобки и знак '=' для hash-аргументов хелперов
- Пробелы (сохраняются, чтобы выражение восстанавливалось побайтно)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class ExprToken:
    """
    Токен выражения.

    Attributes:
        type: Тип токена (PATH, STRING, NUMBER, LITERAL, OPERATOR, LPAREN,
              RPAREN, ASSIGN, WHITESPACE, UNKNOWN)
        value: Значение токена (точный фрагмент исходной строки)
        position: Позиция в исходной строке
    """
    type: str
    value: str
    position: int

    def __repr__(self):
        return f"ExprToken({self.type}, '{self.value}', pos={self.position})"


# Сегмент пути: идентификатор, @data-переменная, [literal segment] или индекс
_SEGMENT = r'(?:[A-Za-z_$@][\w$\-]*|\[[^\]]*\]|\d+)'


class ExpressionLexer:
    """
    Лексер для разбиения содержимого тега на токены.

    В отличие от лексера условий, пробелы не отбрасываются: из токенов
    выражение собирается обратно без потерь.
    """

    # Спецификация токенов: (regex_pattern, token_type)
    TOKEN_SPECS = [
        (r'\s+', 'WHITESPACE'),

        # Строковые литералы в одинарных и двойных кавычках
        (r'"(?:[^"\\]|\\.)*"', 'STRING'),
        (r"'(?:[^'\\]|\\.)*'", 'STRING'),

        # Числа (проверяем перед путями)
        (r'-?\d+(?:\.\d+)?(?![\w$])', 'NUMBER'),

        # Операторы: длинные формы раньше коротких
        (r'===|!==|==|!=|>=|<=|&&|\|\||>|<|!', 'OPERATOR'),

        (r'\(', 'LPAREN'),
        (r'\)', 'RPAREN'),
        (r'=', 'ASSIGN'),

        # Пути: ../../x, ./x, this.x, a.b.c, a/b, items.[0], .., .
        (
            rf'(?:\.\./)*(?:\./)?{_SEGMENT}(?:[./]{_SEGMENT})*'
            r'|(?:\.\./)*\.\.(?![\w$./\[])'
            r'|\.(?![\w$./\[])',
            'PATH',
        ),

        # Неизвестный символ делает выражение непрозрачным
        (r'.', 'UNKNOWN'),
    ]

    # Ключевые слова-литералы для постпроцессинга путей
    LITERALS = {'true', 'false', 'null', 'undefined'}

    def __init__(self):
        # Компилируем регулярные выражения для лучшей производительности
        self._compiled_patterns = [
            (re.compile(pattern, re.DOTALL), token_type)
            for pattern, token_type in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str) -> List[ExprToken]:
        """
        Разбивает строку на токены.

        Args:
            text: Содержимое тега (без разделителей)

        Returns:
            Список токенов; конкатенация их значений равна text
        """
        tokens: List[ExprToken] = []
        position = 0

        while position < len(text):
            for pattern, token_type in self._compiled_patterns:
                match = pattern.match(text, position)
                if match and match.end() > position:
                    value = match.group(0)
                    final_type = token_type
                    if token_type == 'PATH' and value in self.LITERALS:
                        final_type = 'LITERAL'
                    tokens.append(ExprToken(type=final_type, value=value, position=position))
                    position = match.end()
                    break
            else:
                # Это не должно происходить, так как у нас есть паттерн для любого символа
                raise ValueError(f"Failed to tokenize at position {position}")

        return tokens


__all__ = ["ExprToken", "ExpressionLexer"]
