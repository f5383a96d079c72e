"""
Пакет для разбора выражений внутри тегов Handlebars.

Выделяет ссылки на пути с квалификаторами (this, ./, ../), литералы
и операторы; определяет вызовы хелперов и partial-теги.
"""

from .model import Expression, ExpressionKind, PathRef, Qualifier
from .parser import ExpressionParser, parse_expression

__all__ = [
    "Expression",
    "ExpressionKind",
    "PathRef",
    "Qualifier",
    "ExpressionParser",
    "parse_expression",
]
