"""
Диагностика конвертации.

Диагностики являются значениями, а не исключениями: они накапливаются в
коллекторе по ходу обхода дерева и никогда не прерывают конвертацию.
Решение о блокировке результата принимает вызывающий код (strict).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Tuple


class Severity(str, Enum):
    warning = "warning"
    error = "error"


class Category(str, Enum):
    unsupported_construct = "unsupported-construct"
    parent_scope_reference = "parent-scope-reference"
    unmapped_helper = "unmapped-helper"


class ConversionStatus(str, Enum):
    clean = "clean"
    warnings_only = "warnings-only"
    blocked = "blocked"


@dataclass(frozen=True)
class SourceLocation:
    """Позиция в исходном шаблоне (строки и колонки с 1)."""
    line: int
    column: int
    position: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    category: Category
    message: str
    location: SourceLocation

    def format(self) -> str:
        """Однострочное человекочитаемое представление: 'warning: ... at 3:7'."""
        return f"{self.severity.value}: {self.message} at {self.location}"


def count_by_severity(diagnostics: Iterable[Diagnostic]) -> Dict[str, int]:
    """Количество диагностик по уровням: {'warning': n, 'error': m}."""
    counts = {severity.value: 0 for severity in Severity}
    for d in diagnostics:
        counts[d.severity.value] += 1
    return counts


def count_by_category(diagnostics: Iterable[Diagnostic]) -> Dict[str, int]:
    counts = {category.value: 0 for category in Category}
    for d in diagnostics:
        counts[d.category.value] += 1
    return counts


class DiagnosticsCollector:
    """
    Накопитель диагностик одного прогона конвертации.

    Только добавление; созданные диагностики не изменяются.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> Diagnostic:
        self._items.append(diagnostic)
        return diagnostic

    def warning(self, category: Category, message: str, location: SourceLocation) -> Diagnostic:
        return self.add(Diagnostic(Severity.warning, category, message, location))

    def error(self, category: Category, message: str, location: SourceLocation) -> Diagnostic:
        return self.add(Diagnostic(Severity.error, category, message, location))

    @property
    def diagnostics(self) -> Tuple[Diagnostic, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def has_errors(self) -> bool:
        return any(d.severity == Severity.error for d in self._items)

    def summary(self) -> Dict[str, int]:
        return count_by_severity(self._items)

    def by_category(self) -> Dict[str, int]:
        return count_by_category(self._items)

    def status(self, strict: bool) -> ConversionStatus:
        """
        Итоговый статус конвертации.

        Любая диагностика (независимо от уровня) в strict-режиме блокирует
        результат; без strict только понижает статус до warnings-only.
        """
        if not self._items:
            return ConversionStatus.clean
        if strict:
            return ConversionStatus.blocked
        return ConversionStatus.warnings_only


__all__ = [
    "Severity",
    "Category",
    "ConversionStatus",
    "SourceLocation",
    "Diagnostic",
    "DiagnosticsCollector",
    "count_by_severity",
    "count_by_category",
]
