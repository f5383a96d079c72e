"""
Разрешение областей видимости.

Стек фреймов, которые открываются блоками итерации, и переписывание
ссылок с квалификаторами this, ./ и ../ в явные пути целевого диалекта.
В Sline нет неявного текущего элемента и нет доступа к родительской
области, поэтому каждую такую ссылку нужно назвать явно либо
оставить как есть с диагностикой.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .diagnostics import Category, DiagnosticsCollector, SourceLocation
from .expressions.model import PathRef, Qualifier


@dataclass(frozen=True)
class ScopeFrame:
    """
    Один уровень вложенности, открытый блоком итерации.

    Родительский фрейм не хранится: отношения задает только порядок в стеке.
    """
    alias: Optional[str]
    iterable: str
    location: SourceLocation


class ScopeStack:
    """Стек фреймов; глубина равна текущей вложенности блоков итерации."""

    def __init__(self) -> None:
        self._frames: List[ScopeFrame] = []

    def push(self, frame: ScopeFrame) -> None:
        self._frames.append(frame)

    def pop(self) -> ScopeFrame:
        return self._frames.pop()

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def current(self) -> Optional[ScopeFrame]:
        return self._frames[-1] if self._frames else None

    def ancestor(self, levels: int) -> Optional[ScopeFrame]:
        """
        Фрейм на levels уровней выше текущего.

        Returns:
            Фрейм или None, если подъем доходит до корня документа
        """
        index = len(self._frames) - 1 - levels
        return self._frames[index] if index >= 0 else None

    def find(self, alias: str) -> Optional[ScopeFrame]:
        """Ближайший фрейм с данным именем переменной цикла."""
        for frame in reversed(self._frames):
            if frame.alias == alias:
                return frame
        return None


def _join(alias: str, tail: str) -> str:
    return f"{alias}.{tail}" if tail else alias


class ScopeResolver:
    """
    Переписывает ссылки на пути относительно текущего стека фреймов.

    Никогда не прерывает конвертацию: все, что нельзя выразить,
    остается как есть и сопровождается диагностикой.
    """

    def __init__(self, collector: DiagnosticsCollector, allow_parent_scope: bool = False):
        self.collector = collector
        self.allow_parent_scope = allow_parent_scope
        self.stack = ScopeStack()

    @contextmanager
    def scope(self, frame: ScopeFrame) -> Iterator[ScopeFrame]:
        """Открывает фрейм на время обхода тела блока итерации."""
        self.stack.push(frame)
        try:
            yield frame
        finally:
            self.stack.pop()

    def resolve(self, ref: PathRef, location: SourceLocation) -> str:
        """
        Возвращает текст ссылки в целевом диалекте.

        Args:
            ref: Ссылка на путь из выражения
            location: Позиция тега для диагностик

        Returns:
            Переписанная ссылка или исходный текст
        """
        if ref.qualifier == Qualifier.SELF:
            return self._resolve_self(ref, location)
        if ref.qualifier == Qualifier.PARENT:
            return self._resolve_parent(ref, location)
        return ref.raw

    def report_unresolved(self, ref: PathRef, location: SourceLocation) -> None:
        """
        Регистрирует квалифицированную ссылку, которую нельзя переписать.

        Используется для выражений с нераспознанным синтаксисом: текст
        остается как есть, но ссылка не должна пройти незамеченной.
        """
        if ref.qualifier == Qualifier.PARENT:
            message = f"Parent scope access '{ref.raw}' inside an unrecognized expression is left as is"
            if self.allow_parent_scope:
                self.collector.warning(Category.parent_scope_reference, message, location)
            else:
                self.collector.error(Category.parent_scope_reference, message, location)
        elif ref.qualifier == Qualifier.SELF:
            self.collector.warning(
                Category.unsupported_construct,
                f"'{ref.raw}' inside an unrecognized expression is left as is",
                location,
            )

    def _resolve_self(self, ref: PathRef, location: SourceLocation) -> str:
        frame = self.stack.current
        # this, this.x и голая точка называют переменную цикла; ./x просто теряет квалификатор
        if frame is not None and frame.alias and (ref.explicit_this or not ref.tail):
            return _join(frame.alias, ref.tail)

        if ref.tail:
            return ref.tail

        self.collector.warning(
            Category.unsupported_construct,
            f"'{ref.raw}' used outside of an iteration block; Sline has no implicit current item",
            location,
        )
        return ref.raw

    def _resolve_parent(self, ref: PathRef, location: SourceLocation) -> str:
        if not self.allow_parent_scope:
            self.collector.error(
                Category.parent_scope_reference,
                f"Parent scope access '{ref.raw}' is not supported in Sline",
                location,
            )
            return ref.raw

        self.collector.warning(
            Category.parent_scope_reference,
            f"Stripped {ref.depth} parent scope segment(s) (../) from '{ref.raw}'",
            location,
        )

        # Один фрейм вверх на каждый записанный ../
        target = self.stack.ancestor(ref.depth)
        if target is not None and target.alias:
            return _join(target.alias, ref.tail)
        if ref.tail:
            return ref.tail

        self.collector.warning(
            Category.unsupported_construct,
            f"'{ref.raw}' refers to the root context, which Sline cannot name",
            location,
        )
        return ref.raw


__all__ = ["ScopeFrame", "ScopeStack", "ScopeResolver"]
