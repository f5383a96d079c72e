"""
Base exception for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from HSLUserError.

Programming errors and bugs should NOT inherit from HSLUserError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import List, Optional, Tuple


class HSLUserError(Exception):
    """
    Base class for all user-facing errors in handlesline.

    These errors indicate problems that the user can fix:
    malformed templates, invalid configuration files, etc.
    """
    pass


class ConfigError(HSLUserError):
    """Ошибка загрузки или валидации настроек конвертации."""
    pass


class TemplateStructureError(HSLUserError):
    """
    Фатальная структурная ошибка шаблона.

    Шаблон некорректен, конвертация документа прерывается целиком,
    частичный вывод не формируется.
    """

    def __init__(self, message: str, line: int, column: int, position: int):
        super().__init__(f"{message} at {line}:{column}")
        self.message = message
        self.line = line
        self.column = column
        self.position = position


class UnterminatedTagError(TemplateStructureError):
    """Открывающий маркер тега без закрывающего до конца текста."""
    pass


class UnbalancedBlockError(TemplateStructureError):
    """
    Закрывающий тег не соответствует самому внутреннему открытому блоку.

    open_keyword равен None, если открытых блоков нет вовсе.
    """

    def __init__(
        self,
        close_keyword: str,
        close_line: int,
        close_column: int,
        close_position: int,
        open_keyword: Optional[str] = None,
        open_line: int = 0,
        open_column: int = 0,
    ):
        if open_keyword is None:
            message = f"Unexpected closing tag '/{close_keyword}' with no open block"
        else:
            message = (
                f"Closing tag '/{close_keyword}' does not match block '#{open_keyword}' "
                f"opened at {open_line}:{open_column}"
            )
        super().__init__(message, close_line, close_column, close_position)
        self.close_keyword = close_keyword
        self.open_keyword = open_keyword
        self.open_line = open_line
        self.open_column = open_column


class UnclosedBlockError(TemplateStructureError):
    """
    Конец текста при непустом стеке открытых блоков.

    blocks: список (keyword, line, column, position) для каждого незакрытого блока,
    от внешнего к внутреннему.
    """

    def __init__(self, blocks: List[Tuple[str, int, int, int]]):
        described = ", ".join(f"'#{kw}' opened at {line}:{col}" for kw, line, col, _ in blocks)
        _, line, column, position = blocks[-1]
        super().__init__(f"Unclosed block(s): {described}", line, column, position)
        self.blocks = blocks
        self.keywords = [kw for kw, _, _, _ in blocks]


class MisplacedElseError(TemplateStructureError):
    """Маркер else вне блока или повторный else в одном блоке."""
    pass


__all__ = [
    "HSLUserError",
    "ConfigError",
    "TemplateStructureError",
    "UnterminatedTagError",
    "UnbalancedBlockError",
    "UnclosedBlockError",
    "MisplacedElseError",
]
