"""
Точка входа конвертации Handlebars -> Sline.

Последовательно запускает лексер, парсер, переписывание и вывод.
Структурные ошибки шаблона пробрасываются как исключения без частичного
результата; все остальное возвращается как диагностики.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from .diagnostics import (
    ConversionStatus, Diagnostic, DiagnosticsCollector, Severity, count_by_severity,
)
from .emitter import emit
from .report import ConversionReport, build_report
from .rewrite import RewriteEngine
from .template.lexer import HandlebarsLexer
from .template.nodes import format_ast_tree
from .template.parser import TemplateParser
from .types import ConvertOptions

_LOG = logging.getLogger("hsline.engine")


def _setup_logging_once() -> None:
    if getattr(_setup_logging_once, "_inited", False):
        return
    _setup_logging_once._inited = True  # type: ignore[attr-defined]
    if not os.environ.get("HSLINE_DEBUG"):
        return
    root = logging.getLogger("hsline")
    root.setLevel(logging.DEBUG)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(h)


_setup_logging_once()


@dataclass(frozen=True)
class ConversionResult:
    """Результат конвертации одного документа."""
    text: str
    diagnostics: Tuple[Diagnostic, ...]
    status: ConversionStatus

    @property
    def blocked(self) -> bool:
        return self.status == ConversionStatus.blocked

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.error for d in self.diagnostics)

    def summary(self) -> Dict[str, int]:
        return count_by_severity(self.diagnostics)

    def to_report(self) -> ConversionReport:
        return build_report(self)


def convert(source_text: str, options: Optional[ConvertOptions] = None) -> ConversionResult:
    """
    Конвертирует текст Handlebars-шаблона в Sline.

    Args:
        source_text: Исходный шаблон
        options: Настройки конвертации; None означает значения по умолчанию

    Returns:
        Текст результата, диагностики и итоговый статус

    Raises:
        TemplateStructureError: Шаблон структурно некорректен
    """
    options = options or ConvertOptions()

    tokens = HandlebarsLexer(source_text).tokenize()
    _LOG.debug("Tokenized %d chars into %d tokens", len(source_text), len(tokens))

    ast = TemplateParser(tokens).parse()
    if _LOG.isEnabledFor(logging.DEBUG):
        _LOG.debug("Parsed tree:\n%s", format_ast_tree(ast))

    collector = DiagnosticsCollector()
    rewritten = RewriteEngine(options, collector).rewrite(ast)
    text = emit(rewritten)

    status = collector.status(options.strict)
    _LOG.debug("Conversion finished: status=%s, diagnostics=%s", status.value, collector.summary())
    return ConversionResult(text=text, diagnostics=collector.diagnostics, status=status)


def convert_file(path: Path, options: Optional[ConvertOptions] = None) -> ConversionResult:
    """Читает шаблон в UTF-8 и конвертирует его; запись результата остается за вызывающим."""
    _LOG.debug("Converting %s", path)
    return convert(Path(path).read_text(encoding="utf-8"), options)


__all__ = ["ConversionResult", "convert", "convert_file"]
