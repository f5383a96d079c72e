"""
JSON-отчет о конвертации.

Pydantic-модели для машинно-читаемого вывода результата; сериализуются
через model_dump(mode="json").
"""

from __future__ import annotations

from importlib import metadata
from typing import TYPE_CHECKING, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .diagnostics import (
    Category, ConversionStatus, Diagnostic, Severity, count_by_category, count_by_severity,
)

if TYPE_CHECKING:
    from .engine import ConversionResult


def tool_version() -> str:
    """Версия установленного дистрибутива; 0.0.0 при запуске из исходников."""
    try:
        return metadata.version("handlesline")
    except metadata.PackageNotFoundError:
        return "0.0.0"


class DiagnosticEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    severity: Severity
    category: Category
    message: str
    line: int = Field(..., ge=1)
    column: int = Field(..., ge=1)

    @classmethod
    def from_diagnostic(cls, diagnostic: Diagnostic) -> "DiagnosticEntry":
        return cls(
            severity=diagnostic.severity,
            category=diagnostic.category,
            message=diagnostic.message,
            line=diagnostic.location.line,
            column=diagnostic.location.column,
        )


class ConversionReport(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tool_version: str
    status: ConversionStatus
    counts: Dict[str, int] = Field(default_factory=dict, description="Diagnostics by severity")
    categories: Dict[str, int] = Field(default_factory=dict, description="Diagnostics by category")
    diagnostics: List[DiagnosticEntry] = Field(default_factory=list)


def build_report(result: "ConversionResult") -> ConversionReport:
    """Собирает отчет по результату конвертации."""
    return ConversionReport(
        tool_version=tool_version(),
        status=result.status,
        counts=count_by_severity(result.diagnostics),
        categories=count_by_category(result.diagnostics),
        diagnostics=[DiagnosticEntry.from_diagnostic(d) for d in result.diagnostics],
    )


__all__ = ["DiagnosticEntry", "ConversionReport", "build_report", "tool_version"]
