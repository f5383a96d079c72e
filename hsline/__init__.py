"""
handlesline: конвертер шаблонов Handlebars в Sline.
"""

from __future__ import annotations

from .config import find_config, load_options
from .diagnostics import Category, ConversionStatus, Diagnostic, Severity, SourceLocation
from .engine import ConversionResult, convert, convert_file
from .errors import (
    ConfigError, HSLUserError, MisplacedElseError, TemplateStructureError,
    UnbalancedBlockError, UnclosedBlockError, UnterminatedTagError,
)
from .types import ConvertOptions

__all__ = [
    "convert",
    "convert_file",
    "ConvertOptions",
    "ConversionResult",
    "ConversionStatus",
    "Diagnostic",
    "Severity",
    "Category",
    "SourceLocation",
    "find_config",
    "load_options",
    "HSLUserError",
    "ConfigError",
    "TemplateStructureError",
    "UnterminatedTagError",
    "UnbalancedBlockError",
    "UnclosedBlockError",
    "MisplacedElseError",
]
