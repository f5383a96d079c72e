"""
Tests for diagnostics formatting and the JSON conversion report.
"""

from hsline import ConvertOptions, convert
from hsline.diagnostics import (
    Category, ConversionStatus, Diagnostic, DiagnosticsCollector, Severity, SourceLocation,
)
from hsline.report import ConversionReport, tool_version


class TestDiagnostics:

    def test_format(self):
        diag = Diagnostic(
            Severity.warning, Category.unmapped_helper, "Helper call 'x y' is left as is",
            SourceLocation(3, 7, 20),
        )

        assert diag.format() == "warning: Helper call 'x y' is left as is at 3:7"

    def test_collector_counts(self):
        collector = DiagnosticsCollector()
        collector.warning(Category.unsupported_construct, "a", SourceLocation(1, 1))
        collector.error(Category.parent_scope_reference, "b", SourceLocation(2, 1))

        assert len(collector) == 2
        assert collector.has_errors()
        assert collector.summary() == {"warning": 1, "error": 1}
        assert collector.by_category() == {
            "unsupported-construct": 1,
            "parent-scope-reference": 1,
            "unmapped-helper": 0,
        }

    def test_status(self):
        collector = DiagnosticsCollector()
        assert collector.status(strict=True) == ConversionStatus.clean

        collector.warning(Category.unsupported_construct, "a", SourceLocation(1, 1))
        assert collector.status(strict=False) == ConversionStatus.warnings_only
        assert collector.status(strict=True) == ConversionStatus.blocked


class TestConversionReport:

    def test_report_json(self):
        result = convert("Total: {{formatMoney price}}\n{{../x}}")

        report = result.to_report()
        data = report.model_dump(mode="json")

        assert isinstance(report, ConversionReport)
        assert data["tool_version"] == tool_version()
        assert data["status"] == "warnings-only"
        assert data["counts"] == {"warning": 1, "error": 1}
        assert data["categories"]["unmapped-helper"] == 1
        assert data["categories"]["parent-scope-reference"] == 1
        assert data["diagnostics"][0] == {
            "severity": "warning",
            "category": "unmapped-helper",
            "message": "Helper call 'formatMoney price' has no Sline mapping and is left as is",
            "line": 1,
            "column": 8,
        }
        assert data["diagnostics"][1]["severity"] == "error"
        assert data["diagnostics"][1]["line"] == 2

    def test_clean_report(self):
        data = convert("{{title}}", ConvertOptions(strict=True)).to_report().model_dump(mode="json")

        assert data["status"] == "clean"
        assert data["diagnostics"] == []
