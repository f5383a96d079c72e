"""
Tests for scope resolution of this, ./ and ../ references.
"""

import pytest

from hsline.diagnostics import Category, DiagnosticsCollector, Severity, SourceLocation
from hsline.expressions import PathRef
from hsline.scope import ScopeFrame, ScopeResolver, ScopeStack

LOC = SourceLocation(1, 1, 0)


def _frame(alias):
    return ScopeFrame(alias=alias, iterable=f"{alias}s", location=LOC)


class TestScopeStack:

    def test_empty_stack(self):
        stack = ScopeStack()

        assert stack.depth == 0
        assert stack.current is None
        assert stack.ancestor(1) is None

    def test_ancestor_walks_up(self):
        stack = ScopeStack()
        stack.push(_frame("shop"))
        stack.push(_frame("product"))

        assert stack.current.alias == "product"
        assert stack.ancestor(0).alias == "product"
        assert stack.ancestor(1).alias == "shop"
        assert stack.ancestor(2) is None
        assert stack.find("shop").iterable == "shops"
        assert stack.find("missing") is None


class TestScopeResolver:

    def setup_method(self):
        self.collector = DiagnosticsCollector()
        self.resolver = ScopeResolver(self.collector)

    def resolve(self, raw):
        return self.resolver.resolve(PathRef.parse(raw), LOC)

    def test_unqualified_is_unchanged(self):
        with self.resolver.scope(_frame("product")):
            assert self.resolve("title") == "title"
        assert len(self.collector) == 0

    def test_this_inside_frame_uses_alias(self):
        with self.resolver.scope(_frame("product")):
            assert self.resolve("this.title") == "product.title"
            assert self.resolve("this") == "product"
            assert self.resolve(".") == "product"
        assert len(self.collector) == 0

    def test_this_outside_frame_is_dropped(self):
        assert self.resolve("this.title") == "title"
        assert len(self.collector) == 0

    def test_dot_slash_is_stripped_everywhere(self):
        assert self.resolve("./price") == "price"
        with self.resolver.scope(_frame("product")):
            assert self.resolve("./price") == "price"
        assert len(self.collector) == 0

    def test_bare_this_outside_frame_warns(self):
        assert self.resolve("this") == "this"

        (diag,) = self.collector.diagnostics
        assert diag.severity == Severity.warning
        assert diag.category == Category.unsupported_construct

    def test_frame_is_popped_after_scope(self):
        with pytest.raises(RuntimeError):
            with self.resolver.scope(_frame("product")):
                raise RuntimeError("boom")

        assert self.resolver.stack.depth == 0

    def test_parent_reference_rejected_by_default(self):
        with self.resolver.scope(_frame("product")):
            assert self.resolve("../x") == "../x"

        (diag,) = self.collector.diagnostics
        assert diag.severity == Severity.error
        assert diag.category == Category.parent_scope_reference
        assert "'../x'" in diag.message


class TestParentScopeAllowed:

    def setup_method(self):
        self.collector = DiagnosticsCollector()
        self.resolver = ScopeResolver(self.collector, allow_parent_scope=True)

    def resolve(self, raw):
        return self.resolver.resolve(PathRef.parse(raw), LOC)

    def test_top_level_parent_is_stripped(self):
        assert self.resolve("../x") == "x"

        (diag,) = self.collector.diagnostics
        assert diag.severity == Severity.warning
        assert diag.category == Category.parent_scope_reference

    def test_one_frame_per_qualifier(self):
        with self.resolver.scope(_frame("shop")):
            with self.resolver.scope(_frame("product")):
                assert self.resolve("../name") == "shop.name"
                assert self.resolve("../../name") == "name"
                assert self.resolve("..") == "shop"

        assert all(d.category == Category.parent_scope_reference for d in self.collector.diagnostics)
        assert "Stripped 2 parent scope" in self.collector.diagnostics[1].message

    def test_bare_parent_at_root_warns(self):
        assert self.resolve("..") == ".."

        categories = [d.category for d in self.collector.diagnostics]
        assert categories == [Category.parent_scope_reference, Category.unsupported_construct]


class TestUnresolvedReferences:

    def setup_method(self):
        self.collector = DiagnosticsCollector()

    def test_qualified_references_are_reported(self):
        resolver = ScopeResolver(self.collector)
        for raw in ("../x", "this.y", "./z", "plain"):
            resolver.report_unresolved(PathRef.parse(raw), LOC)

        assert [(d.severity, d.category) for d in self.collector.diagnostics] == [
            (Severity.error, Category.parent_scope_reference),
            (Severity.warning, Category.unsupported_construct),
            (Severity.warning, Category.unsupported_construct),
        ]

    def test_parent_reference_is_warning_when_allowed(self):
        resolver = ScopeResolver(self.collector, allow_parent_scope=True)
        resolver.report_unresolved(PathRef.parse("../x"), LOC)

        (diag,) = self.collector.diagnostics
        assert diag.severity == Severity.warning
