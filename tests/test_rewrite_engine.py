"""
Tests for the rewrite engine: block mapping, reference rewriting and diagnostics.
"""

from hsline.diagnostics import Category, DiagnosticsCollector, Severity
from hsline.rewrite import RewriteEngine
from hsline.template.nodes import BlockNode, CommentNode, CommentStyle, ExpressionNode
from hsline.template.parser import parse_template
from hsline.types import ConvertOptions


class TestRewriteEngine:

    def setup_method(self):
        self.collector = DiagnosticsCollector()
        self.engine = RewriteEngine(ConvertOptions(), self.collector)

    def rewrite(self, source):
        return self.engine.rewrite(parse_template(source))

    def categories(self):
        return [d.category for d in self.collector.diagnostics]

    def test_each_becomes_for(self):
        (block,) = self.rewrite("{{#each products as |product|}}{{this.title}}{{/each}}")

        assert block.keyword == "for"
        assert block.header == "product in products"
        assert block.rewritten
        expr = block.children[0]
        assert isinstance(expr, ExpressionNode)
        assert expr.target == "product.title"
        assert len(self.collector) == 0

    def test_each_default_alias(self):
        (block,) = self.rewrite("{{#each items}}{{this}}{{/each}}")

        assert block.header == "item in items"
        assert block.children[0].target == "item"

    def test_custom_default_alias(self):
        engine = RewriteEngine(ConvertOptions(default_alias="entry"), self.collector)
        (block,) = engine.rewrite(parse_template("{{#each items}}{{this.name}}{{/each}}"))

        assert block.header == "entry in items"
        assert block.children[0].target == "entry.name"

    def test_iterable_resolved_in_enclosing_scope(self):
        (outer,) = self.rewrite(
            "{{#each shops as |shop|}}{{#each this.products as |p|}}{{/each}}{{/each}}"
        )

        assert outer.children[0].header == "p in shop.products"

    def test_extra_block_params_warn(self):
        (block,) = self.rewrite("{{#each items as |item i|}}{{/each}}")

        assert block.header == "item in items"
        assert self.categories() == [Category.unsupported_construct]
        assert "'i'" in self.collector.diagnostics[0].message

    def test_each_else_branch_warns(self):
        (block,) = self.rewrite("{{#each items}}x{{else}}{{this.y}}{{/each}}")

        assert self.categories() == [Category.unsupported_construct]
        # Ветка else вне фрейма цикла
        assert block.else_children[0].target == "y"

    def test_shadowed_alias_warns(self):
        self.rewrite("{{#each a}}{{#each b}}{{/each}}{{/each}}")

        assert self.categories() == [Category.unsupported_construct]
        message = self.collector.diagnostics[0].message
        assert "shadows" in message
        assert "'a' at 1:1" in message

    def test_unless_becomes_negated_if(self):
        (block,) = self.rewrite("{{#unless items.size > 0}}Empty{{/unless}}")

        assert block.keyword == "if"
        assert block.header == "!(items.size > 0)"
        assert block.rewritten

    def test_unchanged_if_is_not_rewritten(self):
        (block,) = self.rewrite("{{#if a}}x{{/if}}")

        assert not block.rewritten
        assert block.header == "a"

    def test_if_condition_references_rewritten(self):
        (loop,) = self.rewrite("{{#each items as |i|}}{{#if this.on}}x{{/if}}{{/each}}")

        cond = loop.children[0]
        assert cond.rewritten
        assert cond.header == "i.on"

    def test_caret_else_becomes_else(self):
        (block,) = self.rewrite("{{#if a}}x{{^}}y{{/if}}")

        assert block.else_tag.render() == "{{else}}"

    def test_comment_block_becomes_long_comment(self):
        (comment,) = self.rewrite("{{#comment}} hidden {{/comment}}")

        assert isinstance(comment, CommentNode)
        assert comment.style == CommentStyle.LONG
        assert comment.text == " hidden "
        assert (comment.open_delim, comment.close_delim) == ("{{!--", "--}}")

    def test_opaque_expression_reports_parent_reference(self):
        (node,) = self.rewrite("{{../total * 2}}")

        assert node.target is None
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.parent_scope_reference
        assert diag.severity == Severity.error
        assert "'../total'" in diag.message

    def test_opaque_expression_parent_reference_allowed(self):
        engine = RewriteEngine(ConvertOptions(allow_parent_scope=True), self.collector)
        (node,) = engine.rewrite(parse_template("{{../total * 2}}"))

        assert node.target is None
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.parent_scope_reference
        assert diag.severity == Severity.warning

    def test_opaque_expression_reports_this_reference(self):
        (loop,) = self.rewrite("{{#each xs as |x|}}{{this.price * 2}}{{/each}}")

        assert loop.children[0].target is None
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.unsupported_construct
        assert diag.severity == Severity.warning
        assert "'this.price'" in diag.message

    def test_opaque_condition_reports_references(self):
        (block,) = self.rewrite("{{#if ../a * 2}}x{{/if}}")

        assert not block.rewritten
        assert block.header == "../a * 2"
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.parent_scope_reference
        assert diag.severity == Severity.error

    def test_opaque_expression_without_qualifiers_is_silent(self):
        self.rewrite("{{price * 2}}")

        assert len(self.collector) == 0

    def test_comment_block_with_long_comment_close_is_kept(self):
        (comment,) = self.rewrite("{{#comment}}a --}} b{{/comment}}")

        assert comment.style == CommentStyle.BLOCK
        assert comment.open_delim == "{{#comment}}"
        assert comment.close_delim == "{{/comment}}"
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.unsupported_construct
        assert (diag.location.line, diag.location.column) == (1, 1)

    def test_helper_call_passes_through(self):
        (node,) = self.rewrite("{{formatMoney this.price}}")

        assert node.target is None
        (diag,) = self.collector.diagnostics
        assert diag.category == Category.unmapped_helper
        assert diag.severity == Severity.warning

    def test_helper_condition_passes_through(self):
        (block,) = self.rewrite("{{#if (eq a b)}}x{{/if}}")

        assert not block.rewritten
        assert self.categories() == [Category.unmapped_helper]

    def test_partial_passes_through(self):
        self.rewrite("{{> header}}")

        assert self.categories() == [Category.unsupported_construct]

    def test_unsupported_block_children_are_rewritten(self):
        (block,) = self.rewrite("{{#with shop}}{{./name}}{{/with}}")

        assert isinstance(block, BlockNode)
        assert not block.rewritten
        assert block.children[0].target == "name"
        assert self.categories() == [Category.unsupported_construct]

    def test_diagnostic_location_points_to_tag(self):
        self.rewrite("line one\n  {{helper x}}")

        location = self.collector.diagnostics[0].location
        assert (location.line, location.column) == (2, 3)

    def test_source_tree_is_not_mutated(self):
        ast = parse_template("{{#each items}}{{this}}{{/each}}")
        self.engine.rewrite(ast)

        assert ast[0].keyword == "each"
        assert ast[0].children[0].target is None
