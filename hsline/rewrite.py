"""
Переписывание AST Handlebars в конструкции Sline.

Обходит дерево в порядке документа, строит новое дерево с переписанными
узлами и собирает диагностики. Исходное дерево не изменяется; узлы,
которые переписывать не нужно, переиспользуются как есть.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional

from .diagnostics import Category, DiagnosticsCollector, SourceLocation
from .expressions.model import Expression, ExpressionKind
from .scope import ScopeFrame, ScopeResolver
from .template.nodes import (
    BlockKind, BlockNode, CommentNode, CommentStyle, ExpressionNode, TagSpan,
    TemplateAST, TemplateNode, TextNode,
)
from .types import ConvertOptions

_LOG = logging.getLogger("hsline.rewrite")

_LONG_COMMENT_OPEN = "{{!--"
_LONG_COMMENT_CLOSE = "--}}"


def _location(tag: TagSpan) -> SourceLocation:
    return SourceLocation(tag.line, tag.column, tag.position)


class RewriteEngine:
    """
    Переписывает узлы шаблона по правилам соответствия конструкций.

    Один экземпляр обслуживает один прогон конвертации: стек областей
    видимости и коллектор диагностик живут ровно столько же.
    """

    def __init__(self, options: ConvertOptions, collector: DiagnosticsCollector):
        self.options = options
        self.collector = collector
        self.resolver = ScopeResolver(collector, allow_parent_scope=options.allow_parent_scope)

    def rewrite(self, ast: TemplateAST) -> TemplateAST:
        """
        Переписывает весь шаблон.

        Args:
            ast: Дерево разобранного шаблона

        Returns:
            Новое дерево в целевом синтаксисе
        """
        return self._rewrite_nodes(ast)

    def _rewrite_nodes(self, nodes: List[TemplateNode]) -> List[TemplateNode]:
        return [self._rewrite_node(node) for node in nodes]

    def _rewrite_node(self, node: TemplateNode) -> TemplateNode:
        if isinstance(node, TextNode):
            return node
        if isinstance(node, ExpressionNode):
            return self._rewrite_expression(node)
        if isinstance(node, CommentNode):
            return self._rewrite_comment(node)
        if isinstance(node, BlockNode):
            kind = node.kind
            if kind == BlockKind.ITERATION:
                return self._rewrite_iteration(node)
            if kind == BlockKind.CONDITIONAL:
                return self._rewrite_conditional(node)
            if kind == BlockKind.NEGATED_CONDITIONAL:
                return self._rewrite_negated(node)
            return self._rewrite_other(node)
        raise TypeError(f"Unknown node type: {type(node).__name__}")

    # ---- Листовые узлы ----

    def _rewrite_expression(self, node: ExpressionNode) -> ExpressionNode:
        expression = node.expression
        location = _location(node.tag)

        if expression.kind == ExpressionKind.HELPER:
            self.collector.warning(
                Category.unmapped_helper,
                f"Helper call '{expression.source}' has no Sline mapping and is left as is",
                location,
            )
            return node
        if expression.kind == ExpressionKind.PARTIAL:
            self.collector.warning(
                Category.unsupported_construct,
                f"Partial '{expression.source}' is not converted",
                location,
            )
            return node

        target = self._resolve(expression, location)
        if target == expression.source:
            return node
        _LOG.debug("Expression at %s: %r -> %r", location, expression.source, target)
        return replace(node, target=target)

    def _rewrite_comment(self, node: CommentNode) -> CommentNode:
        if node.style != CommentStyle.BLOCK:
            return node
        if _LONG_COMMENT_CLOSE in node.text:
            # Такой текст закрыл бы длинный комментарий раньше времени
            self.collector.warning(
                Category.unsupported_construct,
                f"Comment block contains '{_LONG_COMMENT_CLOSE}' and is left as is",
                SourceLocation(node.line, node.column),
            )
            return node
        return replace(
            node,
            style=CommentStyle.LONG,
            open_delim=_LONG_COMMENT_OPEN,
            close_delim=_LONG_COMMENT_CLOSE,
        )

    # ---- Блоки ----

    def _rewrite_iteration(self, node: BlockNode) -> BlockNode:
        location = _location(node.tag)
        # Итерируемое выражение принадлежит внешней области видимости
        iterable = self._condition(node.expression, location)
        alias = node.alias or self.options.default_alias

        if len(node.block_params) > 1:
            extra = ", ".join(node.block_params[1:])
            self.collector.warning(
                Category.unsupported_construct,
                f"Block params '{extra}' of '#each' are not supported and were dropped",
                location,
            )
        shadowed = self.resolver.stack.find(alias)
        if shadowed is not None:
            self.collector.warning(
                Category.unsupported_construct,
                f"Loop variable '{alias}' shadows the variable of the loop over "
                f"'{shadowed.iterable}' at {shadowed.location}",
                location,
            )

        frame = ScopeFrame(alias=alias, iterable=iterable, location=location)
        with self.resolver.scope(frame):
            children = self._rewrite_nodes(node.children)

        else_children = None
        if node.else_children is not None:
            self.collector.warning(
                Category.unsupported_construct,
                "'else' branch of '#each' has no Sline equivalent and is left as is",
                _location(node.else_tag) if node.else_tag is not None else location,
            )
            # Ветка else выполняется во внешнем контексте
            else_children = self._rewrite_nodes(node.else_children)

        return replace(
            node,
            keyword="for",
            header=f"{alias} in {iterable}",
            children=children,
            else_children=else_children,
            else_tag=self._rewrite_else_tag(node.else_tag),
            rewritten=True,
        )

    def _rewrite_conditional(self, node: BlockNode) -> BlockNode:
        location = _location(node.tag)
        condition = self._condition(node.expression, location)
        children = self._rewrite_nodes(node.children)
        else_children = self._rewrite_optional(node.else_children)

        changed = node.expression is not None and condition != node.expression.source
        return replace(
            node,
            header=condition,
            children=children,
            else_children=else_children,
            else_tag=self._rewrite_else_tag(node.else_tag),
            rewritten=changed,
        )

    def _rewrite_negated(self, node: BlockNode) -> BlockNode:
        location = _location(node.tag)
        condition = self._condition(node.expression, location)
        return replace(
            node,
            keyword="if",
            header=f"!({condition})",
            children=self._rewrite_nodes(node.children),
            else_children=self._rewrite_optional(node.else_children),
            else_tag=self._rewrite_else_tag(node.else_tag),
            rewritten=True,
        )

    def _rewrite_other(self, node: BlockNode) -> BlockNode:
        location = _location(node.tag)
        self.collector.warning(
            Category.unsupported_construct,
            f"Block '{node.sigil}{node.keyword}' has no Sline equivalent and is left as is",
            location,
        )
        # Сам блок не трогаем, но содержимое переписываем
        return replace(
            node,
            children=self._rewrite_nodes(node.children),
            else_children=self._rewrite_optional(node.else_children),
        )

    def _rewrite_optional(self, nodes: Optional[List[TemplateNode]]) -> Optional[List[TemplateNode]]:
        return None if nodes is None else self._rewrite_nodes(nodes)

    @staticmethod
    def _rewrite_else_tag(tag: Optional[TagSpan]) -> Optional[TagSpan]:
        # {{^}} это синоним {{else}}
        if tag is not None and tag.content == "^":
            return tag.with_content("else")
        return tag

    # ---- Выражения ----

    def _condition(self, expression: Optional[Expression], location: SourceLocation) -> str:
        """Текст условия или итерируемого выражения в целевом синтаксисе."""
        if expression is None:
            return ""
        if expression.kind == ExpressionKind.HELPER:
            self.collector.warning(
                Category.unmapped_helper,
                f"Helper call '{expression.source}' in block header has no Sline mapping and is left as is",
                location,
            )
            return expression.source
        if expression.kind == ExpressionKind.EMPTY:
            self.collector.warning(
                Category.unsupported_construct,
                "Block header is empty",
                location,
            )
            return expression.source
        return self._resolve(expression, location)

    def _resolve(self, expression: Expression, location: SourceLocation) -> str:
        if expression.kind == ExpressionKind.OPAQUE:
            # Нераспознанный синтаксис не переписываем, но квалификаторы обязаны попасть в диагностику
            for ref in expression.references():
                self.resolver.report_unresolved(ref, location)
            return expression.source
        if not any(ref.is_qualified() for ref in expression.references()):
            return expression.source
        return expression.render(lambda ref: self.resolver.resolve(ref, location))


__all__ = ["RewriteEngine"]
