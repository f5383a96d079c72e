"""
Вывод переписанного AST в текст Sline.

Нетронутые узлы выводятся из сохраненных исходных фрагментов, поэтому
текст вне переписанных тегов совпадает с исходником побайтно.
"""

from __future__ import annotations

from typing import List

from .template.nodes import (
    BlockNode, CommentNode, ExpressionNode, TemplateAST, TemplateNode, TextNode,
)


class SlineEmitter:
    """Сериализует дерево в текст в порядке документа."""

    def emit(self, ast: TemplateAST) -> str:
        out: List[str] = []
        self._emit_nodes(ast, out)
        return "".join(out)

    def _emit_nodes(self, nodes: List[TemplateNode], out: List[str]) -> None:
        for node in nodes:
            self._emit_node(node, out)

    def _emit_node(self, node: TemplateNode, out: List[str]) -> None:
        if isinstance(node, TextNode):
            out.append(node.text)
        elif isinstance(node, ExpressionNode):
            if node.target is not None:
                out.append(node.tag.with_content(node.target).render())
            else:
                out.append(node.tag.render())
        elif isinstance(node, CommentNode):
            out.append(f"{node.open_delim}{node.text}{node.close_delim}")
        elif isinstance(node, BlockNode):
            self._emit_block(node, out)
        else:
            raise TypeError(f"Unknown node type: {type(node).__name__}")

    def _emit_block(self, node: BlockNode, out: List[str]) -> None:
        out.append(self._open_tag(node))
        self._emit_nodes(node.children, out)

        if node.else_children is not None:
            # У блока цепочки else if маркер else хранится как открывающий тег
            if node.else_tag is not None:
                out.append(node.else_tag.render())
            self._emit_nodes(node.else_children, out)

        if node.close_tag is not None:
            if node.rewritten:
                out.append(node.close_tag.with_content(f"/{node.keyword}").render())
            else:
                out.append(node.close_tag.render())

    @staticmethod
    def _open_tag(node: BlockNode) -> str:
        if not node.rewritten:
            return node.tag.render()
        head = f"{node.keyword} {node.header}" if node.header else node.keyword
        if node.chained:
            return node.tag.with_content(f"else {head}").render()
        return node.tag.with_content(f"{node.sigil}{head}").render()


def emit(ast: TemplateAST) -> str:
    """Удобная функция для вывода дерева в текст."""
    return SlineEmitter().emit(ast)


__all__ = ["SlineEmitter", "emit"]
