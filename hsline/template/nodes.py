"""
AST-узлы Handlebars-шаблона.

Определяет иерархию неизменяемых узлов: текст, выражение, блок и
комментарий. Каждый тег хранит свои разделители и содержимое как есть,
чтобы нетронутые поддеревья выводились побайтно идентично исходнику.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .tokens import Token
from ..expressions.model import Expression


class BlockKind(enum.Enum):
    """Вид блока по его ключевому слову."""
    ITERATION = "iteration"                       # {{#each}}
    CONDITIONAL = "conditional"                   # {{#if}}
    NEGATED_CONDITIONAL = "negated_conditional"   # {{#unless}}
    COMMENT = "comment"                           # {{#comment}}
    OTHER = "other"                               # {{#with}}, пользовательские блоки, partial-блоки


_BLOCK_KINDS = {
    "each": BlockKind.ITERATION,
    "if": BlockKind.CONDITIONAL,
    "unless": BlockKind.NEGATED_CONDITIONAL,
    "comment": BlockKind.COMMENT,
}


def block_kind(keyword: str, sigil: str = "#") -> BlockKind:
    """Определяет вид блока; инвертированные секции {{^x}} всегда OTHER."""
    if sigil != "#":
        return BlockKind.OTHER
    return _BLOCK_KINDS.get(keyword, BlockKind.OTHER)


class CommentStyle(enum.Enum):
    """Синтаксис комментария."""
    LONG = "long"     # {{!-- ... --}}
    SHORT = "short"   # {{! ... }}
    BLOCK = "block"   # {{#comment}}...{{/comment}}


@dataclass(frozen=True)
class TagSpan:
    """
    Один тег в исходном тексте: разделители, содержимое и позиция.

    render() возвращает точный исходный текст тега.
    """
    open_delim: str
    body: str
    close_delim: str
    line: int = 0
    column: int = 0
    position: int = 0

    @classmethod
    def from_token(cls, token: Token) -> "TagSpan":
        return cls(
            open_delim=token.open_delim,
            body=token.body,
            close_delim=token.close_delim,
            line=token.line,
            column=token.column,
            position=token.position,
        )

    @property
    def content(self) -> str:
        """Содержимое тега без обрамляющих пробелов."""
        return self.body.strip()

    def render(self) -> str:
        return f"{self.open_delim}{self.body}{self.close_delim}"

    def with_content(self, content: str) -> "TagSpan":
        """Подменяет содержимое, сохраняя отступы внутри разделителей."""
        stripped = self.body.strip()
        if not stripped:
            return replace(self, body=self.body + content)
        lead = self.body[:len(self.body) - len(self.body.lstrip())]
        trail = self.body[len(self.body.rstrip()):]
        return replace(self, body=f"{lead}{content}{trail}")


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Представляет статический текст, который не требует обработки
    и выводится в результат как есть, включая пробелы и переводы строк.
    """
    text: str


@dataclass(frozen=True)
class ExpressionNode(TemplateNode):
    """
    Тег-выражение {{path}} или {{{path}}}.

    target: переписанное содержимое тега; None означает вывод как есть.
    """
    expression: Expression
    tag: TagSpan
    target: Optional[str] = None


@dataclass(frozen=True)
class BlockNode(TemplateNode):
    """
    Блок {{#keyword header}}...{{else}}...{{/keyword}}.

    Для {{#each}} expression содержит разобранный итерируемый путь, а alias
    хранит имя переменной из block params (as |alias|). Для условных блоков
    expression содержит разобранное условие.

    Блок, открытый маркером {{else if ...}}, помечен chained: его
    открывающим тегом служит сам маркер else, закрывающего тега нет.

    keyword/header после переписывания содержат целевой синтаксис,
    а rewritten=True указывает эмиттеру собирать теги заново.
    """
    keyword: str
    header: str
    tag: TagSpan
    close_tag: Optional[TagSpan]
    children: List[TemplateNode]
    else_children: Optional[List[TemplateNode]] = None
    else_tag: Optional[TagSpan] = None
    sigil: str = "#"
    expression: Optional[Expression] = None
    alias: Optional[str] = None
    block_params: Tuple[str, ...] = ()
    chained: bool = False
    rewritten: bool = False

    @property
    def kind(self) -> BlockKind:
        return block_kind(self.keyword, self.sigil)


@dataclass(frozen=True)
class CommentNode(TemplateNode):
    """
    Комментарий: {{!-- text --}}, {{! text }} или {{#comment}}text{{/comment}}.

    text: внутреннее содержимое без разделителей, копируется побайтно.
    """
    text: str
    style: CommentStyle
    open_delim: str
    close_delim: str
    line: int = 0
    column: int = 0


# Алиас для списка узлов (AST)
TemplateAST = List[TemplateNode]


def collect_text_content(ast: TemplateAST) -> str:
    """
    Собирает весь текстовый контент из AST (для тестирования и отладки).

    Args:
        ast: AST для обработки

    Returns:
        Объединенный текст всех TextNode в порядке документа
    """
    result_parts = []

    def collect_from_node(node: TemplateNode) -> None:
        if isinstance(node, TextNode):
            result_parts.append(node.text)
        elif isinstance(node, BlockNode):
            for child in node.children:
                collect_from_node(child)
            for child in node.else_children or []:
                collect_from_node(child)

    for node in ast:
        collect_from_node(node)

    return "".join(result_parts)


def format_ast_tree(ast: TemplateAST, indent: int = 0) -> str:
    """Форматирует AST как дерево для отладки."""
    lines = []
    prefix = "  " * indent

    for node in ast:
        if isinstance(node, TextNode):
            # Показываем только начало текста для читабельности
            text_preview = repr(node.text[:50] + "..." if len(node.text) > 50 else node.text)
            lines.append(f"{prefix}TextNode({text_preview})")
        elif isinstance(node, ExpressionNode):
            lines.append(f"{prefix}ExpressionNode('{node.expression.source.strip()}', {node.expression.kind.value})")
        elif isinstance(node, BlockNode):
            alias = f", alias='{node.alias}'" if node.alias else ""
            lines.append(f"{prefix}BlockNode({node.sigil}{node.keyword} '{node.header}'{alias})")
            if node.children:
                lines.append(f"{prefix}  body:")
                lines.append(format_ast_tree(node.children, indent + 2))
            if node.else_children is not None:
                lines.append(f"{prefix}  else:")
                lines.append(format_ast_tree(node.else_children, indent + 2))
        elif isinstance(node, CommentNode):
            comment_preview = repr(node.text[:30] + "..." if len(node.text) > 30 else node.text)
            lines.append(f"{prefix}CommentNode({node.style.value}, {comment_preview})")
        else:
            lines.append(f"{prefix}{type(node).__name__}")

    return "\n".join(lines)


__all__ = [
    "BlockKind",
    "block_kind",
    "CommentStyle",
    "TagSpan",
    "TemplateNode",
    "TemplateAST",
    "TextNode",
    "ExpressionNode",
    "BlockNode",
    "CommentNode",
    "collect_text_content",
    "format_ast_tree",
]
