"""Node tree for compiled .hah documents.

The tree is owned top-down through ``children``; ``parent`` is a plain
back-reference used for ancestor lookup and never for ownership.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class NodeKind(Enum):
    TAG = "tag"
    VARIABLE = "variable"
    CODE_BLOCK = "code_block"
    RAW = "raw"
    SUB_DOCUMENT = "sub_document"
    DOCUMENT = "document"


AttributeKey = str | int


@dataclass(eq=False)
class Node:
    """Base node.

    ``name`` is the tag name, expression source or import path depending on the
    kind; ``value`` is literal text (tag content, raw text, code statement).
    """

    kind: ClassVar[NodeKind]

    name: str | None = None
    value: str = ""
    level: int = 0
    attributes: dict[AttributeKey, Any] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    parent: "Node | None" = field(default=None, repr=False)
    sibling_index: int | None = None

    def add_child(self, child: "Node") -> None:
        child.parent = self
        child.sibling_index = len(self.children)
        self.children.append(child)

    def set(self, *args: Any) -> None:
        """``set(name, value)`` sets a keyed attribute, ``set(value)`` appends a positional one."""
        if len(args) == 1:
            self.attributes[self._next_index()] = args[0]
        elif len(args) == 2:
            self.attributes[args[0]] = args[1]
        else:
            raise TypeError(f"set() takes 1 or 2 arguments ({len(args)} given)")

    def get(self, name: AttributeKey, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def _next_index(self) -> int:
        indexes = [k for k in self.attributes if isinstance(k, int)]
        return max(indexes) + 1 if indexes else 0

    def top(self) -> "Node":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def find_closest_level(self, level: int) -> "Node":
        """Nearest ancestor-or-self whose level is below ``level`` (or the root)."""
        node = self
        while node.parent is not None and node.level >= level:
            node = node.parent
        return node

    def sibling(self, offset: int) -> "Node | None":
        if self.parent is None or self.sibling_index is None:
            return None
        index = self.sibling_index + offset
        if not 0 <= index < len(self.parent.children):
            return None
        return self.parent.children[index]

    def has_children(self) -> bool:
        return bool(self.children)

    def is_singular(self) -> bool:
        """No children, or exactly one child that is itself singular."""
        return not self.children or (len(self.children) == 1 and self.children[0].is_singular())

    def walk(self):
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(eq=False)
class Tag(Node):
    kind: ClassVar[NodeKind] = NodeKind.TAG


@dataclass(eq=False)
class VariableExpression(Node):
    """An echoed host expression.

    ``attributes`` is the filter chain, applied in insertion order (the first
    filter is the innermost call). ``no_empty_attribute`` names the attribute to
    render only when the expression is non-empty.
    """

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    no_empty_attribute: str | None = None

    @property
    def filters(self) -> list[tuple[str, Any]]:
        return list(self.attributes.items())


@dataclass(eq=False)
class CodeBlock(Node):
    kind: ClassVar[NodeKind] = NodeKind.CODE_BLOCK

    leave_block_open: bool = False


@dataclass(eq=False)
class Raw(Node):
    kind: ClassVar[NodeKind] = NodeKind.RAW


@dataclass(eq=False)
class SubDocument(Node):
    kind: ClassVar[NodeKind] = NodeKind.SUB_DOCUMENT


def attach(cursor: Node, node: Node, level: int) -> Node:
    """Attach ``node`` under the closest ancestor of ``cursor`` shallower than ``level``.

    Returns the attached node, which becomes the new cursor.
    """
    parent = cursor.find_closest_level(level)
    parent.add_child(node)
    node.level = level
    return node
