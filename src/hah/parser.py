"""Line parser for .hah documents.

Each line is classified by its leading token and built into nodes that are
attached to the tree by indentation depth:

    //      comment, dropped
    !path   import (.js, .css, images, .php/.html include, sub-document)
    - stmt  code statement or block
    ? cond  if block
    : cond  elseif block (else when empty), chained to the previous block
    <...    raw markup; opens passthrough until the closing tag
    @name   attribute on the current node
    $expr   echoed expression
    .c #i   div shorthand
    name    tag
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from .ast import CodeBlock, Node, Raw, SubDocument, Tag, VariableExpression, attach
from .grammar import eat, parse_attribute_list, parse_filter_token
from .passthrough import Passthrough

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

LINE = re.compile(r"^([\s\t]*)(:|\?|!|//|-|@|\.|#|\$|<|[a-z0-9_][a-z0-9_\-]*)")
COMMENT = "//"

SHORTHAND = re.compile(r"^(#|\.)([a-z0-9_\-]+)", re.IGNORECASE)
INLINE_NEST = re.compile(r"^,([a-z0-9_\-]+)", re.IGNORECASE)
ASSIGNMENT = re.compile(r"^(=)?(\S*)\s+(.*)$")
ATTRIBUTE_LINE = re.compile(r"^([^\s=]+)(=)?(\S*)\s+(.+)")
SPLIT_ARGS = re.compile(r"^([^(]*)(.*)$")
RAW_NAME = re.compile(r"^([a-z0-9_\-?!]+)", re.IGNORECASE)
CONTINUATION = re.compile(r"^\s*else(?:if)?\b", re.IGNORECASE)

SCRIPT_FILE = re.compile(r"\.js$", re.IGNORECASE)
STYLE_FILE = re.compile(r"\.css$", re.IGNORECASE)
IMAGE_FILE = re.compile(r"\.(jpg|png|jpeg|gif)$", re.IGNORECASE)
INCLUDE_FILE = re.compile(r"\.(php|html?)$", re.IGNORECASE)

HTML4_STRICT = '!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01//EN" "http://www.w3.org/TR/html4/strict.dtd">\n'
HTML4_LOOSE = (
    '!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01 Transitional//EN" "http://www.w3.org/TR/html4/loose.dtd">\n'
)
XHTML_STRICT = (
    '!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
    '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">\n'
)

# Raw names that expand to a fixed declaration instead of opening passthrough
DECLARATIONS = {
    "?xml": "?php echo '<?xml version=\"1.0\" encoding=\"UTF-8\" ?>'; ?>\n",
    "!html": "!DOCTYPE HTML>\n",
    "!html5": "!DOCTYPE HTML>\n",
    "!html4strict": HTML4_STRICT,
    "!html4": HTML4_LOOSE,
    "!html4transitional": HTML4_LOOSE,
    "!xhtmlstrict": XHTML_STRICT,
    "!xhtml": XHTML_STRICT,
    "!xhtmltransitional": XHTML_STRICT,
}
PHP_OPEN = "?php"
PHP_CLOSE = "?>"


class ParseError(Exception):
    def __init__(self, msg: str, line: int, text: str = ""):
        super().__init__(f"line {line}: {msg}")
        self.line = line
        self.text = text


class DanglingContinuationError(ParseError):
    """An else/elseif line with no preceding block to continue."""


class Parser:
    """Builds a Document's node tree from its source lines."""

    def __init__(self, document: "Document"):
        self.document = document
        self.config = document.config
        self.cursor: Node = document
        self.current_level = document.base_level
        self.passthrough = Passthrough()
        self.line_no = 0
        self.line = ""

    def parse(self, lines: Iterable[str]) -> None:
        self.cursor = self.document
        for self.line_no, self.line in enumerate(lines, 1):
            if self.passthrough.consume(self.line, self.cursor):
                continue
            self.parse_line(self.line)

    def parse_line(self, line: str) -> None:
        m, rest = eat(LINE, line)
        if m is None:
            self._skip(line, "unrecognized line")
            return

        indent, token = m.groups()
        if token == COMMENT:
            return

        self.current_level = self.document.base_level + len(indent)

        match token:
            case "!":
                self._add_import(rest)
            case "-":
                self._add_code_block(rest)
            case "?":
                self._add_code_block(f"if ({rest.strip()})")
            case ":":
                condition = rest.strip()
                self._add_code_block(f"elseif ({condition})" if condition else "else")
            case "<":
                self._add_raw(rest)
            case "@":
                self._add_attribute(rest)
            case "$":
                self._add_variable(rest)
            case "." | "#":
                self._add_tag("div", token + rest)
            case _:
                self._add_tag(token, rest)

    def _skip(self, line: str, reason: str) -> None:
        if not line.strip():
            return
        if self.config.strict:
            raise ParseError(reason, self.line_no, line)
        logger.debug(f"line {self.line_no}: {reason}, skipped: {line.rstrip()!r}")
        self.document.skipped_lines.append((self.line_no, line.rstrip("\r\n")))

    def _add_node(self, node: Node) -> None:
        self.cursor = attach(self.cursor, node, self.current_level)
        logger.debug(f"line {self.line_no}: {node.kind.value} {node.name!r} at level {node.level}")

    # -- constructs ---------------------------------------------------------

    def _add_import(self, data: str) -> None:
        m = SPLIT_ARGS.match(data.strip())
        target, args = m.group(1).strip(), m.group(2)

        if SCRIPT_FILE.search(target):
            node = Tag(name="script")
            node.set("src", target)
            node.set("type", "text/javascript")
        elif STYLE_FILE.search(target):
            node = Tag(name="link")
            node.set("href", target)
            node.set("type", "text/css")
            node.set("rel", "stylesheet")
        elif IMAGE_FILE.search(target):
            node = Tag(name="img")
            node.set("src", target)
        elif INCLUDE_FILE.search(target):
            node = CodeBlock(value=f"include('{target}')")
        elif target.startswith("$"):
            node = SubDocument(name=target)
        else:
            node = SubDocument(name=self._resolve_import(target).as_posix())

        self._add_attributes(args, node)
        self._add_node(node)

    def _resolve_import(self, target: str) -> Path:
        local = self.document.directory / target
        if local.exists():
            return local
        return self.config.assets_dir / target

    def _add_code_block(self, data: str) -> None:
        node = CodeBlock(value=data.strip())
        self._add_node(node)

        if CONTINUATION.match(data):
            previous = node.sibling(-1)
            if not isinstance(previous, CodeBlock):
                raise DanglingContinuationError(
                    f"'{node.value}' does not follow a code block at the same level",
                    self.line_no,
                    self.line,
                )
            previous.leave_block_open = True
            node.value = "} " + node.value

    def _add_raw(self, data: str) -> None:
        m = RAW_NAME.match(data)
        name = m.group(1) if m else ""

        if name in DECLARATIONS:
            data = DECLARATIONS[name]
        elif name == PHP_OPEN:
            self._open_passthrough(PHP_CLOSE, data[len(name) :])
        elif name:
            self._open_passthrough(f"</{name}>", data[len(name) :])

        self._add_node(Raw(value=" " * self.current_level + "<" + data))

    def _open_passthrough(self, trigger: str, remainder: str) -> None:
        # a block closed on its own opening line stays structured
        if trigger in remainder:
            return
        self.passthrough.open(trigger, self.current_level - self.document.base_level)

    def _add_attribute(self, data: str) -> None:
        m = ATTRIBUTE_LINE.match(data)
        if m is None:
            self._skip(self.line, "attribute without a value")
            return

        name, assign, token, text = m.groups()
        if assign != "=":
            self.cursor.set(name, text.strip())
            return

        prop = VariableExpression(name=text.strip())
        if "?" in token:
            prop.no_empty_attribute = name
            token = token.replace("?", "")
        if token:
            self._apply_filters(prop, token)

        if prop.no_empty_attribute:
            self.cursor.set(prop)
        else:
            self.cursor.set(name, prop)

    def _add_variable(self, data: str) -> None:
        m = SPLIT_ARGS.match(data.strip())
        node = VariableExpression(name=("$" + m.group(1)).strip())
        self._add_attributes(m.group(2), node)
        self._add_node(node)

    def _add_tag(self, tag: str, data: str) -> None:
        node = Tag(name=tag)

        while True:
            m, data = eat(SHORTHAND, data)
            if m is None:
                break
            if m.group(1) == "#":
                node.set("id", m.group(2))
            else:
                classes = node.get("class", "")
                node.set("class", f"{classes} {m.group(2)}" if classes else m.group(2))

        if data.startswith("("):
            data = self._add_attributes(data, node)

        m, data = eat(INLINE_NEST, data)
        if m is not None:
            self._add_node(node)
            self.current_level += 1
            self._add_tag(m.group(1), data)
            return

        content = None
        if m := ASSIGNMENT.match(data):
            assign, token, text = m.groups()
            if assign == "=":
                content = VariableExpression(name=text.strip())
                if token:
                    self._apply_filters(content, token)
            else:
                node.value = text.strip()

        self._add_node(node)
        if content is not None:
            node.add_child(content)
            content.level = node.level + 1

    # -- attribute and filter grammar ----------------------------------------

    def _add_attributes(self, data: str, node: Node) -> str:
        pairs, rest = parse_attribute_list(data)
        if rest is data and data.startswith("("):
            logger.debug(f"line {self.line_no}: unbalanced attribute list ignored: {data.rstrip()!r}")

        for pair in pairs:
            if pair.expression:
                node.set(pair.name, VariableExpression(name=f'"{pair.value}"'))
            else:
                node.set(pair.name, pair.value)
        return rest

    def _apply_filters(self, node: VariableExpression, token: str) -> None:
        """Attach a filter chain to ``node``.

        The suppression mark wraps the construct being built in an if block
        that only renders when the picked expression is non-empty.
        """
        parsed = parse_filter_token(token)
        if parsed.suppress:
            node.name = f"{self.config.runtime_class}::pick({node.name})"
            self._add_code_block(f"if ({node.name} != '')")
            self.current_level += 1

        for name, value in parsed.filters:
            node.set(name, value)
