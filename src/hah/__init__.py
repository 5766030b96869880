"""HAH (HAH Ain't Haml): compile indentation-based markup templates to PHP.

Pipeline: read .hah source -> build a node tree from indentation -> generate PHP.

Example:
    from hah import parse, render

    doc = parse('''
    ul#menu
      li,a(href="/") Home
      li= $user->name
    ''')
    php = doc.render()

    php = render("p.note= $message", params={"message": "hi"})
"""

__version__ = "0.1.0"

from pathlib import Path
from typing import Any

from .ast import (
    CodeBlock,
    Node,
    NodeKind,
    Raw,
    SubDocument,
    Tag,
    VariableExpression,
    attach,
)
from .cache import SourceCache, source_hash
from .codegen import escape_html, generate_php
from .config import DEFAULT_CONFIG, HahConfig
from .document import Document, SourceDecodeError, SourceNotFoundError
from .grammar import onion, parse_attribute_list, parse_filter_token
from .parser import DanglingContinuationError, ParseError, Parser
from .passthrough import EngineState, Passthrough


def parse(source: str, name: str = "<string>", config: HahConfig | None = None) -> Document:
    """Compile .hah source text into a document tree."""
    return Document.from_string(source, name=name, config=config).compile()


def parse_file(path: str | Path, config: HahConfig | None = None) -> Document:
    """Compile a .hah file into a document tree."""
    return Document.from_file(path, config=config).compile()


def render(source: str, params: dict[str, Any] | None = None, config: HahConfig | None = None) -> str:
    """Compile .hah source text and return the generated PHP."""
    doc = Document.from_string(source, config=config)
    doc.merge(params or {})
    return doc.render()


def render_file(path: str | Path, params: dict[str, Any] | None = None, config: HahConfig | None = None) -> str:
    """Compile a .hah file and return the generated PHP."""
    doc = Document.from_file(path, config=config)
    doc.merge(params or {})
    return doc.render()


__all__ = [
    # Parse
    "parse",
    "parse_file",
    "Parser",
    "ParseError",
    "DanglingContinuationError",
    # Tree
    "Node",
    "NodeKind",
    "Tag",
    "VariableExpression",
    "CodeBlock",
    "Raw",
    "SubDocument",
    "attach",
    # Grammar
    "onion",
    "parse_attribute_list",
    "parse_filter_token",
    "Passthrough",
    "EngineState",
    # Document
    "Document",
    "SourceNotFoundError",
    "SourceDecodeError",
    "HahConfig",
    "DEFAULT_CONFIG",
    # Codegen
    "render",
    "render_file",
    "generate_php",
    "escape_html",
    "SourceCache",
    "source_hash",
]
