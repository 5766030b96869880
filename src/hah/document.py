"""Document: one .hah source compiled into a node tree and rendered to PHP.

Example:
    from hah import Document

    doc = Document.from_file("views/page.hah")
    doc.set("title", "Home")
    php = doc.render()
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar

from .ast import Node, NodeKind
from .cache import SourceCache
from .codegen.php import generate_php
from .config import DEFAULT_CONFIG, HahConfig
from .parser import Parser

logger = logging.getLogger(__name__)

# lines end at "\n" only; other Unicode line breaks are content
LINE_SPLIT = re.compile(r"[^\n]*\n|[^\n]+")


class SourceNotFoundError(FileNotFoundError):
    pass


class SourceDecodeError(ValueError):
    """Source file is not valid UTF-8."""


@dataclass(eq=False)
class Document(Node):
    """Root node bound to one source.

    ``attributes`` hold the template parameters; they are forwarded to imported
    sub-documents when this document is the top of the tree. Compilation runs
    once, on the first ``compile()`` or ``render()`` call.
    """

    kind: ClassVar[NodeKind] = NodeKind.DOCUMENT

    source: str = ""
    path: Path | None = None
    config: HahConfig = DEFAULT_CONFIG
    base_level: int = 0
    compiled: bool = field(default=False, init=False)
    skipped_lines: list[tuple[int, str]] = field(default_factory=list, init=False)

    def __post_init__(self):
        # the root sits one level above its outermost lines
        self.level = self.base_level - 1
        if self.name is None:
            self.name = str(self.path) if self.path is not None else "<string>"

    @classmethod
    def from_file(cls, path: str | Path, config: HahConfig | None = None, base_level: int = 0) -> "Document":
        path = Path(path)
        if not path.is_file():
            raise SourceNotFoundError(f"No such file {path}")
        try:
            source = path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceDecodeError(f"{path} is not valid UTF-8: {e}") from e
        return cls(
            name=str(path),
            source=source,
            path=path,
            config=config or DEFAULT_CONFIG,
            base_level=base_level,
        )

    @classmethod
    def from_string(
        cls, source: str, name: str = "<string>", config: HahConfig | None = None, base_level: int = 0
    ) -> "Document":
        return cls(name=name, source=source, config=config or DEFAULT_CONFIG, base_level=base_level)

    @property
    def lines(self) -> list[str]:
        return LINE_SPLIT.findall(self.source)

    @property
    def directory(self) -> Path:
        """Directory that relative imports are resolved against."""
        return self.path.parent if self.path is not None else Path(".")

    def find_closest_level(self, level: int) -> Node:
        return self

    def merge(self, params: Mapping[str, Any]) -> None:
        for name, value in params.items():
            self.set(name, value)

    def compile(self) -> "Document":
        if self.compiled:
            logger.debug(f"{self.name} already compiled")
            return self

        self.children = []
        self.skipped_lines = []
        Parser(self).parse(self.lines)
        self.compiled = True

        logger.info(f"Compiled {self.name}: {sum(1 for _ in self.walk()) - 1} nodes")
        return self

    def cache_key(self) -> str:
        """Text that determines the generated output: settings, parameter names and source.

        Forwarded parameters render as ``$name`` references in insertion order,
        so only their names and order matter, not their values.
        """
        settings = self.config.model_dump_json(exclude={"cache_dir", "debug", "strict"})
        params = ",".join(name for name in self.attributes if isinstance(name, str))
        return "\n".join([settings, params, self.source])

    def render(self) -> str:
        """Generated PHP for this document, compiling it first if needed."""
        cache = None
        if self.config.cache_dir is not None and not self.config.debug:
            cache = SourceCache(self.config.cache_dir)
            key = self.cache_key()
            cached = cache.load(key)
            if cached is not None:
                return cached

        output = generate_php(self, self.config)

        if cache is not None:
            cache.store(key, output)
        return output

    def __str__(self) -> str:
        return self.render()
