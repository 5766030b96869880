"""Compiler configuration.

A single immutable value passed to each Document and on to the renderer, so
documents with different settings can coexist in one process.
"""

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator


class HahConfig(BaseModel):
    """Formatting, import and cache settings for compiling .hah documents."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    indent: str = "  "
    newline: str = "\r\n"
    non_self_closing: str = "script|iframe|textarea|div"  # tags never rendered as <x />
    assets_dir: Path = Path("haha")  # fallback root for sub-document imports
    debug: bool = False
    cache_dir: Path | None = None
    runtime_class: str = "HahNode"  # helper class called by generated code
    document_class: str = "HahDocument"  # class instantiated for sub-documents
    strict: bool = False  # raise on unrecognized lines instead of recording them

    @field_validator("non_self_closing")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid non_self_closing pattern {value!r}: {e}") from e
        return value

    def can_self_close(self, tag: str) -> bool:
        return re.fullmatch(self.non_self_closing, tag, re.IGNORECASE) is None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "HahConfig":
        """Load settings from a YAML mapping; an empty file gives the defaults."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))


DEFAULT_CONFIG = HahConfig()
