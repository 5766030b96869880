"""Raw passthrough state for the line parser.

While passthrough is on, lines are appended verbatim to the open raw node
until a line carries the closing trigger at the recorded indentation.
"""

import logging
import re
from enum import Enum

from .ast import Node

logger = logging.getLogger(__name__)


class EngineState(Enum):
    STRUCTURED = "structured"
    PASSTHROUGH = "passthrough"


class Passthrough:
    def __init__(self):
        self.state = EngineState.STRUCTURED
        self.trigger = ""
        self.baseline = 0
        self._pattern: re.Pattern | None = None

    @property
    def active(self) -> bool:
        return self.state is EngineState.PASSTHROUGH

    def open(self, trigger: str, baseline: int) -> None:
        """Switch to passthrough until ``trigger`` appears after exactly ``baseline`` whitespace."""
        self.state = EngineState.PASSTHROUGH
        self.trigger = trigger
        self.baseline = baseline
        self._pattern = re.compile(r"^\s{%d}%s" % (baseline, re.escape(trigger)))
        logger.debug(f"Passthrough opened, waiting for {trigger!r} at indent {baseline}")

    def consume(self, line: str, sink: Node) -> bool:
        """Append ``line`` to ``sink`` if passthrough is on. Returns True when consumed.

        The closing line is itself passthrough text and the last one consumed.
        """
        if not self.active:
            return False

        if self._pattern.match(line):
            self.state = EngineState.STRUCTURED
            logger.debug(f"Passthrough closed by {self.trigger!r}")

        sink.value += line
        return True
