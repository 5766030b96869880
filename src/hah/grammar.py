"""Attribute and expression grammar for .hah lines.

Small, regex-driven building blocks shared by the line parser:

    onion       balanced-delimiter capture ("peel the next layer")
    eat         match a prefix pattern and remove it from the text
    attributes  name="value" / name='value' / @name="expr" pairs
    filters     assignment filter tokens (?, "date", $, #, a,b,c)
"""

import re
from dataclasses import dataclass, field

ESCAPE = "\\"

ATTRIBUTE_PAIR = re.compile(
    r"""^.*?\s*(@)?([a-z0-9_\-]+)=("([^"]*)"|'([^']*)')""",
    re.IGNORECASE,
)
DATE_FILTER = re.compile(r'"([^"]+)"')

SUPPRESS_MARK = "?"
MONEY_MARK = "$"
NUMBER_MARK = "#"


def onion(text: str, left: str = "(", right: str = ")") -> list[str]:
    """Return the contents of each top-level ``left ... right`` pair in ``text``.

    Depth is tracked with a tally that starts a capture when it goes from 0 to 1
    and closes it when it returns to 0. Delimiters preceded by a backslash are
    not counted. Unbalanced input yields no capture for the unclosed pair.
    """
    start = 0
    tally = -1
    found: list[str] = []

    for pos, char in enumerate(text):
        escaped = pos > 0 and text[pos - 1] == ESCAPE

        if char == left and not escaped:
            if tally == -1:
                start = pos + 1
                tally = 1
            else:
                tally += 1
        elif tally != -1 and char == right and not escaped:
            tally -= 1

        if tally == 0:
            found.append(text[start:pos])
            tally = -1

    return found


def eat(pattern: re.Pattern, text: str) -> tuple[re.Match | None, str]:
    """Match ``pattern`` at the start of ``text`` and strip the matched prefix.

    Returns ``(match, rest)``; when nothing matches ``rest`` is ``text`` unchanged.
    """
    m = pattern.match(text)
    if m is None:
        return None, text
    return m, text[m.end() :]


@dataclass
class AttributePair:
    name: str
    value: str
    expression: bool = False  # @name="..." marks a host expression, not a literal


def parse_attribute_list(data: str) -> tuple[list[AttributePair], str]:
    """Parse a leading ``( ... )`` attribute list off ``data``.

    Returns the pairs found and the remainder of the line. The chomped length is
    the captured content plus the two delimiters; when no balanced block is
    found nothing is removed and no pairs are returned.
    """
    captures = onion(data)
    if not captures:
        return [], data

    pairs = []
    props = captures[0]
    while True:
        m, props = eat(ATTRIBUTE_PAIR, props)
        if m is None:
            break
        value = m.group(3).strip("'\"")
        pairs.append(AttributePair(m.group(2), value, expression=m.group(1) == "@"))

    return pairs, data[len(captures[0]) + 2 :]


@dataclass
class FilterToken:
    """A parsed assignment filter token such as ``?``, ``"M_d"`` or ``trim,upper``."""

    suppress: bool = False
    filters: list[tuple[str, str]] = field(default_factory=list)


def parse_filter_token(token: str) -> FilterToken:
    """Split a filter token into the suppression flag and an ordered filter chain.

    Priority after the suppression mark is removed: a quoted date pattern
    (underscores stand for spaces), then the money mark, then the number mark,
    then a comma separated list of function names applied left to right.
    """
    parsed = FilterToken()
    if SUPPRESS_MARK in token:
        parsed.suppress = True
        token = token.replace(SUPPRESS_MARK, "")

    if m := DATE_FILTER.search(token):
        parsed.filters.append(("date", m.group(1).replace("_", " ")))
    elif MONEY_MARK in token:
        parsed.filters.append(("money", ""))
    elif NUMBER_MARK in token:
        parsed.filters.append(("number_format", ""))
    elif token:
        parsed.filters.extend((name, "") for name in token.split(",") if name)

    return parsed
