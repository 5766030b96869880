"""Command line compiler for .hah templates.

Usage:
    hah page.hah
    hah page.hah -o page.php --set title=Home --set color=red
    hah page.hah --config hah.yaml --debug -v
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import HahConfig
from .document import Document, SourceDecodeError, SourceNotFoundError
from .parser import ParseError


def format_source(code: str) -> str:
    """Number each line of generated source for debugging."""
    lines = code.splitlines()
    return "\n".join(f"{i:05d} {line}" for i, line in enumerate(lines)) + "\n"


def _parse_param(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hah", description="Compile a .hah template to PHP")
    parser.add_argument("source", type=Path, help="Path to the .hah document")
    parser.add_argument("-o", "--output", type=Path, default=None, help="Write PHP here instead of stdout")
    parser.add_argument("--config", type=Path, default=None, help="YAML file with compiler settings")
    parser.add_argument(
        "--set",
        dest="params",
        type=_parse_param,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Template parameter forwarded to imported sub-documents (repeatable)",
    )
    parser.add_argument("--strict", action="store_true", help="Fail on unrecognized lines")
    parser.add_argument("--debug", action="store_true", help="Print a line-numbered listing")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )

    config = HahConfig.from_yaml(args.config) if args.config else HahConfig()
    overrides = {}
    if args.strict:
        overrides["strict"] = True
    if args.debug:
        overrides["debug"] = True
    if overrides:
        config = config.model_copy(update=overrides)

    try:
        doc = Document.from_file(args.source, config=config)
        for name, value in args.params:
            doc.set(name, value)
        output = doc.render()
    except (SourceNotFoundError, SourceDecodeError, ParseError) as e:
        print(f"hah: {e}", file=sys.stderr)
        return 1

    if config.debug:
        output = format_source(output)

    if args.output:
        args.output.write_bytes(output.encode("utf-8"))
        print(f"Wrote {args.output}")
    else:
        sys.stdout.write(output)

    if args.verbose:
        for line_no, text in doc.skipped_lines:
            print(f"  SKIP  line {line_no}: {text}", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
