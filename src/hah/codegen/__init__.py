"""Code generation for compiled .hah documents."""

from .php import escape_html, generate_php

__all__ = ["escape_html", "generate_php"]
