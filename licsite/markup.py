"""
HTML helpers: escaping, star glyphs and the Jinja2 environment used for page assembly.

Anything interpolated into a template goes through ``escape_html`` unless it
is already ``Markup``; trusted fragments must be wrapped in ``Markup``
explicitly to be emitted raw.
"""

from __future__ import annotations

import math

from jinja2 import Environment, PackageLoader
from markupsafe import Markup

FILLED_STAR = "★"
EMPTY_STAR = "☆"
MAX_STARS = 5

# Applied in order; "&" must come first.
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(value) -> Markup:
    if isinstance(value, Markup):
        return value
    if not value or not isinstance(value, str):
        return Markup("")
    for char, entity in _ESCAPES:
        value = value.replace(char, entity)
    return Markup(value)


def render_stars(rating: float) -> str:
    filled = int(math.floor(rating + 0.5))
    filled = max(0, min(MAX_STARS, filled))
    return FILLED_STAR * filled + EMPTY_STAR * (MAX_STARS - filled)


def _finalize(value):
    if isinstance(value, Markup):
        return value
    if value is None:
        return Markup("")
    return escape_html(str(value))


def create_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("licsite", "templates"),
        autoescape=True,
        finalize=_finalize,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.globals["render_stars"] = render_stars
    return env


environment = create_environment()
