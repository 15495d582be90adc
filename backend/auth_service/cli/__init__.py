"""``flask principals ...`` and ``flask tokens ...`` maintenance commands."""

from __future__ import annotations

from flask import Flask

from .principals import principals_cli
from .tokens import tokens_cli


def init_app(app: Flask) -> None:
    for group in (principals_cli, tokens_cli):
        app.cli.add_command(group)
