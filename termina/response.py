"""
Termina response: a text buffer flushed through rich.
"""
from rich.console import Console

from .utils import *


class Response:
    """
    Accumulates output until send() flushes it.

    The body is printed verbatim (no markup, no highlighting) and reset afterwards.
    """

    def __init__(self, body=Unset, /):
        self._body = ""
        if body is not Unset:
            self.set_body(body)

    body = mirror("body")

    def set_body(self, body, /):
        if not isinstance(body, str):
            raise TypeError("response 'body' must be a string")
        self._body = body
        return self

    def append(self, text, /):
        if not isinstance(text, str):
            raise TypeError("response appended text must be a string")
        self._body += text
        return self

    def send(self, console=Unset, /):
        if console is Unset:
            console = Console()
        console.print(self._body, end="", markup=False, highlight=False, emoji=False, soft_wrap=True)
        self._body = ""
        return self

    def __str__(self):
        return self._body

    def __repr__(self):
        return f"response(body={self._body!r})"


__all__ = (
    "Response",
)
