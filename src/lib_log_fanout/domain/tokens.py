"""Immutable styled tokens and the rendered message value.

Purpose
-------
Hold the result of a message builder once it has been emitted: an ordered,
frozen sequence of ``(text, kind)`` tokens that can be rendered with or
without escape sequences any number of times.

Contents
--------
* :class:`StyledToken` - one piece of text plus its :class:`StyleKind`.
* :class:`StyledMessage` - frozen token sequence with :meth:`format`.

System Role
-----------
Carried inside :class:`~lib_log_fanout.domain.record.LogRecord`; transports
decide per destination whether to render it coloured or plain.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from .styles import StyleKind, apply_style

SEPARATOR = " "


@dataclass(slots=True, frozen=True)
class StyledToken:
    """A piece of message text tagged with a style kind."""

    text: str
    kind: StyleKind = StyleKind.PLAIN

    def render(self, color: bool) -> str:
        """Return the token text, wrapped in its escape pair when ``color`` is set."""

        if not color:
            return self.text
        return apply_style(self.kind, self.text)


def render_tokens(tokens: Iterable[StyledToken], color: bool) -> str:
    """Join token renderings with a single space.

    Examples
    --------
    >>> render_tokens([StyledToken('a', StyleKind.H1), StyledToken('b')], False)
    'a b'
    """

    return SEPARATOR.join(token.render(color) for token in tokens)


@dataclass(slots=True, frozen=True)
class StyledMessage:
    """Frozen token sequence produced by a message builder.

    Attributes
    ----------
    tokens:
        Tokens in call order.
    color:
        Colour preference captured from the builder; transports may still
        force plain output.
    """

    tokens: tuple[StyledToken, ...] = field(default_factory=tuple)
    color: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", tuple(self.tokens))

    def format(self, color: bool | None = None) -> str:
        """Render the message; ``color=None`` uses the captured preference."""

        use_color = self.color if color is None else (color and self.color)
        return render_tokens(self.tokens, use_color)

    @property
    def plain(self) -> str:
        return render_tokens(self.tokens, False)

    def prepend(self, text: str, kind: StyleKind = StyleKind.PLAIN) -> "StyledMessage":
        """Return a copy with ``text`` inserted as the leading token."""

        return StyledMessage((StyledToken(text, kind), *self.tokens), self.color)

    def __iter__(self) -> Iterator[StyledToken]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __str__(self) -> str:
        return self.plain


__all__ = ["SEPARATOR", "StyledMessage", "StyledToken", "render_tokens"]
