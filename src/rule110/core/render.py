"""Text rendering of automaton rows."""

from typing import Iterable

from .bitfield import BitField


def render(field: BitField, alive: str = "#", dead: str = " ") -> str:
    """Render a row as one line, cells separated by single spaces.

    Only the field's declared cells are rendered, never block padding.

    Args:
        field: Row to render
        alive: Glyph for living cells
        dead: Glyph for dead cells

    Returns:
        Rendered line without trailing newline
    """
    return " ".join(alive if cell else dead for cell in field)


def render_history(fields: Iterable[BitField], alive: str = "#", dead: str = " ") -> str:
    """Render several rows, one line per row."""
    return "\n".join(render(field, alive, dead) for field in fields)
