from __future__ import annotations

from typing import Optional

from .recipe import CellBorders, CellFill, Colour, FontSpec


FONT_STYLES = {"", "B", "I", "BI", "IB"}

DEFAULT_FONT = FontSpec(
    family="Helvetica",
    style="",
    size=9.0,
    line_spacing=3.0,
    alignment="CM",
    colour=Colour(0, 0, 0),
    cell_borders=CellBorders(style="1", colour=Colour(0, 0, 0)),
    cell_fill=CellFill(filled=False, colour=Colour(255, 255, 255)),
)

DEFAULT_HEADER_FONT = FontSpec(
    family="Helvetica",
    style="B",
    size=10.0,
    line_spacing=3.0,
    alignment="CM",
    colour=Colour(0, 0, 0),
    cell_borders=CellBorders(style="0", colour=Colour(0, 0, 0)),
    cell_fill=CellFill(filled=False, colour=Colour(213, 213, 213)),
)


def _merge(partial: Optional[FontSpec], default: FontSpec) -> FontSpec:
    if partial is None:
        partial = FontSpec()

    size = default.size
    if partial.size is not None and partial.size > 0:
        size = float(partial.size)

    line_spacing = default.line_spacing
    if partial.line_spacing is not None and partial.line_spacing >= 0:
        line_spacing = float(partial.line_spacing)

    # anything outside the known flag set silently keeps the default
    style = default.style
    if partial.style is not None and partial.style in FONT_STYLES:
        style = partial.style

    family = partial.family if partial.family else default.family
    alignment = partial.alignment if partial.alignment else default.alignment
    border_style = partial.cell_borders.style if partial.cell_borders.style else default.cell_borders.style

    # a recipe can switch filling on but never back off
    filled = bool(default.cell_fill.filled) or partial.cell_fill.filled is True

    return FontSpec(
        family=family,
        style=style,
        size=size,
        line_spacing=line_spacing,
        alignment=alignment,
        colour=partial.colour.merged_over(default.colour),
        cell_borders=CellBorders(
            style=border_style,
            colour=partial.cell_borders.colour.merged_over(default.cell_borders.colour),
        ),
        cell_fill=CellFill(
            filled=filled,
            colour=partial.cell_fill.colour.merged_over(default.cell_fill.colour),
        ),
    )


def resolve_font(
    partial: Optional[FontSpec],
    default: FontSpec = DEFAULT_FONT,
    header_default: FontSpec = DEFAULT_HEADER_FONT,
) -> FontSpec:
    """
    Merge a recipe font over the defaults, field by field.

    The body font and its nested header font are resolved independently, each
    against its own defaults. The result has no unset fields, so resolving it
    again returns an equal value.
    """
    resolved = _merge(partial, default)
    header = partial.header_font if partial is not None else None
    resolved.header_font = _merge(header, header_default)
    return resolved


def apply_font(canv, font: FontSpec) -> None:
    """Select a resolved font and its text, fill and border colours on ``canv``."""
    canv.set_font(font.family, font.style, font.size)
    canv.set_text_color(*font.colour.channels())
    canv.set_fill_color(*font.cell_fill.colour.channels())
    canv.set_draw_color(*font.cell_borders.colour.channels())
