from __future__ import annotations

from .canvas import Canvas
from .recipe import ContentItem, PageSettings
from .style import apply_font, resolve_font


def render_text_block(canv: Canvas, item: ContentItem, page: PageSettings) -> None:
    font = resolve_font(item.font)
    apply_font(canv, font)

    # item coordinates start at the printable area's top-left corner
    canv.move_to(item.x + page.side_margin, item.y + page.top_margin)
    canv.draw_multi_line_text(
        item.width or 0.0,
        font.line_height,
        item.text,
        font.cell_borders.style,
        font.alignment,
        font.cell_fill.filled,
    )
