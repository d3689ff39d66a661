from __future__ import annotations

import logging

from .canvas import Canvas
from .recipe import ContentItem, Dataset, PageSettings, lookup_series, record_number, record_text
from .style import apply_font, resolve_font


logger = logging.getLogger(__name__)

DEFAULT_TABLE_WIDTH = 100.0
ELLIPSIS = "..."


def render_table(
    canv: Canvas,
    item: ContentItem,
    page: PageSettings,
    dataset: Dataset,
    strict: bool = False,
) -> bool:
    """
    Two-column table: category on the left, series value on the right.

    Rows are emitted in dataset order until the declared height runs out; the
    row that would not fit is replaced by a single full-width ellipsis row.
    A row other than the last is only drawn when the half-height ellipsis row
    still fits below it, so header, rows and ellipsis stay inside ``height``.
    This can show one row fewer than a check on the row alone would.
    Returns False when the bound data source does not exist.
    """
    series = lookup_series(item, dataset, strict=strict)
    if series is None:
        return False

    font = resolve_font(item.font)
    header = font.header_font

    table_width = DEFAULT_TABLE_WIDTH
    if item.width is not None and item.width >= 0:
        table_width = item.width
    column_width = table_width / 2.0
    max_height = item.height if item.height is not None else float("inf")

    x = item.x + page.side_margin
    y = item.y + page.top_margin

    apply_font(canv, header)
    for offset, label in ((0.0, item.data_series_category), (column_width, item.data_series)):
        canv.move_to(x + offset, y)
        canv.draw_multi_line_text(
            column_width,
            header.line_height,
            label,
            header.cell_borders.style,
            header.alignment,
            header.cell_fill.filled,
        )
    y += header.line_height
    used_height = header.line_height

    apply_font(canv, font)
    row_height = font.line_height
    ellipsis_height = 0.5 * row_height
    records = series.records

    for index, record in enumerate(records):
        # leave room for the ellipsis row unless this is the final record
        needed = row_height if index == len(records) - 1 else row_height + ellipsis_height
        if used_height + needed > max_height:
            logger.info(
                "Table %r truncated after %d of %d rows", item.data_source, index, len(records)
            )
            canv.move_to(x, y)
            canv.draw_multi_line_text(
                table_width,
                ellipsis_height,
                ELLIPSIS,
                font.cell_borders.style,
                "CB",
                font.cell_fill.filled,
            )
            break

        category = record_text(record, item.data_series_category)
        value = record_number(record, item.data_series)
        for offset, text in ((0.0, category), (column_width, f"{value:.0f}")):
            canv.move_to(x + offset, y)
            canv.draw_multi_line_text(
                column_width,
                row_height,
                text,
                font.cell_borders.style,
                font.alignment,
                font.cell_fill.filled,
            )
        y += row_height
        used_height += row_height

    return True
