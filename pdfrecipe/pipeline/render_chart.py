from __future__ import annotations

import logging

from .axis import DEFAULT_TICK_COUNT, nice_max, y_axis_ticks
from .canvas import DEFAULT_LINE_WIDTH_PT, UNIT_SCALE, Canvas
from .errors import InvalidInputError
from .recipe import (
    Colour,
    ContentItem,
    Dataset,
    PageSettings,
    ShapeStyle,
    lookup_series,
    record_number,
    record_text,
)
from .style import resolve_font


logger = logging.getLogger(__name__)

BLACK = Colour(0, 0, 0)
TITLE_PADDING = 5.0


def _line_width(shape: ShapeStyle, page: PageSettings) -> float:
    if shape.line_width is not None and shape.line_width >= 0:
        return shape.line_width
    return DEFAULT_LINE_WIDTH_PT / UNIT_SCALE[page.units]


def _use_axis_pen(canv: Canvas, axis: ShapeStyle, page: PageSettings) -> None:
    canv.set_line_width(_line_width(axis, page))
    canv.set_draw_color(*axis.line_colour.merged_over(BLACK).channels())


def _use_shape_colours(canv: Canvas, shape: ShapeStyle) -> None:
    canv.set_fill_color(*shape.fill_colour.merged_over(BLACK).channels())
    canv.set_draw_color(*shape.border_colour.merged_over(BLACK).channels())


def render_vertical_bar_chart(
    canv: Canvas,
    item: ContentItem,
    page: PageSettings,
    dataset: Dataset,
    strict: bool = False,
) -> bool:
    """
    Vertical bar chart of ``item.data_series`` per ``item.data_series_category``.

    Layout inside the item box: the y-axis sits ``distance_from_sides`` in from
    the left edge with its tick labels right-aligned in that gap, the axis runs
    from ``distance_from_top`` down to ``distance_from_bottom`` above the bottom
    edge, and each record gets an equal slice of the remaining width. The top
    of the y-axis is the data maximum rounded by :func:`nice_max`.
    """
    series = lookup_series(item, dataset, strict=strict)
    if series is None:
        return False

    settings = item.chart_settings
    records = series.records
    if not records:
        raise InvalidInputError(f"Chart for {item.data_source!r} has no records to lay out")

    tick_count = settings.number_of_y_axis_ticks if settings.number_of_y_axis_ticks > 0 else DEFAULT_TICK_COUNT
    font = resolve_font(settings.chart_text_font)

    width = item.width or 0.0
    height = item.height or 0.0
    side = settings.distance_from_sides
    tick_length = settings.tick_mark_length
    gap = settings.gap_between_bars

    box_x = item.x + page.side_margin
    box_y = item.y + page.top_margin
    chart_width = width - side
    y_axis_x = box_x + side
    axis_top = box_y + settings.distance_from_top
    zero_y = box_y + height - settings.distance_from_bottom
    chart_height = zero_y - axis_top
    if width - 2 * side <= 0 or chart_height <= 0:
        raise InvalidInputError(
            f"Chart box {width}x{height} leaves no room for the plot area "
            f"(sides {side}, top {settings.distance_from_top}, bottom {settings.distance_from_bottom})"
        )

    values = [record_number(record, item.data_series) for record in records]
    categories = [record_text(record, item.data_series_category) for record in records]
    axis_max = nice_max(max(0.0, max(values)))
    ticks = y_axis_ticks(axis_max, tick_count, axis_top, chart_height)
    logger.info(
        "Chart %r: %d bars, axis max %s (data max %s)", item.data_source, len(records), axis_max, max(values)
    )

    # background
    _use_shape_colours(canv, settings.watermark_format)
    canv.draw_rect(box_x, box_y, width, height, settings.watermark_format.style)

    # y-axis with right-aligned labels in the side gap
    _use_axis_pen(canv, settings.axis_format, page)
    canv.draw_line(y_axis_x, axis_top, y_axis_x, zero_y)
    canv.set_font(font.family, font.style, font.size)
    canv.set_text_color(*font.colour.channels())
    for tick in ticks:
        canv.draw_line(y_axis_x, tick.y, y_axis_x - tick_length, tick.y)
        canv.move_to(box_x, tick.y - 0.5 * font.size)
        canv.draw_cell(side - tick_length, font.size, tick.label, "", "RM", False)

    # x-axis ticks, category labels and bars
    slot_width = (chart_width - side) / len(records)
    tick_x = y_axis_x
    for category, value in zip(categories, values):
        _use_axis_pen(canv, settings.axis_format, page)
        canv.draw_line(tick_x, zero_y, tick_x, zero_y + tick_length)
        canv.move_to(tick_x, zero_y + 0.5 * tick_length)
        canv.draw_cell(slot_width, font.size, category, "", "CM", False)

        bar_height = (value / axis_max) * chart_height if axis_max else 0.0
        _use_shape_colours(canv, settings.series_format)
        canv.draw_rect(
            tick_x + gap,
            min(zero_y, zero_y - bar_height),
            slot_width - 2 * gap,
            abs(bar_height),
            settings.series_format.style,
        )
        tick_x += slot_width

    _use_axis_pen(canv, settings.axis_format, page)
    canv.draw_line(tick_x, zero_y, tick_x, zero_y + tick_length)
    canv.draw_line(y_axis_x, zero_y, box_x + chart_width, zero_y)

    title = settings.chart_title
    if title.text:
        title_font = resolve_font(title.font)
        canv.set_font(title_font.family, title_font.style, title_font.size)
        canv.set_fill_color(*title_font.cell_fill.colour.channels())
        canv.set_text_color(*title_font.colour.channels())
        canv.set_draw_color(*settings.axis_format.line_colour.merged_over(BLACK).channels())
        cell_width = canv.measure_text_width(title.text) + TITLE_PADDING
        canv.move_to(box_x + width / 2 - cell_width / 2, box_y + title.distance_from_top)
        canv.draw_cell(
            cell_width,
            title_font.line_height,
            title.text,
            title_font.cell_borders.style,
            title_font.alignment,
            title_font.cell_fill.filled,
        )

    return True
