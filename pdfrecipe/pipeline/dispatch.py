from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .canvas import DEFAULT_LINE_WIDTH_PT, UNIT_SCALE, Canvas, DrawCall, InstructionRecorder, replay
from .errors import CanvasError, DataBindingError, InvalidInputError
from .recipe import ContentItem, Dataset, PageSettings, Recipe, resolve_page_settings
from .render_chart import render_vertical_bar_chart
from .render_table import render_table
from .render_text import render_text_block
from .style import DEFAULT_FONT


logger = logging.getLogger(__name__)

RENDERED = "rendered"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass
class ItemOutcome:
    index: int
    item_type: str
    status: str
    detail: Optional[str] = None
    calls: List[DrawCall] = field(default_factory=list)


def _text_block(canv: Canvas, item: ContentItem, page: PageSettings, dataset: Dataset, strict: bool) -> bool:
    render_text_block(canv, item, page)
    return True


ItemRenderer = Callable[[Canvas, ContentItem, PageSettings, Dataset, bool], bool]

ITEM_RENDERERS: Dict[str, ItemRenderer] = {
    "textBlock": _text_block,
    "table": render_table,
    "verticalBar": render_vertical_bar_chart,
}


def _reset_state(canv: Canvas, page: PageSettings) -> None:
    canv.set_line_width(DEFAULT_LINE_WIDTH_PT / UNIT_SCALE[page.units])
    canv.set_draw_color(0, 0, 0)
    canv.set_fill_color(0, 0, 0)
    canv.set_text_color(0, 0, 0)
    canv.set_font(DEFAULT_FONT.family, DEFAULT_FONT.style, DEFAULT_FONT.size)


def page_setup_calls(page: PageSettings) -> List[DrawCall]:
    """Full-page watermark rectangle, drawn before any content item."""
    recorder = InstructionRecorder(units=page.units)
    if page.has_watermark:
        recorder.set_fill_color(*page.watermark.channels())
        recorder.draw_rect(0.0, 0.0, page.width, page.height, "F")
    return recorder.calls


def build_item(index: int, item: ContentItem, page: PageSettings, dataset: Dataset, strict: bool = False) -> ItemOutcome:
    """Lay out one item into its own instruction list without touching the shared canvas."""
    renderer = ITEM_RENDERERS.get(item.item_type)
    if renderer is None:
        logger.warning("Item %d: unknown item type %r, skipped", index, item.item_type)
        return ItemOutcome(index, item.item_type, SKIPPED, f"Unknown item type: {item.item_type}")

    logger.info("Item %d: found %s (data source %r)", index, item.item_type, item.data_source)
    recorder = InstructionRecorder(units=page.units)
    _reset_state(recorder, page)
    try:
        drawn = renderer(recorder, item, page, dataset, strict)
    except (DataBindingError, InvalidInputError, CanvasError) as exc:
        logger.exception("Item %d (%s) failed", index, item.item_type)
        return ItemOutcome(index, item.item_type, FAILED, f"{type(exc).__name__}: {exc}")
    if not drawn:
        return ItemOutcome(index, item.item_type, SKIPPED, f"Data source not found: {item.data_source}")
    return ItemOutcome(index, item.item_type, RENDERED, calls=recorder.calls)


def process_contents(
    canv: Canvas,
    recipe: Recipe,
    dataset: Dataset,
    strict: bool = False,
    page: Optional[PageSettings] = None,
) -> List[ItemOutcome]:
    """
    Render every content item of ``recipe`` onto ``canv`` in recipe order.

    A failing item is logged and reported in its outcome; the remaining items
    are still drawn. ``page`` is the already resolved page, when the caller
    needed it first to open the canvas.
    """
    if page is None:
        page = resolve_page_settings(recipe.page)
    replay(page_setup_calls(page), canv)

    outcomes: List[ItemOutcome] = []
    for index, item in enumerate(recipe.contents):
        outcome = build_item(index, item, page, dataset, strict=strict)
        if outcome.status == RENDERED:
            try:
                replay(outcome.calls, canv)
            except CanvasError as exc:
                logger.exception("Item %d (%s) failed on the canvas", index, item.item_type)
                outcome.status = FAILED
                outcome.detail = f"{type(exc).__name__}: {exc}"
        outcomes.append(outcome)
    return outcomes
