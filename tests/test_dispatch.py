from __future__ import annotations

import math
import tempfile
from pathlib import Path

import pytest

from pdfrecipe.pipeline.canvas import DEFAULT_LINE_WIDTH_PT, InstructionRecorder
from pdfrecipe.pipeline.dispatch import FAILED, RENDERED, SKIPPED, process_contents
from pdfrecipe.pipeline.errors import CanvasError
from pdfrecipe.pipeline.recipe import (
    CellBorders,
    ChartSettings,
    Colour,
    ContentItem,
    DataSeries,
    Dataset,
    FontSpec,
    PageSettings,
    Recipe,
    ShapeStyle,
    resolve_page_settings,
)
from pdfrecipe.pipeline.render_pdf import ReportLabCanvas


def _text(text: str) -> ContentItem:
    return ContentItem(item_type="textBlock", text=text, width=200)


def _table(source: str = "sales") -> ContentItem:
    return ContentItem(
        item_type="table",
        data_source=source,
        data_series="Volume",
        data_series_category="Region",
        width=200,
        height=300,
        font=FontSpec(cell_borders=CellBorders(style="LR", colour=Colour(255, 0, 0))),
    )


def _chart(source: str = "sales") -> ContentItem:
    return ContentItem(
        item_type="verticalBar",
        data_source=source,
        data_series="Volume",
        data_series_category="Region",
        width=300,
        height=200,
        chart_settings=ChartSettings(
            axis_format=ShapeStyle(line_width=1.5),
            distance_from_top=20,
            distance_from_bottom=30,
            distance_from_sides=40,
            tick_mark_length=5,
        ),
    )


def _recipe(*items: ContentItem, **page) -> Recipe:
    return Recipe(page=PageSettings(**page), contents=list(items))


def _first_index(calls, name: str, text: str) -> int:
    for i, call in enumerate(calls):
        if call.name == name and text in call.args:
            return i
    raise AssertionError(f"{name} with {text!r} not emitted")


def test_end_to_end_order_is_preserved(recorder, sales) -> None:
    outcomes = process_contents(recorder, _recipe(_text("Hello"), _table(), _chart()), sales)
    assert [o.status for o in outcomes] == [RENDERED, RENDERED, RENDERED]
    assert [o.item_type for o in outcomes] == ["textBlock", "table", "verticalBar"]

    calls = recorder.calls
    hello = _first_index(calls, "draw_multi_line_text", "Hello")
    header = _first_index(calls, "draw_multi_line_text", "Region")
    first_bar_label = _first_index(calls, "draw_cell", "North")
    assert hello < header < first_bar_label
    assert calls == [call for o in outcomes for call in o.calls]


def test_no_style_leaks_between_items(recorder, sales) -> None:
    outcomes = process_contents(recorder, _recipe(_table(), _chart(), _text("after")), sales)
    for outcome in outcomes:
        first = outcome.calls[0]
        assert first.name == "set_line_width"
        assert first.args == (pytest.approx(DEFAULT_LINE_WIDTH_PT),)
        assert ("set_draw_color", (0, 0, 0)) in [(c.name, c.args) for c in outcome.calls[:3]]

    chart_calls = outcomes[1].calls
    widths = {c.args[0] for c in chart_calls[1:] if c.name == "set_line_width"}
    assert widths == {1.5}
    # the table's red border colour never reaches the chart's axis lines
    assert ("set_draw_color", (255, 0, 0)) not in [(c.name, c.args) for c in chart_calls]
    text_calls = outcomes[2].calls
    assert [c.args for c in text_calls if c.name == "draw_multi_line_text"][0][3] == "1"


def test_failed_item_does_not_stop_the_document(recorder) -> None:
    dataset = Dataset(series=[DataSeries("sales", [])])
    outcomes = process_contents(recorder, _recipe(_text("one"), _chart(), _text("two")), dataset)
    assert [o.status for o in outcomes] == [RENDERED, FAILED, RENDERED]
    assert outcomes[1].calls == []
    assert "InvalidInputError" in outcomes[1].detail
    texts = [c.args[2] for c in recorder.named("draw_multi_line_text")]
    assert texts == ["one", "two"]


def test_missing_source_lenient_and_strict(recorder, sales) -> None:
    outcomes = process_contents(recorder, _recipe(_table("nope"), _text("x")), sales)
    assert [o.status for o in outcomes] == [SKIPPED, RENDERED]

    strict = InstructionRecorder()
    outcomes = process_contents(strict, _recipe(_table("nope"), _text("x")), sales, strict=True)
    assert [o.status for o in outcomes] == [FAILED, RENDERED]
    assert "DataBindingError" in outcomes[0].detail


def test_unknown_item_type_is_skipped(recorder, sales) -> None:
    outcomes = process_contents(recorder, _recipe(ContentItem(item_type="pieChart"), _text("x")), sales)
    assert [o.status for o in outcomes] == [SKIPPED, RENDERED]


def test_page_watermark_drawn_first(recorder, sales) -> None:
    process_contents(recorder, _recipe(_text("x"), watermark=Colour(R=200)), sales)
    assert recorder.calls[0].name == "set_fill_color"
    assert recorder.calls[0].args == (200, 0, 0)
    assert recorder.calls[1].args == (0.0, 0.0, 595.28, 841.89, "F")


def test_positions_shift_by_page_margins(recorder, sales) -> None:
    process_contents(recorder, _recipe(_text("x"), side_margin=10, top_margin=15), sales)
    assert recorder.named("move_to")[0].args == (10.0, 15.0)


class _RectFailsCanvas(InstructionRecorder):
    def draw_rect(self, x, y, w, h, style) -> None:
        raise CanvasError("rectangle rejected")


def test_canvas_error_skips_to_next_item(sales) -> None:
    canv = _RectFailsCanvas()
    outcomes = process_contents(canv, _recipe(_chart(), _text("still here")), sales)
    assert [o.status for o in outcomes] == [FAILED, RENDERED]
    assert "CanvasError" in outcomes[0].detail
    assert canv.named("draw_multi_line_text")[-1].args[2] == "still here"


@pytest.mark.parametrize("bad", [math.nan, math.inf])
def test_non_finite_data_fails_only_its_item(recorder, bad: float) -> None:
    dataset = Dataset(
        series=[DataSeries("sales", [{"Region": "North", "Volume": 10}, {"Region": "South", "Volume": bad}])]
    )
    outcomes = process_contents(recorder, _recipe(_chart(), _table(), _text("after")), dataset)
    assert [o.status for o in outcomes] == [FAILED, FAILED, RENDERED]
    assert all("DataBindingError" in o.detail for o in outcomes[:2])
    assert recorder.named("draw_multi_line_text")[-1].args[2] == "after"


def test_reportlab_failure_skips_to_next_item(sales) -> None:
    broken = ContentItem(item_type="textBlock", text="lost", x=math.nan, width=200)
    recipe = _recipe(broken, _text("still here"))
    page = resolve_page_settings(recipe.page)
    with tempfile.TemporaryDirectory() as temp_dir:
        canv = ReportLabCanvas(Path(temp_dir) / "broken.pdf", page)
        outcomes = process_contents(canv, recipe, sales, page=page)
        canv.save()
    assert [o.status for o in outcomes] == [FAILED, RENDERED]
    assert "CanvasError" in outcomes[0].detail
