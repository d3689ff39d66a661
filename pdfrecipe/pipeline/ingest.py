from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from .recipe import (
    UNSET,
    CellBorders,
    CellFill,
    ChartSettings,
    ChartTitle,
    Colour,
    ContentItem,
    DataSeries,
    Dataset,
    FontSpec,
    PageSettings,
    Recipe,
    ShapeStyle,
)


def _read_json(path: Path, what: str) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"{what} not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"{what} is not valid JSON: {path} ({exc})") from exc


def _get(data: Any, key: str, default: Any = None) -> Any:
    """Key lookup that ignores case, so ``PageUnits`` and ``pageUnits`` both match."""
    if not isinstance(data, dict):
        return default
    if key in data:
        return data[key]
    lowered = key.lower()
    for candidate, value in data.items():
        if str(candidate).lower() == lowered:
            return value
    return default


def _number(data: Any, key: str) -> Optional[float]:
    value = _get(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _text(data: Any, key: str) -> Optional[str]:
    value = _get(data, key)
    return value if isinstance(value, str) else None


def _channel(data: Any, key: str) -> int:
    value = _get(data, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return UNSET
    return int(value)


def parse_colour(data: Any) -> Colour:
    return Colour(R=_channel(data, "R"), G=_channel(data, "G"), B=_channel(data, "B"))


def parse_font(data: Any, nested: bool = True) -> FontSpec:
    borders = _get(data, "cellBorders", {})
    fill = _get(data, "cellFill", {})
    filled = _get(fill, "filled")
    header = _get(data, "headerFont") if nested else None
    return FontSpec(
        family=_text(data, "family"),
        style=_text(data, "style"),
        size=_number(data, "size"),
        line_spacing=_number(data, "lineSpacing"),
        alignment=_text(data, "alignment"),
        colour=parse_colour(_get(data, "colour")),
        cell_borders=CellBorders(style=_text(borders, "style"), colour=parse_colour(_get(borders, "colour"))),
        cell_fill=CellFill(
            filled=filled if isinstance(filled, bool) else None,
            colour=parse_colour(_get(fill, "colour")),
        ),
        header_font=parse_font(header, nested=False) if isinstance(header, dict) else None,
    )


def parse_shape(data: Any) -> ShapeStyle:
    return ShapeStyle(
        style=_text(data, "style") or "",
        fill_colour=parse_colour(_get(data, "fillColour")),
        border_colour=parse_colour(_get(data, "borderColour")),
        line_width=_number(data, "lineWidth"),
        line_colour=parse_colour(_get(data, "lineColour")),
    )


def parse_chart_settings(data: Any) -> ChartSettings:
    title = _get(data, "chartTitle", {})
    return ChartSettings(
        watermark_format=parse_shape(_get(data, "watermarkFormat")),
        series_format=parse_shape(_get(data, "seriesFormat")),
        axis_format=parse_shape(_get(data, "axisFormat")),
        chart_text_font=parse_font(_get(data, "chartTextFont")),
        chart_title=ChartTitle(
            text=_text(title, "text") or "",
            distance_from_top=_number(title, "distanceFromTopOfChartArea") or 0.0,
            font=parse_font(_get(title, "font")),
        ),
        distance_from_top=_number(data, "distanceFromTopOfChartArea") or 0.0,
        distance_from_bottom=_number(data, "distanceFromBottomOfChartArea") or 0.0,
        distance_from_sides=_number(data, "distanceFromSidesOfChartArea") or 0.0,
        number_of_y_axis_ticks=int(_number(data, "numberOfYAxisTicks") or 0),
        gap_between_bars=_number(data, "gapBetweenBars") or 0.0,
        tick_mark_length=_number(data, "tickMarkLength") or 0.0,
    )


def parse_item(data: Any) -> ContentItem:
    if not isinstance(data, dict):
        raise ValueError(f"Content item must be an object, got {type(data).__name__}")
    return ContentItem(
        item_type=_text(data, "itemType") or "",
        text=_text(data, "text") or "",
        data_source=_text(data, "dataSource") or "",
        data_series=_text(data, "dataSeries") or "",
        data_series_category=_text(data, "dataSeriesCategory") or "",
        x=_number(data, "xPosition") or 0.0,
        y=_number(data, "yPosition") or 0.0,
        width=_number(data, "width"),
        height=_number(data, "height"),
        font=parse_font(_get(data, "font")),
        chart_settings=parse_chart_settings(_get(data, "chartSettings")),
    )


def parse_recipe(data: Any) -> Recipe:
    if not isinstance(data, dict):
        raise ValueError("Recipe must be a JSON object")
    settings = _get(data, "pdfSettings", {})
    contents = _get(data, "pdfContents", [])
    if not isinstance(contents, list):
        raise ValueError("pdfContents must be a list")
    page = PageSettings(
        orientation=_text(settings, "pageOrientation"),
        units=_text(settings, "pageUnits"),
        width=_number(settings, "pageWidth"),
        height=_number(settings, "pageHeight"),
        side_margin=_number(settings, "pageLeftAndRightMargins"),
        top_margin=_number(settings, "pageTopMargin"),
        watermark=parse_colour(_get(settings, "watermark")),
        pdf_name=_text(settings, "pdfName") or "",
        pdf_location=_text(settings, "pdfLocation") or "",
    )
    return Recipe(page=page, contents=[parse_item(item) for item in contents])


def parse_dataset(data: Any) -> Dataset:
    if not isinstance(data, list):
        raise ValueError("Dataset must be a JSON list of data sources")
    series: List[DataSeries] = []
    for entry in data:
        points = _get(entry, "dataPoints", [])
        if not isinstance(points, list):
            raise ValueError(f"dataPoints of {_get(entry, 'dataSource')!r} must be a list")
        series.append(DataSeries(name=_text(entry, "dataSource") or "", records=list(points)))
    return Dataset(series=series)


def load_recipe(path: Path) -> Recipe:
    return parse_recipe(_read_json(path, "Recipe"))


def load_dataset(path: Path) -> Dataset:
    return parse_dataset(_read_json(path, "Dataset"))
