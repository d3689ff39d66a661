from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from .errors import ConfigurationError, DataBindingError


logger = logging.getLogger(__name__)

UNSET = -1

FieldValue = Union[str, int, float]
DataRecord = Dict[str, FieldValue]


@dataclass
class Colour:
    R: int = UNSET
    G: int = UNSET
    B: int = UNSET

    def channels(self) -> tuple[int, int, int]:
        return self.R, self.G, self.B

    def merged_over(self, default: "Colour") -> "Colour":
        # each channel is overridden on its own, so a recipe may change only R
        return Colour(
            R=self.R if self.R >= 0 else default.R,
            G=self.G if self.G >= 0 else default.G,
            B=self.B if self.B >= 0 else default.B,
        )


@dataclass
class CellBorders:
    style: Optional[str] = None
    colour: Colour = field(default_factory=Colour)


@dataclass
class CellFill:
    filled: Optional[bool] = None
    colour: Colour = field(default_factory=Colour)


@dataclass
class FontSpec:
    family: Optional[str] = None
    style: Optional[str] = None
    size: Optional[float] = None
    line_spacing: Optional[float] = None
    alignment: Optional[str] = None
    colour: Colour = field(default_factory=Colour)
    cell_borders: CellBorders = field(default_factory=CellBorders)
    cell_fill: CellFill = field(default_factory=CellFill)
    header_font: Optional["FontSpec"] = None

    @property
    def line_height(self) -> float:
        return float(self.size or 0.0) + float(self.line_spacing or 0.0)


@dataclass
class ShapeStyle:
    style: str = ""
    fill_colour: Colour = field(default_factory=Colour)
    border_colour: Colour = field(default_factory=Colour)
    line_width: Optional[float] = None
    line_colour: Colour = field(default_factory=Colour)


@dataclass
class ChartTitle:
    text: str = ""
    distance_from_top: float = 0.0
    font: FontSpec = field(default_factory=FontSpec)


@dataclass
class ChartSettings:
    watermark_format: ShapeStyle = field(default_factory=ShapeStyle)
    series_format: ShapeStyle = field(default_factory=ShapeStyle)
    axis_format: ShapeStyle = field(default_factory=ShapeStyle)
    chart_text_font: FontSpec = field(default_factory=FontSpec)
    chart_title: ChartTitle = field(default_factory=ChartTitle)
    distance_from_top: float = 0.0
    distance_from_bottom: float = 0.0
    distance_from_sides: float = 0.0
    number_of_y_axis_ticks: int = 0
    gap_between_bars: float = 0.0
    tick_mark_length: float = 0.0


@dataclass
class ContentItem:
    item_type: str
    text: str = ""
    data_source: str = ""
    data_series: str = ""
    data_series_category: str = ""
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None
    font: FontSpec = field(default_factory=FontSpec)
    chart_settings: ChartSettings = field(default_factory=ChartSettings)


@dataclass
class PageSettings:
    orientation: Optional[str] = None
    units: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    side_margin: Optional[float] = None
    top_margin: Optional[float] = None
    watermark: Colour = field(default_factory=Colour)
    pdf_name: str = ""
    pdf_location: str = ""

    @property
    def has_watermark(self) -> bool:
        return self.watermark.R >= 0


@dataclass
class Recipe:
    page: PageSettings = field(default_factory=PageSettings)
    contents: List[ContentItem] = field(default_factory=list)


@dataclass
class DataSeries:
    name: str
    records: List[DataRecord] = field(default_factory=list)


@dataclass
class Dataset:
    series: List[DataSeries] = field(default_factory=list)

    def find(self, name: str) -> Optional[DataSeries]:
        for candidate in self.series:
            if candidate.name == name:
                return candidate
        return None


# -------------------- Page defaults --------------------
DEFAULT_ORIENTATION = "P"
DEFAULT_UNITS = "pt"
DEFAULT_PAGE_WIDTH = 595.28
DEFAULT_PAGE_HEIGHT = 841.89
DEFAULT_SIDE_MARGIN = 28.3
DEFAULT_TOP_MARGIN = 42.5

ORIENTATIONS = {"P", "L"}
UNITS = {"pt", "mm", "cm", "in"}


def _recover(setting: str, value, default):
    # ConfigurationError never leaves this module: the documented default wins
    error = ConfigurationError(f"Unsupported {setting}: {value!r}")
    logger.warning("%s; using %r", error, default)
    return default


def resolve_page_settings(settings: PageSettings) -> PageSettings:
    orientation = settings.orientation or DEFAULT_ORIENTATION
    if orientation not in ORIENTATIONS:
        orientation = _recover("page orientation", orientation, DEFAULT_ORIENTATION)

    units = settings.units or DEFAULT_UNITS
    if units not in UNITS:
        units = _recover("page units", units, DEFAULT_UNITS)

    width = DEFAULT_PAGE_WIDTH
    if settings.width is not None:
        width = settings.width if settings.width > 0 else _recover("page width", settings.width, width)
    height = DEFAULT_PAGE_HEIGHT
    if settings.height is not None:
        height = settings.height if settings.height > 0 else _recover("page height", settings.height, height)

    side_margin = DEFAULT_SIDE_MARGIN
    if settings.side_margin is not None:
        side_margin = (
            settings.side_margin
            if settings.side_margin >= 0
            else _recover("page side margin", settings.side_margin, side_margin)
        )
    top_margin = DEFAULT_TOP_MARGIN
    if settings.top_margin is not None:
        top_margin = (
            settings.top_margin
            if settings.top_margin >= 0
            else _recover("page top margin", settings.top_margin, top_margin)
        )

    if orientation == "L":
        width, height = height, width

    watermark = settings.watermark
    if settings.has_watermark:
        watermark = Colour(R=watermark.R, G=max(watermark.G, 0), B=max(watermark.B, 0))

    return replace(
        settings,
        orientation=orientation,
        units=units,
        width=width,
        height=height,
        side_margin=side_margin,
        top_margin=top_margin,
        watermark=watermark,
    )


# -------------------- Record access --------------------
def _field(record: DataRecord, name: str) -> FieldValue:
    if not isinstance(record, dict):
        raise DataBindingError(f"Data point is not a record: {record!r}")
    if name not in record:
        raise DataBindingError(f"Record has no field {name!r}")
    return record[name]


def record_text(record: DataRecord, name: str) -> str:
    value = _field(record, name)
    if not isinstance(value, str):
        raise DataBindingError(f"Field {name!r} is not text: {value!r}")
    return value


def record_number(record: DataRecord, name: str) -> float:
    value = _field(record, name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DataBindingError(f"Field {name!r} is not a number: {value!r}")
    if not math.isfinite(value):
        raise DataBindingError(f"Field {name!r} is not a finite number: {value!r}")
    return float(value)


def lookup_series(item: ContentItem, dataset: Dataset, strict: bool = False) -> Optional[DataSeries]:
    series = dataset.find(item.data_source)
    if series is None:
        if strict:
            raise DataBindingError(f"Data source not found: {item.data_source!r}")
        logger.warning("Data source %r not found; %s left empty", item.data_source, item.item_type)
    return series
