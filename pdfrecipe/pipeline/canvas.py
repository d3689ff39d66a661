from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Protocol, Tuple

from reportlab.pdfbase import pdfmetrics

from .errors import CanvasError


UNIT_SCALE = {
    "pt": 1.0,
    "mm": 72.0 / 25.4,
    "cm": 72.0 / 2.54,
    "in": 72.0,
}

# family -> (plain, bold, italic, bold italic) among the standard PDF fonts
STANDARD_FONTS = {
    "helvetica": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "arial": ("Helvetica", "Helvetica-Bold", "Helvetica-Oblique", "Helvetica-BoldOblique"),
    "times": ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic"),
    "courier": ("Courier", "Courier-Bold", "Courier-Oblique", "Courier-BoldOblique"),
    "symbol": ("Symbol",) * 4,
    "zapfdingbats": ("ZapfDingbats",) * 4,
}

DEFAULT_LINE_WIDTH_PT = 0.567  # 0.2 mm


def font_name(family: str, style: str) -> str:
    style = (style or "").upper()
    bold = "B" in style
    italic = "I" in style
    variants = STANDARD_FONTS.get((family or "").strip().lower())
    if variants is not None:
        return variants[(2 if italic else 0) + (1 if bold else 0)]
    # anything else has to be registered with reportlab under its own name
    try:
        pdfmetrics.getFont(family)
    except KeyError as exc:
        raise CanvasError(f"Unknown font family: {family!r}") from exc
    return family


class Canvas(Protocol):
    """
    Drawing surface the renderers talk to.

    Coordinates are top-left based and expressed in the page's unit system;
    font sizes are in points.
    """

    def set_font(self, family: str, style: str, size: float) -> None: ...

    def set_text_color(self, r: int, g: int, b: int) -> None: ...

    def set_fill_color(self, r: int, g: int, b: int) -> None: ...

    def set_draw_color(self, r: int, g: int, b: int) -> None: ...

    def set_line_width(self, width: float) -> None: ...

    def move_to(self, x: float, y: float) -> None: ...

    def draw_rect(self, x: float, y: float, w: float, h: float, style: str) -> None: ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None: ...

    def draw_multi_line_text(
        self, width: float, line_height: float, text: str, border: str, alignment: str, filled: bool
    ) -> None: ...

    def draw_cell(
        self, width: float, height: float, text: str, border: str, alignment: str, filled: bool
    ) -> None: ...

    def measure_text_width(self, text: str) -> float: ...


@dataclass(frozen=True)
class DrawCall:
    name: str
    args: Tuple[Any, ...]

    def to_dict(self) -> dict:
        return {"op": self.name, "args": list(self.args)}


class InstructionRecorder:
    """Canvas that records draw calls instead of drawing them."""

    def __init__(self, units: str = "pt") -> None:
        self.units = units
        self.calls: List[DrawCall] = []
        self._font = ("Helvetica", "", 12.0)

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append(DrawCall(name, tuple(args)))

    def set_font(self, family: str, style: str, size: float) -> None:
        self._font = (family, style, float(size))
        self._record("set_font", family, style, float(size))

    def set_text_color(self, r: int, g: int, b: int) -> None:
        self._record("set_text_color", r, g, b)

    def set_fill_color(self, r: int, g: int, b: int) -> None:
        self._record("set_fill_color", r, g, b)

    def set_draw_color(self, r: int, g: int, b: int) -> None:
        self._record("set_draw_color", r, g, b)

    def set_line_width(self, width: float) -> None:
        self._record("set_line_width", float(width))

    def move_to(self, x: float, y: float) -> None:
        self._record("move_to", float(x), float(y))

    def draw_rect(self, x: float, y: float, w: float, h: float, style: str) -> None:
        self._record("draw_rect", float(x), float(y), float(w), float(h), style)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        self._record("draw_line", float(x1), float(y1), float(x2), float(y2))

    def draw_multi_line_text(
        self, width: float, line_height: float, text: str, border: str, alignment: str, filled: bool
    ) -> None:
        self._record("draw_multi_line_text", float(width), float(line_height), text, border, alignment, bool(filled))

    def draw_cell(
        self, width: float, height: float, text: str, border: str, alignment: str, filled: bool
    ) -> None:
        self._record("draw_cell", float(width), float(height), text, border, alignment, bool(filled))

    def measure_text_width(self, text: str) -> float:
        family, style, size = self._font
        return pdfmetrics.stringWidth(text, font_name(family, style), size) / UNIT_SCALE[self.units]

    def named(self, name: str) -> List[DrawCall]:
        return [call for call in self.calls if call.name == name]


def replay(calls: Iterable[DrawCall], canv: Canvas) -> None:
    for call in calls:
        getattr(canv, call.name)(*call.args)
