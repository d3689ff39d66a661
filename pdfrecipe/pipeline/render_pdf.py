from __future__ import annotations

import json
import math
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

from reportlab.lib import colors
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from .canvas import UNIT_SCALE, DrawCall, font_name
from .dispatch import RENDERED, ItemOutcome, page_setup_calls, process_contents
from .errors import CanvasError
from .recipe import Dataset, PageSettings, Recipe, resolve_page_settings


CELL_MARGIN_PT = 2.835  # 1 mm inner padding on each side of a cell


def _check_finite(*values: float) -> None:
    if not all(math.isfinite(v) for v in values):
        raise CanvasError(f"Non-finite geometry: {values!r}")


@contextmanager
def _backend(action: str) -> Iterator[None]:
    try:
        yield
    except (ValueError, TypeError, ArithmeticError) as exc:
        raise CanvasError(f"Could not {action}: {exc}") from exc


def _rgb(r: int, g: int, b: int) -> colors.Color:
    return colors.Color(r / 255.0, g / 255.0, b / 255.0)


def _wrap_words(text: str, font: str, size: float, max_width: float) -> List[str]:
    """
    Word wrap to ``max_width`` points. Explicit newlines always start a new line.
    """
    lines: List[str] = []
    for paragraph in (text or "").split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        cur: List[str] = []
        for w in words:
            test = " ".join(cur + [w])
            if pdfmetrics.stringWidth(test, font, size) <= max_width:
                cur.append(w)
                continue

            if cur:
                lines.append(" ".join(cur))
                cur = [w]
            else:
                # a single word wider than the box gets a line of its own
                lines.append(w)

        if cur:
            lines.append(" ".join(cur))

    return lines or [""]


class ReportLabCanvas:
    """
    Canvas backed by a reportlab PDF canvas.

    Callers work top-left in page units; reportlab works bottom-left in points,
    so every coordinate is scaled by ``k`` and flipped against the page height.
    """

    def __init__(self, output_path: Path, page: PageSettings) -> None:
        self.page = page
        self.k = UNIT_SCALE[page.units]
        self._canv = canvas.Canvas(str(output_path), pagesize=(page.width * self.k, page.height * self.k))
        self.x = page.side_margin
        self.y = page.top_margin
        self._font = "Helvetica"
        self._font_size = 12.0
        self._text_colour = colors.black
        self._fill_colour = colors.black
        self._draw_colour = colors.black
        self._cell_margin = CELL_MARGIN_PT / self.k

    def _pt(self, x: float, y: float) -> Tuple[float, float]:
        _check_finite(x, y)
        return x * self.k, (self.page.height - y) * self.k

    def set_font(self, family: str, style: str, size: float) -> None:
        self._font = font_name(family, style)
        self._font_size = float(size)

    def set_text_color(self, r: int, g: int, b: int) -> None:
        self._text_colour = _rgb(r, g, b)

    def set_fill_color(self, r: int, g: int, b: int) -> None:
        self._fill_colour = _rgb(r, g, b)

    def set_draw_color(self, r: int, g: int, b: int) -> None:
        self._draw_colour = _rgb(r, g, b)

    def set_line_width(self, width: float) -> None:
        with _backend("set line width"):
            _check_finite(width)
            self._canv.setLineWidth(width * self.k)

    def move_to(self, x: float, y: float) -> None:
        self.x = x
        self.y = y

    def _box(self, x: float, y: float, w: float, h: float, fill: bool, stroke: bool) -> None:
        _check_finite(w, h)
        if h < 0:
            y, h = y + h, -h
        if w < 0:
            x, w = x + w, -w
        self._canv.setFillColor(self._fill_colour)
        self._canv.setStrokeColor(self._draw_colour)
        left, bottom = self._pt(x, y + h)
        self._canv.rect(left, bottom, w * self.k, h * self.k, stroke=int(stroke), fill=int(fill))

    def draw_rect(self, x: float, y: float, w: float, h: float, style: str) -> None:
        # "F" fills, "FD"/"DF" fills and outlines, anything else outlines
        style = (style or "").upper()
        with _backend("draw rectangle"):
            self._box(x, y, w, h, fill="F" in style, stroke=style != "F")

    def draw_line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        with _backend("draw line"):
            self._canv.setStrokeColor(self._draw_colour)
            self._canv.line(*self._pt(x1, y1), *self._pt(x2, y2))

    def _frame(self, x: float, y: float, w: float, h: float, border: str, filled: bool) -> None:
        border = (border or "").upper()
        full = border == "1"
        if filled or full:
            self._box(x, y, w, h, fill=filled, stroke=full)
        if full or border in ("", "0"):
            return
        self._canv.setStrokeColor(self._draw_colour)
        edges = {
            "L": (x, y, x, y + h),
            "T": (x, y, x + w, y),
            "R": (x + w, y, x + w, y + h),
            "B": (x, y + h, x + w, y + h),
        }
        for edge in border:
            if edge in edges:
                x1, y1, x2, y2 = edges[edge]
                self._canv.line(*self._pt(x1, y1), *self._pt(x2, y2))

    def _text(self, x: float, y: float, w: float, h: float, text: str, alignment: str) -> None:
        if not text:
            return
        alignment = (alignment or "").upper()
        text_width = self.measure_text_width(text)
        if "R" in alignment:
            tx = x + w - self._cell_margin - text_width
        elif "C" in alignment:
            tx = x + (w - text_width) / 2
        else:
            tx = x + self._cell_margin

        font_height = self._font_size / self.k
        if "T" in alignment:
            ty = y + 0.8 * font_height
        elif "B" in alignment:
            ty = y + h - 0.2 * font_height
        else:
            ty = y + 0.5 * h + 0.3 * font_height

        self._canv.setFillColor(self._text_colour)
        self._canv.setFont(self._font, self._font_size)
        self._canv.drawString(*self._pt(tx, ty), text)

    def _width_or_remaining(self, width: float) -> float:
        if width == 0:
            return self.page.width - self.page.side_margin - self.x
        return width

    def draw_cell(self, width: float, height: float, text: str, border: str, alignment: str, filled: bool) -> None:
        width = self._width_or_remaining(width)
        with _backend("draw cell"):
            self._frame(self.x, self.y, width, height, border, filled)
            self._text(self.x, self.y, width, height, text, alignment)
        self.x += width

    def draw_multi_line_text(
        self, width: float, line_height: float, text: str, border: str, alignment: str, filled: bool
    ) -> None:
        width = self._width_or_remaining(width)
        with _backend("draw text box"):
            lines = _wrap_words(text, self._font, self._font_size, (width - 2 * self._cell_margin) * self.k)
            total_height = line_height * len(lines)
            self._frame(self.x, self.y, width, total_height, border, filled)
            for i, line in enumerate(lines):
                self._text(self.x, self.y + i * line_height, width, line_height, line, alignment)
        self.x = self.page.side_margin
        self.y += total_height

    def measure_text_width(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self._font, self._font_size) / self.k

    def save(self) -> None:
        try:
            self._canv.showPage()
            self._canv.save()
        except OSError as exc:
            raise CanvasError(f"Could not write PDF: {exc}") from exc


def render_pdf(
    recipe: Recipe,
    dataset: Dataset,
    output_path: Path,
    strict: bool = False,
) -> Tuple[List[ItemOutcome], List[DrawCall]]:
    page = resolve_page_settings(recipe.page)
    canv = ReportLabCanvas(output_path, page)
    outcomes = process_contents(canv, recipe, dataset, strict=strict, page=page)
    canv.save()

    calls = page_setup_calls(page)
    for outcome in outcomes:
        if outcome.status == RENDERED:
            calls.extend(outcome.calls)
    return outcomes, calls


def write_instructions(calls: List[DrawCall], output_path: Path) -> Path:
    output_path.write_text(json.dumps([call.to_dict() for call in calls], indent=2), encoding="utf-8")
    return output_path
