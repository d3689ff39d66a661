from __future__ import annotations

from pathlib import Path


BASE_DIR = Path(__file__).resolve().parents[1]
OUT_DIR = BASE_DIR / "out"
DB_PATH = OUT_DIR / "renders.db"

DEFAULT_PDF_NAME = "example_pdf"

# Missing data sources are skipped (lenient) unless this is switched on.
STRICT_BINDINGS = False

PREVIEW_MIN_PX = 1600


def set_out_dir(path: Path) -> None:
    global OUT_DIR, DB_PATH
    OUT_DIR = path
    DB_PATH = OUT_DIR / "renders.db"
