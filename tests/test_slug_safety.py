from __future__ import annotations

from pdfrecipe.pipeline.run import slug_from_name


def test_slug_sanitization() -> None:
    assert slug_from_name("Quarterly / Sales: 2025!") == "quarterly-sales-2025"
    assert slug_from_name("example_pdf") == "example-pdf"


def test_slug_falls_back_to_hash() -> None:
    slug = slug_from_name("???")
    assert len(slug) == 12
    assert slug.isalnum()
