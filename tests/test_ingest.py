from __future__ import annotations

import json
import tempfile
from pathlib import Path
import unittest

from pdfrecipe.pipeline.ingest import load_dataset, load_recipe, parse_font, parse_recipe
from pdfrecipe.pipeline.recipe import UNSET, Colour


SAMPLES = Path(__file__).resolve().parents[1] / "samples"


class IngestTests(unittest.TestCase):
    def test_sample_recipe(self) -> None:
        recipe = load_recipe(SAMPLES / "pdf_recipe.json")
        self.assertEqual(recipe.page.pdf_name, "quarterly_sales")
        self.assertEqual(recipe.page.watermark, Colour(250, 250, 245))
        self.assertEqual([item.item_type for item in recipe.contents], ["textBlock", "table", "verticalBar"])
        table = recipe.contents[1]
        self.assertEqual((table.data_source, table.data_series, table.data_series_category), ("sales", "Volume", "Region"))
        self.assertTrue(table.font.header_font.cell_fill.filled)
        chart = recipe.contents[2].chart_settings
        self.assertEqual(chart.number_of_y_axis_ticks, 5)
        self.assertEqual(chart.axis_format.line_width, 0.8)
        self.assertEqual(chart.chart_title.text, "Volume by region")

    def test_sample_dataset(self) -> None:
        dataset = load_dataset(SAMPLES / "data.json")
        series = dataset.find("sales")
        self.assertIsNotNone(series)
        self.assertEqual(len(series.records), 4)
        self.assertIsNone(dataset.find("missing"))

    def test_absent_fields_are_unset(self) -> None:
        font = parse_font({"colour": {"R": 12}})
        self.assertEqual(font.colour, Colour(12, UNSET, UNSET))
        self.assertIsNone(font.size)
        self.assertIsNone(font.line_spacing)
        self.assertIsNone(font.style)
        self.assertIsNone(font.cell_fill.filled)
        self.assertIsNone(font.header_font)

    def test_keys_match_case_insensitively(self) -> None:
        recipe = parse_recipe({"PdfSettings": {"PageUnits": "mm"}, "PdfContents": [{"ItemType": "textBlock", "Text": "hi"}]})
        self.assertEqual(recipe.page.units, "mm")
        self.assertEqual(recipe.contents[0].text, "hi")

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_recipe(Path("does-not-exist.json"))

    def test_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "broken.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_recipe(path)
            path.write_text(json.dumps({"dataSource": "x"}), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_dataset(path)


if __name__ == "__main__":
    unittest.main()
