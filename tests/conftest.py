from __future__ import annotations

import pytest

from pdfrecipe.pipeline.canvas import InstructionRecorder
from pdfrecipe.pipeline.recipe import DataSeries, Dataset, PageSettings, resolve_page_settings


@pytest.fixture
def recorder() -> InstructionRecorder:
    return InstructionRecorder(units="pt")


@pytest.fixture
def page() -> PageSettings:
    return resolve_page_settings(PageSettings(side_margin=20.0, top_margin=30.0))


@pytest.fixture
def flat_page() -> PageSettings:
    return resolve_page_settings(PageSettings(side_margin=0.0, top_margin=0.0))


@pytest.fixture
def sales() -> Dataset:
    return Dataset(
        series=[
            DataSeries(
                name="sales",
                records=[
                    {"Region": "North", "Volume": 10},
                    {"Region": "South", "Volume": 40},
                    {"Region": "East", "Volume": 25},
                ],
            )
        ]
    )
