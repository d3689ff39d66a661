from __future__ import annotations


class RecipeRenderError(Exception):
    """Base class for failures raised while laying out a recipe."""


class ConfigurationError(RecipeRenderError):
    """A recipe setting is malformed; callers recover with the documented default."""


class DataBindingError(RecipeRenderError):
    """A bound data source or record field is missing or has the wrong kind."""


class InvalidInputError(RecipeRenderError, ArithmeticError):
    """Layout math would produce invalid geometry (e.g. a chart with no records)."""


class CanvasError(RecipeRenderError):
    """A drawing primitive failed on the canvas backend."""
