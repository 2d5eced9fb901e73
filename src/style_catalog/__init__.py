"""Package for the headshot style catalog."""

from .presets import DEFAULT_CATALOG, HEADSHOT_STYLES, StyleCatalog, StylePreset

__all__ = ["StylePreset", "StyleCatalog", "HEADSHOT_STYLES", "DEFAULT_CATALOG"]
