"""Headshot style presets offered to the user."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from headshot_generation.errors import StyleNotFoundError


@dataclass(frozen=True)
class StylePreset:
    id: str
    name: str
    prompt: str
    thumbnail_url: str


HEADSHOT_STYLES: tuple[StylePreset, ...] = (
    StylePreset(
        id="corporate-grey",
        name="Corporate Grey",
        prompt=(
            "A professional corporate headshot of a person against a solid, light grey backdrop."
            " The lighting is bright and even, creating a clean and sharp look."
            " The person looks confident and approachable."
        ),
        thumbnail_url="https://picsum.photos/seed/corporate/200/200",
    ),
    StylePreset(
        id="tech-office",
        name="Modern Tech Office",
        prompt=(
            "A professional headshot of a person in a modern tech office environment."
            " The background is slightly blurred, showing glimpses of glass walls and minimalist furniture."
            " The lighting is natural, as if from a large window."
        ),
        thumbnail_url="https://picsum.photos/seed/tech/200/200",
    ),
    StylePreset(
        id="outdoor-natural",
        name="Outdoor Natural",
        prompt=(
            "A professional headshot taken outdoors with soft, natural light."
            " The background is a pleasant, out-of-focus mix of green foliage,"
            " creating a warm and friendly feel."
        ),
        thumbnail_url="https://picsum.photos/seed/outdoor/200/200",
    ),
    StylePreset(
        id="black-white",
        name="Classic Black & White",
        prompt=(
            "A timeless, classic black and white professional headshot."
            " The lighting is high-contrast and dramatic, emphasizing facial features"
            " against a plain dark background."
        ),
        thumbnail_url="https://picsum.photos/seed/bw/200/200",
    ),
)


class StyleCatalog(Sequence[StylePreset]):
    """Ordered, read-only collection of presets with lookup by id."""

    def __init__(self, presets: Iterable[StylePreset]) -> None:
        self._presets = tuple(presets)
        self._by_id: dict[str, StylePreset] = {}
        for preset in self._presets:
            if preset.id in self._by_id:
                raise ValueError(f"Duplicate style id: {preset.id}")
            self._by_id[preset.id] = preset

    def __getitem__(self, index):  # type: ignore[override]
        return self._presets[index]

    def __len__(self) -> int:
        return len(self._presets)

    def __iter__(self) -> Iterator[StylePreset]:
        return iter(self._presets)

    def __repr__(self) -> str:
        return f"StyleCatalog({list(self.ids())!r})"

    def ids(self) -> tuple[str, ...]:
        return tuple(p.id for p in self._presets)

    def default(self) -> StylePreset | None:
        """First preset, used as the initial selection after an upload."""

        return self._presets[0] if self._presets else None

    def get(self, style_id: str | None) -> StylePreset | None:
        if style_id is None:
            return None
        return self._by_id.get(style_id)

    def require(self, style_id: str) -> StylePreset:
        preset = self.get(style_id)
        if preset is None:
            raise StyleNotFoundError(style_id)
        return preset


DEFAULT_CATALOG = StyleCatalog(HEADSHOT_STYLES)


__all__ = ["StylePreset", "StyleCatalog", "HEADSHOT_STYLES", "DEFAULT_CATALOG"]
