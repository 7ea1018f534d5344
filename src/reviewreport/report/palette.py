from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

import matplotlib
from matplotlib.colors import to_hex


@dataclass(frozen=True)
class Palette:
    """Category label -> colour mapping handed to every chart function."""

    colors: Mapping[str, str] = field(default_factory=dict)
    default: str = "#6c757d"
    trend: str = "#dc3545"

    def color_for(self, label) -> str:
        return self.colors.get(str(label), self.default)

    def colors_for(self, labels: Iterable) -> List[str]:
        return [self.color_for(label) for label in labels]

    def with_labels(self, labels: Iterable, cmap: str = "tab10") -> "Palette":
        """Copy of this palette with colours assigned to any labels it does not know yet."""
        merged: Dict[str, str] = dict(self.colors)
        extra = Palette.from_labels([label for label in labels if str(label) not in merged], cmap=cmap)
        merged.update(extra.colors)
        return Palette(colors=merged, default=self.default, trend=self.trend)

    @classmethod
    def from_labels(cls, labels: Iterable, cmap: str = "tab10", **kwargs) -> "Palette":
        """Stable mapping: sorted distinct labels take colormap colours in order."""
        names = sorted({str(label) for label in labels})
        colormap = matplotlib.colormaps[cmap]
        n_colors = getattr(colormap, "N", 10)
        colors = {name: to_hex(colormap(i % n_colors)) for i, name in enumerate(names)}
        return cls(colors=colors, **kwargs)


DEFAULT_PALETTE = Palette(
    colors={
        "submitted": "#6c757d",
        "published": "#0d6efd",
    },
    default="#6c757d",
    trend="#dc3545",
)

__all__ = ["Palette", "DEFAULT_PALETTE"]
