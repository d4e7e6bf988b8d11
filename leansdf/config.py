"""
Settings for LOD generation and render-asset preparation.

Defaults match what the render-asset step uses when no settings are given:
an 8³ search grid, at most 4 LOD levels, no cell smaller than 0.5 units and
an 8³ occupancy texture per surface box.
"""

import json
import numbers
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

from .grid import check_count


@dataclass(frozen=True)
class LODSettings:
    """
    Parameters for :func:`leansdf.grid.generate_lod_boxes` and
    :func:`leansdf.render_asset.prepare_asset`.
    """
    resolution: int = 8
    max_lods: int = 4
    min_box_size: float = 0.5
    texture_resolution: int = 8

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ``ValueError`` for settings the generators cannot run with."""
        check_count("resolution", self.resolution, 1)
        check_count("max_lods", self.max_lods)
        check_count("texture_resolution", self.texture_resolution, 1)
        if isinstance(self.min_box_size, bool) or not isinstance(self.min_box_size, numbers.Real):
            raise ValueError(f"min_box_size must be a number, got {self.min_box_size!r}")
        if self.min_box_size < 0:
            raise ValueError(f"min_box_size must be non-negative, got {self.min_box_size}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LODSettings":
        """Build settings from *data*, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> "LODSettings":
        with open(path) as f:
            return cls.from_dict(json.load(f))

    def save_json(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
