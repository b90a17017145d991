from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class YearlyObservation:
    code: str
    year: int
    rank: int | None
    ladder: float | None
    factors: dict[str, float | None] = field(default_factory=dict)
    country: str = ""   # name as written in the source row


@dataclass(frozen=True)
class GeometryEntry:
    code: str | None
    name: str
    geometry: dict | None = field(default=None, compare=False, repr=False)

    @property
    def tagged(self) -> bool:
        return self.code is not None

    def to_feature(self) -> dict:
        return {
            "type": "Feature",
            "id": self.code,
            "properties": {"name": self.name, "iso_a3": self.code},
            "geometry": self.geometry,
        }
