from dataclasses import dataclass, field
from typing import Iterable, Sequence
from mathutils import Vector
from .errors import EmptyAggregationInput
from .geometry import AABB, surfel_bounds
from .layout import SampleId


def _zero() -> Vector:
    return Vector((0, 0, 0))


@dataclass
class Surfel:
    """
    A small oriented, colored disc approximating a patch of surface.
    """
    position: Vector = field(default_factory=_zero)
    normal: Vector = field(default_factory=_zero)
    color: Vector = field(default_factory=_zero)
    radius: float = 0.0

    def copy(self) -> "Surfel":
        return Surfel(
            position=self.position.copy(),
            normal=self.normal.copy(),
            color=self.color.copy(),
            radius=self.radius,
        )

    @property
    def bounds(self) -> AABB:
        return surfel_bounds(self.position, self.normal, self.radius)


def compute_lod_surfel(contained: Iterable[SampleId], surfels: Sequence[Surfel]) -> Surfel:
    """
    Computes a surfel representing all the contained surfels,
    currently just their average position, normal and color.
    The radius is left at zero for the caller to pick.
    """
    lod = Surfel()
    count = 0
    for idx in contained:
        s = surfels[idx]
        lod.position += s.position
        lod.normal += s.normal
        lod.color += s.color
        count += 1
    if count == 0:
        raise EmptyAggregationInput()
    lod.position /= count
    lod.normal /= count
    lod.color /= count
    return lod
