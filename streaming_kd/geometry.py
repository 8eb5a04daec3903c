from dataclasses import dataclass
from enum import Enum
import math
from mathutils import Vector


def vector_min(ls: Vector, rs: Vector) -> Vector:
    """
    Selects the component-wise minimums of two vectors.

    >>> tuple(vector_min(Vector((1, -5, 69)), Vector((-1, 0, 420))))
    (-1.0, -5.0, 69.0)
    """
    return Vector([l if l < r else r for l, r in zip(ls, rs)])


def vector_max(ls: Vector, rs: Vector) -> Vector:
    """
    Selects the component-wise maximums of two vectors.

    >>> tuple(vector_max(Vector((1, -5, 69)), Vector((-1, 0, 420))))
    (1.0, 0.0, 420.0)
    """
    return Vector([l if l > r else r for l, r in zip(ls, rs)])


def vector_abs(v: Vector) -> Vector:
    """
    Calculates the component-wise absolute values.

    >>> tuple(vector_abs(Vector((-42, 0, 69))))
    (42.0, 0.0, 69.0)
    """
    return Vector([abs(e) for e in v])


class Axis(Enum):
    X = 0
    Y = 1
    Z = 2


class BoundKind(Enum):
    LOWER = 0
    UPPER = 1


@dataclass
class AABB:
    min: Vector
    max: Vector

    @staticmethod
    def empty() -> "AABB":
        """
        An inverted box, which becomes the other box on the first union or extension.
        """
        inf = float("inf")
        return AABB(Vector((inf, inf, inf)), Vector((-inf, -inf, -inf)))

    def copy(self) -> "AABB":
        return AABB(self.min.copy(), self.max.copy())

    def union(self, other: "AABB") -> "AABB":
        """
        >>> box = AABB(Vector((0, 0, 0)), Vector((1, 1, 1))).union(AABB(Vector((-1, 0.5, 0)), Vector((0, 2, 0.5))))
        >>> tuple(box.min), tuple(box.max)
        ((-1.0, 0.0, 0.0), (1.0, 2.0, 1.0))
        """
        return AABB(
            min=vector_min(self.min, other.min),
            max=vector_max(self.max, other.max),
        )

    def extend(self, other: "AABB") -> None:
        """
        Enlarges this AABB to encompass another.
        """
        self.extend_point(other.min)
        self.extend_point(other.max)

    def extend_point(self, point: Vector) -> None:
        """
        Enlarges this AABB to encompass a point.
        """
        for axis in Axis:
            self.min[axis.value] = min(self.min[axis.value], point[axis.value])
            self.max[axis.value] = max(self.max[axis.value], point[axis.value])

    def center(self) -> Vector:
        return (self.min + self.max) / 2

    def length_on(self, axis: Axis) -> float:
        return self.max[axis.value] - self.min[axis.value]

    def longest_axis(self) -> Axis:
        """
        The axis of greatest extent, preferring the earlier axis on ties.

        >>> AABB(Vector((0, 0, 0)), Vector((1, 3, 2))).longest_axis()
        <Axis.Y: 1>
        """
        longest = Axis.X
        for axis in (Axis.Y, Axis.Z):
            if self.length_on(axis) > self.length_on(longest):
                longest = axis
        return longest

    def bounds(self, bound_kind: BoundKind) -> Vector:
        return self.min if bound_kind == BoundKind.LOWER else self.max

    def bound(self, axis: Axis, bound_kind: BoundKind) -> float:
        return self.bounds(bound_kind)[axis.value]

    def with_bound(self, axis: Axis, bound_kind: BoundKind, bound: float) -> "AABB":
        if bound_kind == BoundKind.LOWER:
            new_min = Vector(self.min)
            new_min[axis.value] = bound
            return AABB(new_min, Vector(self.max))
        else:
            new_max = Vector(self.max)
            new_max[axis.value] = bound
            return AABB(Vector(self.min), new_max)

    def contains(self, other: "AABB") -> bool:
        return all(
            self.min[axis.value] <= other.min[axis.value] and
            other.max[axis.value] <= self.max[axis.value]
            for axis in Axis
        )


def surfel_bounds(position: Vector, normal: Vector, radius: float) -> AABB:
    """
    Bounds of a disc with the given radius around position, facing along normal.
    Along each axis, the disc extends radius * sin(angle between normal and axis).

    >>> box = surfel_bounds(Vector((1, 2, 3)), Vector((0, 0, 1)), 0.5)
    >>> tuple(box.min), tuple(box.max)
    ((0.5, 1.5, 3.0), (1.5, 2.5, 3.0))
    """
    length = normal.length
    if length == 0:
        # no orientation, so assume the disc could face anywhere
        half_extent = Vector((radius, radius, radius))
    else:
        n = normal / length
        half_extent = Vector(
            [radius * math.sqrt(max(0.0, 1 - c * c)) for c in n])
    return AABB(position - half_extent, position + half_extent)


if __name__ == "__main__":
    import doctest
    doctest.testmod(verbose=True)
