# Copyright (C) 2021. Huawei Technologies Co., Ltd. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.

import math
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, SupportsFloat, Union

import numpy as np
from cached_property import cached_property

from laneroutes.core.utils.math import fast_quaternion_from_angle, yaw_from_quaternion


class Dimensions(NamedTuple):
    """Representation of the size of a 3-dimensional form."""

    length: float
    width: float
    height: float

    @classmethod
    def from_string(cls, value: str) -> "Dimensions":
        """Parse dimensions written as `length,width,height`."""
        parts = [float(p) for p in value.split(",")]
        if len(parts) != 3:
            raise ValueError(f"Expected `length,width,height` but got `{value}`")
        return cls(*parts)


class Point(NamedTuple):
    """A coordinate in space."""

    x: float
    y: float
    z: Optional[float] = 0

    @classmethod
    def from_np_array(cls, np_array: np.ndarray):
        """Factory for constructing a Point object from a numpy array."""
        assert 2 <= len(np_array) <= 3
        z = np_array[2] if len(np_array) > 2 else 0.0
        return cls(float(np_array[0]), float(np_array[1]), float(z))

    def lifted(self, height: float) -> "Point":
        """This point moved vertically by `height`."""
        return self._replace(z=(self.z or 0) + height)


class RefLinePoint(NamedTuple):
    """A reference line coordinate, also known as the Frenet coordinate system."""

    s: float  # offset along lane from start of lane
    t: Optional[float] = 0  # horizontal displacement from center of lane
    h: Optional[float] = 0  # vertical displacement from surface of lane


@dataclass(frozen=True)
class BoundingBox:
    """A 3-dimensional axis aligned box."""

    min_pt: Point
    max_pt: Point

    @classmethod
    def around(cls, center: Point, half_extents: Dimensions) -> "BoundingBox":
        """A box centered on `center` spanning `half_extents` in every direction."""
        return cls(
            min_pt=Point(
                center.x - half_extents.length,
                center.y - half_extents.width,
                center.z - half_extents.height,
            ),
            max_pt=Point(
                center.x + half_extents.length,
                center.y + half_extents.width,
                center.z + half_extents.height,
            ),
        )

    @property
    def length(self):
        """The length of the box."""
        return self.max_pt.x - self.min_pt.x

    @property
    def width(self):
        """The width of the box."""
        return self.max_pt.y - self.min_pt.y

    @property
    def height(self):
        """The height of the box."""
        return self.max_pt.z - self.min_pt.z

    @property
    def center(self):
        """The center point of the box."""
        return Point(
            x=(self.min_pt.x + self.max_pt.x) / 2,
            y=(self.min_pt.y + self.max_pt.y) / 2,
            z=(self.min_pt.z + self.max_pt.z) / 2,
        )

    @property
    def as_dimensions(self) -> Dimensions:
        """The box dimensions. This will lose offset information."""
        return Dimensions(length=self.length, width=self.width, height=self.height)

    def contains(self, pt: Point) -> bool:
        """Returns True iff pt is within the box (inclusive on all faces)."""
        return (
            self.min_pt.x <= pt.x <= self.max_pt.x
            and self.min_pt.y <= pt.y <= self.max_pt.y
            and self.min_pt.z <= pt.z <= self.max_pt.z
        )


class Heading(float):
    """In this space we use radians, 0 is facing north, and turn counter-clockwise."""

    def __init__(self, value=...):
        float.__init__(value)

    def __new__(self, x: Union[SupportsFloat, Ellipsis.__class__] = ...):
        """A override to constrain heading to -pi to pi"""
        value = x
        if isinstance(value, (int, float)):
            value = value % (2 * math.pi)
            if value > math.pi:
                value -= 2 * math.pi
        if x in {..., None}:
            value = 0
        return float.__new__(self, value)

    def __repr__(self):
        return f"Heading({super().__repr__()})"


@dataclass
class Pose:
    """A pair of position and orientation values."""

    position: np.ndarray  # [x, y, z]
    orientation: np.ndarray  # [a, b, c, d] -> a + bi + cj + dk = 0
    heading_: Optional[Heading] = None  # cached heading to avoid recomputing

    def __post_init__(self):
        if not isinstance(self.position, np.ndarray):
            self.position = np.array(self.position, dtype=np.float64)
        assert len(self.position) <= 3
        if len(self.position) < 3:
            self.position = np.resize(self.position, 3)
        assert len(self.orientation) == 4
        if not isinstance(self.orientation, np.ndarray):
            self.orientation = np.array(self.orientation, dtype=np.float64)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Pose):
            return False
        return (self.position == other.position).all() and (
            self.orientation == other.orientation
        ).all()

    def __hash__(self):
        return hash((*self.position, *self.orientation))

    @cached_property
    def point(self) -> Point:
        """The positional value of this pose as a point."""
        return Point(*self.position)

    @classmethod
    def from_center(cls, base_position, heading: Heading):
        """Convert from centred location

        Args:
            base_position: The center of the object's bounds
            heading: The heading of the object
        """
        assert isinstance(heading, Heading)

        position = np.array([*base_position, 0][:3], dtype=np.float64)
        orientation = fast_quaternion_from_angle(heading)

        return cls(
            position=position,
            orientation=orientation,
            heading_=heading,
        )

    @property
    def heading(self):
        """The heading value converted from orientation."""
        if self.heading_ is None:
            yaw = yaw_from_quaternion(self.orientation)
            self.heading_ = Heading(yaw)

        return self.heading_
