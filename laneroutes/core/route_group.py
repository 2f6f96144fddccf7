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

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from laneroutes.core.coordinates import BoundingBox, Dimensions, Heading, Point, Pose
from laneroutes.core.waypoint_sampler import LaneIdentity, Waypoint

DEFAULT_ROUTE_WEIGHT = 1.0
DEFAULT_TRIGGER_EXTENT = Dimensions(0.7, 0.7, 0.5)


@dataclass(frozen=True)
class Route:
    """A polyline sampled along one lane."""

    lane: LaneIdentity
    """The lane this route was sampled from."""
    positions: np.ndarray
    """Read-only (N, 3) array of sampled positions, N >= 2."""
    offsets: Tuple[float, ...]
    """Longitudinal offset along the lane of every position."""
    weight: float = DEFAULT_ROUTE_WEIGHT
    """Selection weight for consumers choosing between routes of a group."""

    def __post_init__(self):
        positions = np.array(self.positions, dtype=np.float64)
        assert positions.ndim == 2 and positions.shape[1] == 3, positions.shape
        assert len(positions) >= 2, "A route needs at least 2 points"
        assert len(self.offsets) == len(positions)
        positions.setflags(write=False)
        # frozen dataclass; bypass __setattr__ to store the normalized copy
        object.__setattr__(self, "positions", positions)
        object.__setattr__(self, "offsets", tuple(float(o) for o in self.offsets))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Route):
            return False
        return (
            self.lane == other.lane
            and self.weight == other.weight
            and self.offsets == other.offsets
            and np.array_equal(self.positions, other.positions)
        )

    def __hash__(self):
        return hash((self.lane, self.weight, self.offsets))

    def __len__(self) -> int:
        return len(self.positions)

    @property
    def points(self) -> List[Point]:
        """The sampled positions as points."""
        return [Point.from_np_array(p) for p in self.positions]

    @property
    def length(self) -> float:
        """The 3D length of the polyline."""
        return float(np.sum(np.linalg.norm(np.diff(self.positions, axis=0), axis=1)))


@dataclass
class RouteGroup:
    """Routes branching from one lane-end point of the road network.

    `is_intersection` is derived from every lane continuing from the anchor,
    including lanes whose routes belong to another group.
    """

    anchor: Waypoint
    """The branch waypoint this group originates from."""
    pose: Pose
    """Anchor pose, lifted by the trigger height."""
    is_intersection: bool
    trigger_extent: Dimensions = DEFAULT_TRIGGER_EXTENT
    _routes: List[Route] = field(default_factory=list, repr=False)

    @classmethod
    def at_anchor(
        cls,
        anchor: Waypoint,
        is_intersection: bool,
        trigger_height: float,
        trigger_extent: Dimensions = DEFAULT_TRIGGER_EXTENT,
    ) -> RouteGroup:
        """Create an empty group positioned at `anchor` raised by `trigger_height`."""
        return cls(
            anchor=anchor,
            pose=Pose.from_center(
                anchor.position.lifted(trigger_height), Heading(anchor.heading)
            ),
            is_intersection=is_intersection,
            trigger_extent=trigger_extent,
        )

    def add_route(self, route: Route):
        """Attach a route to this group."""
        self._routes.append(route)

    @property
    def routes(self) -> Tuple[Route, ...]:
        """The routes of this group in insertion order."""
        return tuple(self._routes)

    @property
    def position(self) -> np.ndarray:
        return self.pose.position

    @property
    def orientation(self) -> np.ndarray:
        return self.pose.orientation

    @property
    def heading(self) -> Heading:
        return self.pose.heading

    @property
    def trigger_box(self) -> BoundingBox:
        """The axis aligned trigger volume centered on this group."""
        return BoundingBox.around(self.pose.point, self.trigger_extent)

    def lane_identities(self) -> Sequence[LaneIdentity]:
        return [route.lane for route in self._routes]

    def __len__(self) -> int:
        return len(self._routes)
