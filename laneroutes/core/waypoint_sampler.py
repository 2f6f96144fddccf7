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

import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Sequence

import numpy as np

from laneroutes.core.coordinates import Heading, Point
from laneroutes.core.road_map import RoadMap
from laneroutes.core.utils.math import fast_quaternion_from_angle


class LaneIdentity(NamedTuple):
    """Identifies a lane regardless of the offset along it."""

    road_id: str
    lane_id: str

    def __str__(self) -> str:
        return f"{self.road_id}/{self.lane_id}"


@dataclass(frozen=True)
class Waypoint:
    """A point on a specific lane of a specific road."""

    road_id: str
    """Identifier of the road the lane belongs to."""
    lane_id: str
    """Identifier of the lane under this waypoint."""
    s: float
    """Longitudinal distance along the lane centerline."""
    position: Point
    """Point positioned on lane center."""
    heading: Heading
    """Heading angle of lane at this point. Units=rad"""
    is_in_intersection: bool = False
    """True if the lane under this waypoint belongs to a junction."""

    @property
    def lane_identity(self) -> LaneIdentity:
        """The deduplication key of the lane under this waypoint."""
        return LaneIdentity(self.road_id, self.lane_id)

    @property
    def orientation(self) -> np.ndarray:
        """The lane orientation as a quaternion [x, y, z, w]."""
        return fast_quaternion_from_angle(self.heading)


class WaypointSampler:
    """Query surface over a road network used to synthesize routes.

    Implementations must not mutate the underlying road network.
    """

    def road_length(self, road_id: str) -> float:
        """The length of the road with the given identifier."""
        raise NotImplementedError()

    def lane_end_anchors(self) -> Sequence[Waypoint]:
        """One waypoint per lane in the network, at the end of that lane.
        The order must be stable between calls."""
        raise NotImplementedError()

    def successors_of(self, waypoint: Waypoint) -> Sequence[Waypoint]:
        """Waypoints at the start of every lane that directly continues from `waypoint`."""
        raise NotImplementedError()

    def advance(self, waypoint: Waypoint, distance: float) -> Sequence[Waypoint]:
        """The waypoints reached by moving `distance` forward from `waypoint`.
        More than one result is possible if the move crosses into a branching lane end."""
        raise NotImplementedError()


class RoadMapWaypointSampler(WaypointSampler):
    """A `WaypointSampler` over any `RoadMap` implementation."""

    def __init__(self, road_map: RoadMap):
        self._log = logging.getLogger(self.__class__.__name__)
        self._road_map = road_map

    @property
    def road_map(self) -> RoadMap:
        """The road map queried by this sampler."""
        return self._road_map

    def road_length(self, road_id: str) -> float:
        return self._road_map.road_by_id(road_id).length

    def lane_end_anchors(self) -> List[Waypoint]:
        return [
            self._waypoint_at(lane, lane.length)
            for road in self._road_map.roads
            for lane in road.lanes
        ]

    def successors_of(self, waypoint: Waypoint) -> List[Waypoint]:
        lane = self._road_map.lane_by_id(waypoint.lane_id)
        return [self._waypoint_at(out_lane, 0.0) for out_lane in lane.outgoing_lanes]

    def advance(self, waypoint: Waypoint, distance: float) -> List[Waypoint]:
        assert distance >= 0, f"Cannot advance a negative distance ({distance})"
        result = []
        lane = self._road_map.lane_by_id(waypoint.lane_id)
        pending = [(lane, waypoint.s + distance)]
        while pending:
            lane, offset = pending.pop(0)
            if offset <= lane.length:
                result.append(self._waypoint_at(lane, offset))
                continue
            remaining = offset - lane.length
            for out_lane in lane.outgoing_lanes:
                pending.append((out_lane, remaining))
        if not result:
            self._log.debug(
                f"Advancing {distance} from {waypoint.lane_identity} ran past a dead end"
            )
        return result

    @staticmethod
    def _waypoint_at(lane: RoadMap.Lane, offset: float) -> Waypoint:
        pose = lane.center_pose_at_offset(offset)
        return Waypoint(
            road_id=lane.road.road_id,
            lane_id=lane.lane_id,
            s=offset,
            position=pose.point,
            heading=pose.heading,
            is_in_intersection=lane.in_junction,
        )
