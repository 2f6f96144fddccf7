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

from typing import Dict, List, Sequence, Set, Tuple

from laneroutes.core.coordinates import Heading, Point
from laneroutes.core.waypoint_sampler import LaneIdentity, Waypoint, WaypointSampler


class MockWaypointSampler(WaypointSampler):
    """Straight lanes along +x, one row per lane, wired up by hand.

    Roads hold a single lane each, so the road length is the lane length.
    """

    def __init__(self):
        self._lengths: Dict[str, float] = {}
        self._junctions: Dict[str, bool] = {}
        self._rows: Dict[LaneIdentity, int] = {}
        self._successors: Dict[LaneIdentity, List[LaneIdentity]] = {}
        self._forks: Set[Tuple[LaneIdentity, float]] = set()
        self.advance_calls: List[Tuple[LaneIdentity, float]] = []

    def add_lane(
        self,
        road_id: str,
        lane_id: str,
        length: float,
        in_junction: bool = False,
        successors: Sequence[Tuple[str, str]] = (),
    ) -> LaneIdentity:
        lane = LaneIdentity(road_id, lane_id)
        self._lengths[road_id] = length
        self._junctions[road_id] = in_junction
        self._rows[lane] = len(self._rows)
        self._successors[lane] = [LaneIdentity(*s) for s in successors]
        return lane

    def fork_at(self, lane: LaneIdentity, distance: float):
        """Make `advance` return two waypoints for this lane and distance."""
        self._forks.add((lane, distance))

    def waypoint(self, lane: LaneIdentity, s: float) -> Waypoint:
        return Waypoint(
            road_id=lane.road_id,
            lane_id=lane.lane_id,
            s=s,
            position=Point(s, 10.0 * self._rows[lane], 0.0),
            heading=Heading(-1.5707963267948966),
            is_in_intersection=self._junctions[lane.road_id],
        )

    def road_length(self, road_id: str) -> float:
        return self._lengths[road_id]

    def lane_end_anchors(self) -> List[Waypoint]:
        return [
            self.waypoint(lane, self._lengths[lane.road_id]) for lane in self._rows
        ]

    def successors_of(self, waypoint: Waypoint) -> List[Waypoint]:
        return [
            self.waypoint(lane, 0.0)
            for lane in self._successors[waypoint.lane_identity]
        ]

    def advance(self, waypoint: Waypoint, distance: float) -> List[Waypoint]:
        lane = waypoint.lane_identity
        self.advance_calls.append((lane, distance))
        target = waypoint.s + distance
        if (lane, distance) in self._forks:
            return [self.waypoint(lane, target), self.waypoint(lane, target)]
        if target > self._lengths[lane.road_id]:
            return []
        return [self.waypoint(lane, target)]
