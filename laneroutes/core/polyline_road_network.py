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
import math
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import yaml
from cached_property import cached_property

from laneroutes.core.coordinates import Point
from laneroutes.core.road_map import RoadMap, RoadMapWithCaches
from laneroutes.core.utils.custom_exceptions import RoadNetworkLoadError
from laneroutes.core.utils.logging import timeit
from laneroutes.core.utils.math import polyline_length


class PolylineRoadNetwork(RoadMapWithCaches):
    """A road map whose lanes are described by centerline polylines.

    The description is a mapping of the form::

        roads:
          - id: "1"
            junction: false
            length: 20.0        # optional, defaults to the longest lane
            lanes:
              - id: "1"
                points: [[0, 0], [20, 0]]
                outgoing: ["2:1"]

    Lanes are referred to elsewhere as ``"<road_id>:<lane_id>"``, which is
    also their globally unique ``lane_id``.
    """

    def __init__(self, source: str = "<memory>"):
        super().__init__()
        self._log = logging.getLogger(self.__class__.__name__)
        self._source = source
        self._roads: Dict[str, PolylineRoadNetwork.Road] = {}
        self._lanes: Dict[str, PolylineRoadNetwork.Lane] = {}

    @staticmethod
    def lane_ref(road_id: str, lane_id: str) -> str:
        """The globally unique lane identifier of a lane within a road."""
        return f"{road_id}:{lane_id}"

    @classmethod
    def from_file(cls, map_file: str) -> PolylineRoadNetwork:
        """Load a road network from a YAML description."""
        if os.path.isdir(map_file):
            # map.yaml is the default map name; try that:
            map_file = os.path.join(map_file, "map.yaml")
        if not os.path.isfile(map_file):
            raise RoadNetworkLoadError.invalid(map_file, "file not found")
        try:
            with open(map_file, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise RoadNetworkLoadError.invalid(map_file, str(e)) from e
        return cls.from_dict(data, source=map_file)

    @classmethod
    def from_dict(
        cls, data: Mapping[str, Any], source: str = "<memory>"
    ) -> PolylineRoadNetwork:
        """Build a road network from a plain description mapping."""
        road_map = cls(source)
        with timeit(f"Loading road network {source}", road_map._log.debug):
            road_map._load(data)
        road_map._log.info(
            f"Loaded {len(road_map._roads)} roads with {len(road_map._lanes)} lanes from {source}"
        )
        return road_map

    def _fail(self, reason: str):
        raise RoadNetworkLoadError.invalid(self._source, reason)

    def _load(self, data: Mapping[str, Any]):
        if not isinstance(data, Mapping) or not isinstance(data.get("roads"), list):
            self._fail("expected a mapping with a `roads` list")

        # First pass: create all Road and Lane objects
        pending_links: List[Tuple[PolylineRoadNetwork.Lane, Sequence[str]]] = []
        for road_elem in data["roads"]:
            if not isinstance(road_elem, Mapping):
                self._fail("every road must be a mapping")
            road_id = str(road_elem.get("id", ""))
            if not road_id:
                self._fail("road without an `id`")
            if road_id in self._roads:
                self._fail(f"duplicate road `{road_id}`")
            road = PolylineRoadNetwork.Road(
                road_id,
                bool(road_elem.get("junction", False)),
                self._parse_length(road_id, road_elem.get("length")),
            )
            self._roads[road_id] = road

            for lane_elem in road_elem.get("lanes") or []:
                if not isinstance(lane_elem, Mapping) or lane_elem.get("id") is None:
                    self._fail(f"road `{road_id}` has a lane without an `id`")
                lane_id = PolylineRoadNetwork.lane_ref(road_id, str(lane_elem["id"]))
                if lane_id in self._lanes:
                    self._fail(f"duplicate lane `{lane_id}`")
                lane = PolylineRoadNetwork.Lane(
                    self,
                    lane_id,
                    road,
                    self._parse_points(lane_id, lane_elem.get("points") or []),
                )
                road.lanes.append(lane)
                self._lanes[lane_id] = lane
                pending_links.append((lane, lane_elem.get("outgoing") or []))

        # Second pass: connect lanes now that all of them exist
        for lane, outgoing in pending_links:
            for ref in outgoing:
                out_lane = self._lanes.get(str(ref))
                if out_lane is None:
                    self._fail(f"lane `{lane.lane_id}` links to unknown lane `{ref}`")
                lane.outgoing_lanes.append(out_lane)

    def _parse_length(self, road_id: str, raw_length: Any) -> Optional[float]:
        if raw_length is None:
            return None
        try:
            if isinstance(raw_length, bool):
                raise TypeError(raw_length)
            length = float(raw_length)
        except (TypeError, ValueError):
            self._fail(f"road `{road_id}` has a non-numeric length `{raw_length}`")
        if not math.isfinite(length) or length < 0:
            self._fail(f"road `{road_id}` has an invalid length `{raw_length}`")
        return length

    def _parse_points(self, lane_id: str, raw_points: Sequence) -> List[Point]:
        points: List[Point] = []
        for raw in raw_points:
            if not isinstance(raw, (list, tuple)) or not 2 <= len(raw) <= 3:
                self._fail(f"lane `{lane_id}` has a point that is not 2D or 3D")
            try:
                point = Point(*(float(v) for v in raw))
            except (TypeError, ValueError):
                self._fail(f"lane `{lane_id}` has a non-numeric point `{raw}`")
            # drop repeated vertices so every segment has a direction
            if points and points[-1][:2] == point[:2]:
                continue
            points.append(point)
        if len(points) < 2:
            self._fail(f"lane `{lane_id}` needs at least 2 distinct points")
        return points

    @property
    def source(self) -> str:
        return self._source

    @property
    def roads(self) -> List[RoadMap.Road]:
        return list(self._roads.values())

    def road_by_id(self, road_id: str) -> RoadMap.Road:
        road = self._roads.get(road_id)
        assert road, f"PolylineRoadNetwork got request for unknown road_id: '{road_id}'"
        return road

    def lane_by_id(self, lane_id: str) -> RoadMap.Lane:
        lane = self._lanes.get(lane_id)
        assert lane, f"PolylineRoadNetwork got request for unknown lane_id: '{lane_id}'"
        return lane

    class Lane(RoadMapWithCaches.Lane):
        """A lane defined by its centerline polyline."""

        def __init__(
            self,
            road_map: PolylineRoadNetwork,
            lane_id: str,
            road: PolylineRoadNetwork.Road,
            points: List[Point],
        ):
            super().__init__(lane_id, road_map)
            self._road = road
            self._points = points
            self._outgoing_lanes: List[RoadMap.Lane] = []

        def __hash__(self) -> int:
            return hash(self._lane_id)

        def __repr__(self) -> str:
            return f"Lane({self._lane_id})"

        @property
        def lane_id(self) -> str:
            return self._lane_id

        @property
        def road(self) -> RoadMap.Road:
            return self._road

        @cached_property
        def length(self) -> float:
            return polyline_length(self._points)

        @property
        def center_polyline(self) -> List[Point]:
            return self._points

        @property
        def outgoing_lanes(self) -> List[RoadMap.Lane]:
            return self._outgoing_lanes

    class Road(RoadMap.Road):
        """A road grouping one or more lanes."""

        def __init__(self, road_id: str, is_junction: bool, length: Optional[float]):
            self._road_id = road_id
            self._is_junction = is_junction
            self._length = length
            self._lanes: List[PolylineRoadNetwork.Lane] = []

        def __hash__(self) -> int:
            return hash(self._road_id)

        def __repr__(self) -> str:
            return f"Road({self._road_id})"

        @property
        def road_id(self) -> str:
            return self._road_id

        @property
        def is_junction(self) -> bool:
            return self._is_junction

        @property
        def length(self) -> float:
            if self._length is not None:
                return self._length
            return max((lane.length for lane in self._lanes), default=0.0)

        @property
        def lanes(self) -> List[RoadMap.Lane]:
            return self._lanes
