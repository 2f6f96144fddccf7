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

# to allow for typing to refer to class being defined (RoadMap)
from __future__ import annotations

from bisect import bisect
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

import numpy as np
from cached_property import cached_property
from shapely.geometry import LineString
from shapely.geometry import Point as SPoint

from laneroutes.core.coordinates import Heading, Point, Pose, RefLinePoint
from laneroutes.core.utils.math import fast_quaternion_from_angle, vec_to_radians


class RoadMap:
    """Base class from which map implementation classes extend."""

    @property
    def source(self) -> str:
        """The road map resource source. Generally a file URI."""
        raise NotImplementedError()

    @property
    def roads(self) -> List[RoadMap.Road]:
        """All roads of this map in a deterministic order."""
        raise NotImplementedError()

    def lane_by_id(self, lane_id: str) -> RoadMap.Lane:
        """Find a lane in this road map that has the given identifier."""
        raise NotImplementedError()

    def road_by_id(self, road_id: str) -> RoadMap.Road:
        """Find a road in this road map that has the given identifier."""
        raise NotImplementedError()

    class Lane:
        """Describes a lane surface."""

        def __hash__(self) -> int:
            """Derived classes must implement a suitable hash function
            so that Lane objects may be used deterministically in sets."""
            raise NotImplementedError()

        def __eq__(self, other) -> bool:
            """Required for set usage; derived classes may override this."""
            return self.__class__ == other.__class__ and hash(self) == hash(other)

        @property
        def lane_id(self) -> str:
            """Unique identifier for this Lane."""
            raise NotImplementedError()

        @property
        def road(self) -> RoadMap.Road:
            """The road that this lane is a part of."""
            raise NotImplementedError()

        @property
        def length(self) -> float:
            """The length of this lane."""
            raise NotImplementedError()

        @property
        def in_junction(self) -> bool:
            """If this lane is a part of a junction (usually an intersection.)"""
            return self.road.is_junction

        @property
        def outgoing_lanes(self) -> List[RoadMap.Lane]:
            """Lanes leading out of this lane."""
            raise NotImplementedError()

        def offset_along_lane(self, world_point: Point) -> float:
            """Get the offset of the given point imposed on this lane."""
            raise NotImplementedError()

        def from_lane_coord(self, lane_point: RefLinePoint) -> Point:
            """Get a world point on the lane from the given lane coordinate point."""
            raise NotImplementedError()

        def vector_at_offset(self, offset: float) -> np.ndarray:
            """The lane direction vector at the given offset (not normalized)."""
            raise NotImplementedError()

        ## ======== Reference Methods =========

        def center_pose_at_offset(self, offset: float) -> Pose:
            """The pose at the center of the lane at the given offset."""
            position = self.from_lane_coord(RefLinePoint(s=offset))
            heading = Heading(vec_to_radians(self.vector_at_offset(offset)[:2]))
            return Pose(
                position=np.array(position, dtype=np.float64),
                orientation=fast_quaternion_from_angle(heading),
                heading_=heading,
            )

        ## ======== \Reference Methods =========

    class Road:
        """This is akin to a 'road segment' in real life.
        Many of these might correspond to a single named road in reality."""

        def __hash__(self) -> int:
            """Derived classes must implement a suitable hash function
            so that Road objects may be used deterministically in sets."""
            raise NotImplementedError()

        def __eq__(self, other) -> bool:
            """Required for set usage; derived classes may override this."""
            return self.__class__ == other.__class__ and hash(self) == hash(other)

        @property
        def road_id(self) -> str:
            """The identifier for this road."""
            raise NotImplementedError()

        @property
        def is_junction(self) -> bool:
            """Note that a junction can be an intersection ('+') or a 'T', 'Y', 'L', etc."""
            raise NotImplementedError()

        @property
        def length(self) -> float:
            """The length of this road."""
            raise NotImplementedError()

        @property
        def lanes(self) -> List[RoadMap.Lane]:
            """The lanes contained in this road."""
            raise NotImplementedError()


class RoadMapWithCaches(RoadMap):
    """Base class for map implementations that wish to include
    a built-in SegmentCache and other LRU caches."""

    def __init__(self):
        super().__init__()
        self._seg_cache = RoadMapWithCaches._SegmentCache()

    class Lane(RoadMap.Lane):
        """Describes a RoadMapWithCaches lane surface."""

        def __init__(self, lane_id: str, road_map):
            self._lane_id = lane_id
            self._map = road_map

        @property
        def center_polyline(self) -> List[Point]:
            """Should return a list of the points along the centerline
            of the lane, in the order they will be encountered in the
            direction of travel."""
            raise NotImplementedError()

        @lru_cache(maxsize=1024)
        def from_lane_coord(self, lane_point: RefLinePoint) -> Point:
            seg = self._map._seg_cache.segment_for_offset(self, lane_point.s)
            return seg.from_lane_coord(lane_point)

        @lru_cache(maxsize=1024)
        def vector_at_offset(self, offset: float) -> np.ndarray:
            seg = self._map._seg_cache.segment_for_offset(self, offset)
            return np.array((seg.dx, seg.dy, 0.0))

        @cached_property
        def _lane_line(self) -> LineString:
            points = self.center_polyline
            assert len(points) >= 2
            # offsets along lanes are planar
            return LineString([(p.x, p.y) for p in points])

        @lru_cache(maxsize=1024)
        def offset_along_lane(self, world_point: Point) -> float:
            return self._lane_line.project(SPoint(world_point.x, world_point.y))

    class _SegmentCache:
        @dataclass(frozen=True)
        class Segment:
            """Stored info about a segment of a lane's center polyline."""

            x: float
            y: float
            z: float
            dx: float
            dy: float
            dz: float
            offset: float

            @cached_property
            def dist_to_next(self) -> float:
                """returns the planar distance to the next point in the polyline."""
                return float(np.linalg.norm((self.dx, self.dy)))

            def from_lane_coord(self, lane_pt: RefLinePoint) -> Point:
                """For a reference-line point in/along this segment, converts it to a world point."""
                if not self.dist_to_next:
                    return Point(self.x, self.y, self.z + lane_pt.h)
                offset = lane_pt.s - self.offset
                return Point(
                    self.x
                    + (offset * self.dx - lane_pt.t * self.dy) / self.dist_to_next,
                    self.y
                    + (offset * self.dy + lane_pt.t * self.dx) / self.dist_to_next,
                    self.z + offset * self.dz / self.dist_to_next + lane_pt.h,
                )

        class _OffsetWrapper:
            def __init__(self, seq: List[RoadMapWithCaches._SegmentCache.Segment]):
                self._seq = seq

            def __getitem__(self, i: int) -> float:
                return self._seq[i].offset

            def __len__(self) -> int:
                return len(self._seq)

        def __init__(self):
            self.clear()

        def clear(self):
            """Reset this SegmentCache."""
            self._lane_cache = dict()

        def segment_for_offset(
            self, lane: RoadMapWithCaches.Lane, offset: float
        ) -> RoadMapWithCaches._SegmentCache.Segment:
            """Given an offset along a Lane, returns the nearest Segment to it."""
            segs = self._cache_lane_info(lane)
            assert segs
            segi = bisect(self.__class__._OffsetWrapper(segs), offset)
            if segi > 0:
                segi -= 1
            return segs[segi]

        def _cache_lane_info(
            self, lane: RoadMapWithCaches.Lane
        ) -> List[RoadMapWithCaches._SegmentCache.Segment]:
            segs = self._lane_cache.get(lane.lane_id)
            if segs is not None:
                return segs

            offset = 0.0
            segs = []
            points = lane.center_polyline
            assert len(points) >= 2
            for pt1, pt2 in zip(points[:-1], points[1:]):
                seg = RoadMapWithCaches._SegmentCache.Segment(
                    x=pt1.x,
                    y=pt1.y,
                    z=pt1.z or 0.0,
                    dx=pt2.x - pt1.x,
                    dy=pt2.y - pt1.y,
                    dz=(pt2.z or 0.0) - (pt1.z or 0.0),
                    offset=offset,
                )
                offset += seg.dist_to_next
                segs.append(seg)
            self._lane_cache[lane.lane_id] = segs
            return segs
