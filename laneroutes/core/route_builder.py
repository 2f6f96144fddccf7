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
from typing import FrozenSet, List, NamedTuple, Optional, Set, Tuple

import numpy as np

from laneroutes.core.configuration import Config
from laneroutes.core.coordinates import Dimensions
from laneroutes.core.route_group import (
    DEFAULT_ROUTE_WEIGHT,
    DEFAULT_TRIGGER_EXTENT,
    Route,
    RouteGroup,
)
from laneroutes.core.utils.custom_exceptions import (
    DegenerateLaneError,
    NetworkQueryError,
    RouteGenerationError,
)
from laneroutes.core.utils.logging import timeit
from laneroutes.core.utils.math import clip
from laneroutes.core.waypoint_sampler import LaneIdentity, Waypoint, WaypointSampler


@dataclass(frozen=True)
class RouteBuilderConfig:
    """Parameters of route synthesis."""

    step_distance: float = 2.0
    """Longitudinal distance between consecutive samples of a lane."""
    trigger_height: float = 1.0
    """Vertical offset applied to every output position."""
    end_margin: float = 0.1
    """How far before the end of a lane its last sample is taken."""
    trigger_extent: Dimensions = DEFAULT_TRIGGER_EXTENT
    """Half-extents of the trigger volume of every route group."""

    def __post_init__(self):
        if not self.step_distance > 0:
            raise ValueError(f"step_distance must be > 0, got {self.step_distance}")
        if self.end_margin < 0:
            raise ValueError(f"end_margin must be >= 0, got {self.end_margin}")

    @classmethod
    def from_config(cls, config: Config) -> RouteBuilderConfig:
        """Read the `[routes]` section of an engine configuration."""
        return cls(
            step_distance=config("routes", "step_distance", cast=float),
            trigger_height=config("routes", "trigger_height", cast=float),
            end_margin=config("routes", "end_margin", cast=float),
            trigger_extent=config(
                "routes", "trigger_extent", cast=Dimensions.from_string
            ),
        )


class SkippedLane(NamedTuple):
    """A lane that could not be turned into a route."""

    lane: LaneIdentity
    reason: str


@dataclass(frozen=True)
class RouteBuildResult:
    """Everything produced by one `RouteBuilder.build()` call."""

    route_groups: Tuple[RouteGroup, ...]
    visited: FrozenSet[LaneIdentity]
    """Every lane claimed during the build, including skipped ones."""
    skipped: Tuple[SkippedLane, ...] = ()

    @property
    def route_count(self) -> int:
        return sum(len(group) for group in self.route_groups)

    @property
    def is_complete(self) -> bool:
        """True if every claimed lane produced a route."""
        return not self.skipped

    def lane_identities(self) -> List[LaneIdentity]:
        """The lanes of all emitted routes in output order."""
        return [lane for group in self.route_groups for lane in group.lane_identities()]


class RouteBuilder:
    """Turns the lanes of a road network into routes grouped by branch point.

    Every lane that continues from some lane end is sampled exactly once, at
    `step_distance` intervals and one final sample `end_margin` before the
    end of the road. Routes are grouped by the lane end they continue from.
    Lanes that cannot be sampled are reported in the result and do not stop
    the build.
    """

    def __init__(self, config: Optional[RouteBuilderConfig] = None):
        self._log = logging.getLogger(self.__class__.__name__)
        self._config = config or RouteBuilderConfig()

    @property
    def config(self) -> RouteBuilderConfig:
        return self._config

    def build(self, sampler: WaypointSampler) -> RouteBuildResult:
        """Synthesize all routes reachable through `sampler`."""
        visited: Set[LaneIdentity] = set()
        route_groups: List[RouteGroup] = []
        skipped: List[SkippedLane] = []

        with timeit("Building routes", self._log.debug):
            for anchor in sampler.lane_end_anchors():
                group = self._build_group(sampler, anchor, visited, skipped)
                if group is not None:
                    route_groups.append(group)

        result = RouteBuildResult(
            route_groups=tuple(route_groups),
            visited=frozenset(visited),
            skipped=tuple(skipped),
        )
        self._log.info(
            f"Built {result.route_count} routes in {len(route_groups)} groups "
            f"from {len(visited)} lanes"
        )
        if skipped:
            self._log.warning(
                f"Skipped {len(skipped)} lanes: "
                + ", ".join(str(s.lane) for s in skipped)
            )
        return result

    def _build_group(
        self,
        sampler: WaypointSampler,
        anchor: Waypoint,
        visited: Set[LaneIdentity],
        skipped: List[SkippedLane],
    ) -> Optional[RouteGroup]:
        successors = sampler.successors_of(anchor)
        if not successors:
            return None

        is_intersection = any(s.is_in_intersection for s in successors)
        group = None
        for successor in successors:
            lane = successor.lane_identity
            if lane in visited:
                continue
            visited.add(lane)
            self._log.debug(f"Sampling lane {lane} from {anchor.lane_identity}")

            try:
                route = self._sample_route(sampler, successor)
            except RouteGenerationError as e:
                self._log.warning(f"Skipping lane {lane}: {e}")
                skipped.append(SkippedLane(lane, str(e)))
                continue

            # Groups are only created once they have something to hold
            if group is None:
                group = RouteGroup.at_anchor(
                    anchor,
                    is_intersection,
                    self._config.trigger_height,
                    self._config.trigger_extent,
                )
            group.add_route(route)
        return group

    def _sample_route(self, sampler: WaypointSampler, start: Waypoint) -> Route:
        step = self._config.step_distance
        max_dist = sampler.road_length(start.road_id)
        if not max_dist > self._config.end_margin:
            raise DegenerateLaneError.too_short(
                start.lane_identity, max_dist, self._config.end_margin
            )
        closing_offset = clip(max_dist - self._config.end_margin, 0.0, max_dist)

        samples = [start]
        offsets = [0.0]
        i = 1
        # Steps that land in the end margin would fall behind the closing sample
        while i * step < closing_offset:
            samples.append(self._advance_once(sampler, start, i * step))
            offsets.append(i * step)
            i += 1
        samples.append(self._advance_once(sampler, start, closing_offset))
        offsets.append(closing_offset)

        height = self._config.trigger_height
        positions = np.array([w.position.lifted(height) for w in samples])
        return Route(
            lane=start.lane_identity,
            positions=positions,
            offsets=tuple(offsets),
            weight=DEFAULT_ROUTE_WEIGHT,
        )

    @staticmethod
    def _advance_once(
        sampler: WaypointSampler, waypoint: Waypoint, distance: float
    ) -> Waypoint:
        reached = sampler.advance(waypoint, distance)
        if len(reached) != 1:
            raise NetworkQueryError.unexpected_result_count(
                waypoint.lane_identity, distance, len(reached)
            )
        return reached[0]
