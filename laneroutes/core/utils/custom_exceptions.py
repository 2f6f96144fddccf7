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

class RouteGenerationError(Exception):
    """Base for failures raised while turning a road network into routes."""


class NetworkQueryError(RouteGenerationError):
    """An exception raised if the road network answers a lane query with an unusable result."""

    @classmethod
    def unexpected_result_count(
        cls, lane, distance: float, count: int
    ) -> "NetworkQueryError":
        """Generate a `NetworkQueryError` for an `advance` that did not resolve to exactly one point."""
        return cls(
            f"Advancing {distance:.3f} along lane `{lane}` gave {count} waypoints, "
            "expected exactly 1. The road network must not fork inside a lane."
        )


class DegenerateLaneError(RouteGenerationError):
    """An exception raised if a lane is too short to be sampled into a route."""

    @classmethod
    def too_short(cls, lane, length: float, end_margin: float) -> "DegenerateLaneError":
        """Generate a `DegenerateLaneError` for a lane no longer than the end margin."""
        return cls(
            f"Lane `{lane}` of length {length:.3f} cannot be sampled into at least "
            f"2 distinct points with an end margin of {end_margin:.3f}."
        )


class RoadNetworkLoadError(Exception):
    """An exception raised if a road network description cannot be loaded."""

    @classmethod
    def invalid(cls, source: str, reason: str) -> "RoadNetworkLoadError":
        """Generate a `RoadNetworkLoadError` naming the offending source."""
        return cls(f"Invalid road network `{source}`: {reason}")
