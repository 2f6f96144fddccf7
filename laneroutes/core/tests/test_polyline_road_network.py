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
from pathlib import Path

import numpy as np
import pytest

from laneroutes.core.coordinates import Point, RefLinePoint
from laneroutes.core.polyline_road_network import PolylineRoadNetwork
from laneroutes.core.utils.custom_exceptions import RoadNetworkLoadError

SCENARIO_MAP = (
    Path(__file__).resolve().parents[3] / "scenarios" / "junction_merge" / "map.yaml"
)


@pytest.fixture
def junction_merge():
    return PolylineRoadNetwork.from_file(str(SCENARIO_MAP))


def _lane(road_id, lane_id, points, outgoing=()):
    return {
        "id": road_id,
        "lanes": [{"id": lane_id, "points": points, "outgoing": list(outgoing)}],
    }


def test_load_from_file(junction_merge):
    assert junction_merge.source == str(SCENARIO_MAP)
    assert [r.road_id for r in junction_merge.roads] == [
        "1",
        "j1",
        "j2",
        "2",
        "3",
        "4",
        "j3",
    ]

    lane = junction_merge.lane_by_id("1:1")
    assert lane.road.road_id == "1"
    assert lane.length == 50
    assert not lane.in_junction
    assert [l.lane_id for l in lane.outgoing_lanes] == ["j1:1", "j2:1"]

    assert junction_merge.lane_by_id("j2:1").in_junction
    assert junction_merge.road_by_id("j1").is_junction


def test_load_from_directory():
    road_map = PolylineRoadNetwork.from_file(str(SCENARIO_MAP.parent))
    assert road_map.road_by_id("j3").lanes[0].lane_id == "j3:1"


def test_road_length_defaults_to_longest_lane():
    road_map = PolylineRoadNetwork.from_dict(
        {
            "roads": [
                {
                    "id": "r",
                    "lanes": [
                        {"id": 1, "points": [[0, 0], [10, 0]]},
                        {"id": 2, "points": [[0, 3], [3, 7], [12, 7]]},
                    ],
                },
                {"id": "s", "length": 4.5, "lanes": [{"id": 1, "points": [[0, 0], [5, 0]]}]},
            ]
        }
    )
    assert road_map.road_by_id("r").length == 14
    assert road_map.road_by_id("s").length == 4.5


def test_numeric_string_road_length():
    road_map = PolylineRoadNetwork.from_dict(
        {"roads": [{**_lane("r", "1", [[0, 0], [5, 0]]), "length": "3.5"}]}
    )
    assert road_map.road_by_id("r").length == 3.5


def test_lane_geometry(junction_merge):
    lane = junction_merge.lane_by_id("j1:1")

    assert lane.from_lane_coord(RefLinePoint(s=15)) == Point(65, 0, 0)
    assert lane.from_lane_coord(RefLinePoint(s=5, t=1)) == Point(55, 1, 0)
    assert lane.offset_along_lane(Point(62.5, 3, 0)) == 12.5

    pose = lane.center_pose_at_offset(5)
    assert np.allclose(pose.position, [55, 0, 0])
    assert math.isclose(pose.heading, -math.pi / 2)


def test_lane_elevation_is_interpolated(junction_merge):
    lane = junction_merge.lane_by_id("3:1")

    assert lane.length == 50
    assert math.isclose(lane.from_lane_coord(RefLinePoint(s=25)).z, 0.75)
    pose = lane.center_pose_at_offset(0)
    assert math.isclose(pose.heading, 0, abs_tol=1e-9)


def test_repeated_points_are_dropped():
    road_map = PolylineRoadNetwork.from_dict(
        {"roads": [_lane("r", "1", [[0, 0], [0, 0], [4, 0], [4, 0]])]}
    )
    assert road_map.lane_by_id("r:1").center_polyline == [Point(0, 0), Point(4, 0)]


@pytest.mark.parametrize(
    "data, message",
    [
        ([], "`roads` list"),
        ({"roads": "nope"}, "`roads` list"),
        ({"roads": [{"lanes": []}]}, "road without an `id`"),
        ({"roads": [_lane("r", "1", [[0, 0], [1, 0]])] * 2}, "duplicate road"),
        ({"roads": [_lane("r", "1", [[0, 0]])]}, "at least 2 distinct points"),
        ({"roads": [_lane("r", "1", [[0, 0], [0, 0]])]}, "at least 2 distinct points"),
        ({"roads": [_lane("r", "1", [[0, 0], [1]])]}, "not 2D or 3D"),
        ({"roads": [_lane("r", "1", [[0, 0], ["a", 1]])]}, "non-numeric"),
        ({"roads": [_lane("r", "1", [[0, 0], [1, 0]], ["x:1"])]}, "unknown lane"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": "abc"}]}, "non-numeric length"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": [3]}]}, "non-numeric length"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": True}]}, "non-numeric length"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": -5}]}, "invalid length"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": ".inf"}]}, "invalid length"),
        ({"roads": [{**_lane("r", "1", [[0, 0], [1, 0]]), "length": "nan"}]}, "invalid length"),
        ({"roads": [{"id": "r", "lanes": [{"points": []}]}]}, "without an `id`"),
        (
            {
                "roads": [
                    {
                        "id": "r",
                        "lanes": [
                            {"id": 1, "points": [[0, 0], [1, 0]]},
                            {"id": 1, "points": [[0, 1], [1, 1]]},
                        ],
                    }
                ]
            },
            "duplicate lane",
        ),
    ],
)
def test_invalid_description(data, message):
    with pytest.raises(RoadNetworkLoadError, match=message):
        PolylineRoadNetwork.from_dict(data, source="bad")


def test_missing_file(tmp_path):
    with pytest.raises(RoadNetworkLoadError, match="file not found"):
        PolylineRoadNetwork.from_file(str(tmp_path / "nothing.yaml"))


def test_malformed_yaml(tmp_path):
    map_file = tmp_path / "map.yaml"
    map_file.write_text("roads: [\n")
    with pytest.raises(RoadNetworkLoadError):
        PolylineRoadNetwork.from_file(str(map_file))
