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

import sys
from typing import Optional

import click
from rich import print
from rich.markup import escape


@click.group(
    name="routes",
    help="Generate routes from road networks. See `lroutes routes COMMAND --help` for further options.",
)
def routes_cli():
    pass


@routes_cli.command(name="build", help="Build the routes of a single road network")
@click.option(
    "--step-distance",
    type=float,
    default=None,
    help="Distance between route samples. Defaults to the engine configuration.",
)
@click.option(
    "--trigger-height",
    type=float,
    default=None,
    help="Vertical offset of every route position. Defaults to the engine configuration.",
)
@click.option(
    "--end-margin",
    type=float,
    default=None,
    help="Distance kept from the end of each lane. Defaults to the engine configuration.",
)
@click.option(
    "--details",
    is_flag=True,
    default=False,
    help="List every route group.",
)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.argument("road_map", type=click.Path(exists=True), metavar="<road_map>")
def build(
    road_map: str,
    step_distance: Optional[float],
    trigger_height: Optional[float],
    end_margin: Optional[float],
    details: bool,
    debug: bool,
):
    from laneroutes.core import config
    from laneroutes.core.polyline_road_network import PolylineRoadNetwork
    from laneroutes.core.route_builder import RouteBuilder, RouteBuilderConfig
    from laneroutes.core.utils.custom_exceptions import RoadNetworkLoadError
    from laneroutes.core.utils.file import replace
    from laneroutes.core.utils.logging import configure_logging
    from laneroutes.core.waypoint_sampler import RoadMapWaypointSampler

    engine_config = config()
    configure_logging(debug=debug or engine_config("core", "debug", cast=bool))

    overrides = {
        name: value
        for name, value in (
            ("step_distance", step_distance),
            ("trigger_height", trigger_height),
            ("end_margin", end_margin),
        )
        if value is not None
    }
    try:
        builder_config = replace(
            RouteBuilderConfig.from_config(engine_config), **overrides
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    try:
        network = PolylineRoadNetwork.from_file(road_map)
    except RoadNetworkLoadError as e:
        print(f"[bold red]Failed to load road network:[/bold red] {escape(str(e))}")
        sys.exit(1)

    result = RouteBuilder(builder_config).build(RoadMapWaypointSampler(network))

    print(
        f"Built [bold]{result.route_count}[/bold] routes in "
        f"[bold]{len(result.route_groups)}[/bold] groups from "
        f"[bold]{len(result.visited)}[/bold] lanes of {network.source}"
    )
    if details:
        for group in result.route_groups:
            x, y, z = group.position
            kind = "intersection" if group.is_intersection else "road"
            print(
                f"  {group.anchor.lane_identity} ({kind}) at "
                f"({x:.2f}, {y:.2f}, {z:.2f})"
            )
            for route in group.routes:
                print(
                    f"    -> {route.lane}: {len(route)} points, "
                    f"{route.length:.2f} long, weight {route.weight}"
                )
    if not result.is_complete:
        print(f"[yellow]Skipped {len(result.skipped)} lanes:[/yellow]")
        for skipped in result.skipped:
            print(f"  {skipped.lane}: {escape(skipped.reason)}")


routes_cli.add_command(build)
