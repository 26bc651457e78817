from collections.abc import Callable

import pytest
from shapely.geometry import LineString

from traffic_lattice import (
    Location,
    RoadSegment,
    SegmentRoadMap,
    SegmentRouter,
    VehicleRecord,
)


def build_straight_road(
    lengths: list[float], lane_id: int = -1
) -> tuple[SegmentRoadMap, SegmentRouter]:
    """Segments 1..N laid end to end along the x axis, starting at x=0."""
    segments = []
    x = 0.0
    for segment_id, length in enumerate(lengths, start=1):
        centerline = LineString([(x, 0.0), (x + length, 0.0)])
        segments.append(RoadSegment(segment_id=segment_id, centerline=centerline, lane_id=lane_id))
        x += length

    road_map = SegmentRoadMap(segments)
    for segment_id in range(1, len(lengths)):
        # Negative lanes travel along +x, positive lanes along -x.
        if lane_id < 0:
            road_map.connect(segment_id, segment_id + 1)
        else:
            road_map.connect(segment_id + 1, segment_id)

    return road_map, SegmentRouter.from_road_map(road_map)


def build_vehicle(
    vehicle_id: int, x: float, yaw: float = 0.0, extent: float = 2.0, y: float = 0.0
) -> VehicleRecord:
    return VehicleRecord(id=vehicle_id, location=Location(x=x, y=y), yaw=yaw, extent=extent)


@pytest.fixture
def straight_road() -> Callable[..., tuple[SegmentRoadMap, SegmentRouter]]:
    """Factory for straight multi segment roads."""
    return build_straight_road


@pytest.fixture
def vehicle() -> Callable[..., VehicleRecord]:
    """Factory for vehicle records on the x axis."""
    return build_vehicle
