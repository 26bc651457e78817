"""Road network built from segment centerlines using Shapely."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from shapely.geometry import LineString, Point

from traffic_lattice.errors import InvalidRoadPositionError
from traffic_lattice.interfaces import RoadNetwork
from traffic_lattice.types import Location, RoadPosition

logger = logging.getLogger(__name__)


def distance_from_segment_start(position: RoadPosition, road_network: RoadNetwork) -> float:
    """Distance from the start of the segment in the direction of travel.

    Positive lane ids travel against the segment reference line, so their
    distance is counted from the far end.

    Args:
        position: Resolved road position
        road_network: Road network the position belongs to

    Returns:
        Travel distance from the segment start [m]

    Raises:
        InvalidRoadPositionError: If the position has lane id 0
    """
    if position.lane_id == 0:
        raise InvalidRoadPositionError(
            f"Road position on segment {position.segment_id} has lane id 0."
        )

    if position.lane_id > 0:
        return road_network.segment_length(position.segment_id) - position.offset
    return position.offset


@dataclass
class RoadSegment:
    """A single road segment with one driving lane."""

    segment_id: int
    centerline: LineString  # Reference line, offsets grow along it
    lane_id: int = -1  # Negative: travel along the reference line


class SegmentRoadMap:
    """Road network made of polyline segments."""

    def __init__(self, segments: Iterable[RoadSegment], max_lateral_distance: float = 3.0):
        """Initialize SegmentRoadMap.

        Args:
            segments: Road segments
            max_lateral_distance: Points farther than this from every centerline
                are considered off road [m]
        """
        self.segments: dict[int, RoadSegment] = {}
        for segment in segments:
            if segment.lane_id == 0:
                raise ValueError(f"Segment {segment.segment_id} has lane id 0")
            if segment.segment_id in self.segments:
                raise ValueError(f"Duplicate segment id {segment.segment_id}")
            self.segments[segment.segment_id] = segment

        self.max_lateral_distance = max_lateral_distance
        self.connections: dict[int, int] = {}

    def connect(self, segment_id: int, next_segment_id: int) -> None:
        """Declare that ``next_segment_id`` follows ``segment_id``."""
        for sid in (segment_id, next_segment_id):
            if sid not in self.segments:
                raise KeyError(f"Unknown segment {sid}")
        self.connections[segment_id] = next_segment_id

    def resolve(self, location: Location) -> RoadPosition | None:
        """Project a location onto the nearest segment centerline.

        Args:
            location: World location (z is ignored)

        Returns:
            RoadPosition, or None if no centerline is close enough
        """
        point = Point(location.x, location.y)

        best: RoadSegment | None = None
        best_dist = float("inf")
        for segment in self.segments.values():
            dist = segment.centerline.distance(point)
            if dist < best_dist:
                best = segment
                best_dist = dist

        if best is None or best_dist > self.max_lateral_distance:
            logger.debug(
                f"[SegmentRoadMap] ({location.x:.2f}, {location.y:.2f}) is off road "
                f"(nearest={best_dist:.2f})"
            )
            return None

        return RoadPosition(
            segment_id=best.segment_id,
            lane_id=best.lane_id,
            offset=float(best.centerline.project(point)),
        )

    def segment_length(self, segment_id: int) -> float:
        return float(self.segments[segment_id].centerline.length)

    def position_at(self, segment_id: int, distance: float) -> RoadPosition:
        """Road position at a travel distance from the segment start.

        Args:
            segment_id: Segment id
            distance: Travel distance from the segment start [m]

        Returns:
            RoadPosition on the segment lane
        """
        segment = self.segments[segment_id]
        length = float(segment.centerline.length)
        distance = min(max(distance, 0.0), length)
        offset = distance if segment.lane_id < 0 else length - distance
        return RoadPosition(segment_id=segment_id, lane_id=segment.lane_id, offset=offset)

    def location_of(self, position: RoadPosition) -> Location:
        point = self.segments[position.segment_id].centerline.interpolate(position.offset)
        return Location(x=float(point.x), y=float(point.y))


class SegmentRouter:
    """Previous / next segment lookup over a non-branching road graph."""

    def __init__(self, successors: Mapping[int, int]):
        """Initialize SegmentRouter.

        Args:
            successors: Mapping from segment id to the segment that follows it
        """
        self._next: dict[int, int] = dict(successors)
        self._prev: dict[int, int] = {}
        for segment_id, next_id in self._next.items():
            if next_id in self._prev:
                raise ValueError(
                    f"Segment {next_id} has more than one predecessor "
                    f"({self._prev[next_id]}, {segment_id})"
                )
            self._prev[next_id] = segment_id

    @classmethod
    def from_road_map(cls, road_map: SegmentRoadMap) -> "SegmentRouter":
        return cls(road_map.connections)

    def next_segment(self, segment_id: int) -> int | None:
        return self._next.get(segment_id)

    def previous_segment(self, segment_id: int) -> int | None:
        return self._prev.get(segment_id)
