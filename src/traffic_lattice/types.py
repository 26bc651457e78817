"""Traffic lattice data types."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Location:
    """World frame location (left-handed, as reported by the simulator)."""

    x: float  # X [m]
    y: float  # Y [m]
    z: float = 0.0  # Z [m]


@dataclass(frozen=True)
class RoadPosition:
    """A point resolved onto the road network.

    The sign of ``lane_id`` encodes the direction of travel with respect to
    the segment reference line. ``offset`` is measured along that reference
    line from the segment start.
    """

    segment_id: int
    lane_id: int
    offset: float  # [m]


@dataclass(frozen=True)
class VehicleRecord:
    """Snapshot of a single vehicle."""

    id: int
    location: Location
    yaw: float  # [deg]
    extent: float  # Half length along the heading axis [m]

    @classmethod
    def from_actor(cls, actor: Any) -> "VehicleRecord":
        """Convert a live agent handle.

        The handle needs ``id``, ``get_transform()`` (with ``location`` and
        ``rotation.yaw``) and ``get_bounding_box()`` (with ``extent.x``).
        """
        transform = actor.get_transform()
        bounding_box = actor.get_bounding_box()
        return cls(
            id=int(actor.id),
            location=Location(
                x=float(transform.location.x),
                y=float(transform.location.y),
                z=float(transform.location.z),
            ),
            yaw=float(transform.rotation.yaw),
            extent=float(bounding_box.extent.x),
        )


@dataclass(frozen=True)
class SpanEstimate:
    """Start position and length of the frame that covers a vehicle set."""

    start: RoadPosition
    span: float  # [m]
    roads: list[int]  # Sorted corridor segments
