"""Traffic lattice package."""

from traffic_lattice.config import TrafficLatticeConfig
from traffic_lattice.errors import (
    DisconnectedNodesError,
    InvalidRoadPositionError,
    LatticeExtensionError,
    OccupancyCollisionError,
    OffLatticeVehicleError,
    SpanTooSmallError,
    TrafficLatticeError,
    UnresolvedLocationError,
    UnsortableRoadsError,
)
from traffic_lattice.geometry import VehicleGeometry, head_location, rear_location
from traffic_lattice.lattice import LatticeNode, WaypointLattice
from traffic_lattice.occupancy import OccupancyRegistrar
from traffic_lattice.road_chain import RoadChainSorter
from traffic_lattice.road_map import (
    RoadSegment,
    SegmentRoadMap,
    SegmentRouter,
    distance_from_segment_start,
)
from traffic_lattice.span_estimator import SpanEstimator
from traffic_lattice.traffic_lattice import TrafficLattice
from traffic_lattice.types import Location, RoadPosition, SpanEstimate, VehicleRecord

__all__ = [
    "DisconnectedNodesError",
    "InvalidRoadPositionError",
    "LatticeExtensionError",
    "LatticeNode",
    "Location",
    "OccupancyCollisionError",
    "OccupancyRegistrar",
    "OffLatticeVehicleError",
    "RoadChainSorter",
    "RoadPosition",
    "RoadSegment",
    "SegmentRoadMap",
    "SegmentRouter",
    "SpanEstimate",
    "SpanEstimator",
    "SpanTooSmallError",
    "TrafficLattice",
    "TrafficLatticeConfig",
    "TrafficLatticeError",
    "UnresolvedLocationError",
    "UnsortableRoadsError",
    "VehicleGeometry",
    "VehicleRecord",
    "WaypointLattice",
    "distance_from_segment_start",
    "head_location",
    "rear_location",
]
