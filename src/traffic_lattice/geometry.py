"""Head and rear reference points of a vehicle."""

import math

from traffic_lattice.interfaces import RoadNetwork
from traffic_lattice.types import Location, RoadPosition, VehicleRecord


def _offset_along_heading(location: Location, yaw_deg: float, distance: float) -> Location:
    # Left handed coordinates, same as the road network. z is left untouched.
    yaw = math.radians(yaw_deg)
    return Location(
        x=location.x + distance * math.cos(yaw),
        y=location.y + distance * math.sin(yaw),
        z=location.z,
    )


def head_location(vehicle: VehicleRecord) -> Location:
    """Location ``extent`` ahead of the vehicle center along its heading."""
    return _offset_along_heading(vehicle.location, vehicle.yaw, vehicle.extent)


def rear_location(vehicle: VehicleRecord) -> Location:
    """Location ``extent`` behind the vehicle center along its heading."""
    return _offset_along_heading(vehicle.location, vehicle.yaw, -vehicle.extent)


class VehicleGeometry:
    """Resolves vehicle reference points onto the road network."""

    def __init__(self, road_network: RoadNetwork):
        self.road_network = road_network

    def center_position(self, vehicle: VehicleRecord) -> RoadPosition | None:
        return self.road_network.resolve(vehicle.location)

    def head_position(self, vehicle: VehicleRecord) -> RoadPosition | None:
        return self.road_network.resolve(head_location(vehicle))

    def rear_position(self, vehicle: VehicleRecord) -> RoadPosition | None:
        return self.road_network.resolve(rear_location(vehicle))
