"""Errors raised while building a traffic lattice."""


class TrafficLatticeError(RuntimeError):
    """Base class for all traffic lattice construction failures."""


class InvalidRoadPositionError(TrafficLatticeError, ValueError):
    """A road position carries lane id 0."""


class UnresolvedLocationError(TrafficLatticeError):
    """A location could not be resolved onto the road network."""


class SpanTooSmallError(TrafficLatticeError):
    """The requested span does not exceed one resolution unit."""


class UnsortableRoadsError(TrafficLatticeError):
    """The given roads cannot be chained into a single corridor."""


class LatticeExtensionError(TrafficLatticeError):
    """The road graph ends before the requested span is covered."""


class OffLatticeVehicleError(TrafficLatticeError):
    """A vehicle reference point has no lattice node nearby."""


class DisconnectedNodesError(TrafficLatticeError):
    """The rear and head nodes of a vehicle are not connected forward."""


class OccupancyCollisionError(TrafficLatticeError):
    """Two vehicles occupy the same lattice node."""

    def __init__(self, vehicle_id: int, other_vehicle_id: int, node_index: int):
        super().__init__(
            f"Collision detected within the input vehicles: vehicle {vehicle_id} "
            f"overlaps vehicle {other_vehicle_id} at node {node_index}."
        )
        self.vehicle_id = vehicle_id
        self.other_vehicle_id = other_vehicle_id
        self.node_index = node_index
