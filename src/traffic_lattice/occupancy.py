"""Register vehicles onto the nodes of a lattice."""

import logging
from collections.abc import Sequence

from traffic_lattice.errors import (
    DisconnectedNodesError,
    OccupancyCollisionError,
    OffLatticeVehicleError,
)
from traffic_lattice.geometry import VehicleGeometry
from traffic_lattice.interfaces import SpatialLattice
from traffic_lattice.types import VehicleRecord

logger = logging.getLogger(__name__)


class OccupancyRegistrar:
    """Maps each vehicle onto the lattice nodes it occupies."""

    def __init__(self, geometry: VehicleGeometry, tolerance: float):
        """Initialize OccupancyRegistrar.

        Args:
            geometry: Resolves vehicle head and rear points
            tolerance: Max distance between a reference point and its node [m]
        """
        self.geometry = geometry
        self.tolerance = tolerance

    def register(
        self, vehicles: Sequence[VehicleRecord], lattice: SpatialLattice
    ) -> dict[int, list[int]]:
        """Mark the nodes occupied by every vehicle.

        A vehicle occupies the contiguous run of nodes from the one nearest to
        its rear point up to the one nearest to its head point. The pass is all
        or nothing: on failure every mark made so far is removed before the
        error propagates.

        Args:
            vehicles: Vehicles to register
            lattice: Lattice whose nodes are marked

        Returns:
            Vehicle id to node indices (rear to head)

        Raises:
            OffLatticeVehicleError: If a reference point has no node nearby
            DisconnectedNodesError: If the head cannot be reached from the rear
            OccupancyCollisionError: If two vehicles share a node
        """
        table: dict[int, list[int]] = {}
        marked: list[int] = []

        try:
            for vehicle in vehicles:
                nodes = self._collect_nodes(vehicle, lattice)
                for index in nodes:
                    lattice.node(index).vehicle = vehicle.id
                marked.extend(nodes)
                table[vehicle.id] = nodes
                logger.debug(
                    f"[OccupancyRegistrar] vehicle={vehicle.id} nodes={nodes[0]}..{nodes[-1]}"
                )
        except Exception:
            for index in marked:
                lattice.node(index).vehicle = None
            raise

        return table

    def _collect_nodes(self, vehicle: VehicleRecord, lattice: SpatialLattice) -> list[int]:
        head_position = self.geometry.head_position(vehicle)
        rear_position = self.geometry.rear_position(vehicle)

        head_node = None
        rear_node = None
        if head_position is not None:
            head_node = lattice.nearest_node(head_position, self.tolerance)
        if rear_position is not None:
            rear_node = lattice.nearest_node(rear_position, self.tolerance)
        if head_node is None or rear_node is None:
            raise OffLatticeVehicleError(
                f"Cannot find nodes on lattice close to vehicle {vehicle.id}."
            )

        nodes: list[int] = []
        node = rear_node
        while True:
            if node.vehicle is not None and node.vehicle != vehicle.id:
                raise OccupancyCollisionError(vehicle.id, node.vehicle, node.index)
            nodes.append(node.index)
            if node.index == head_node.index:
                break
            if node.front is None:
                raise DisconnectedNodesError(
                    f"The head and rear nodes of vehicle {vehicle.id} are not connected "
                    "in the lattice."
                )
            node = lattice.node(node.front)

        return nodes
