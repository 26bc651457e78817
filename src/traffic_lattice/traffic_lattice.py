"""Traffic lattice: tracks the local traffic along a chain of roads."""

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from traffic_lattice.config import TrafficLatticeConfig
from traffic_lattice.errors import SpanTooSmallError, TrafficLatticeError
from traffic_lattice.geometry import VehicleGeometry
from traffic_lattice.interfaces import RoadNetwork, Router, SpatialLattice
from traffic_lattice.lattice import LatticeNode, WaypointLattice
from traffic_lattice.occupancy import OccupancyRegistrar
from traffic_lattice.span_estimator import SpanEstimator
from traffic_lattice.types import RoadPosition, VehicleRecord

logger = logging.getLogger(__name__)

LatticeFactory = Callable[[float], SpatialLattice]


def _to_records(vehicles: Iterable[Any]) -> list[VehicleRecord]:
    records = [v if isinstance(v, VehicleRecord) else VehicleRecord.from_actor(v) for v in vehicles]
    if not records:
        raise ValueError("At least one vehicle is required")

    seen: set[int] = set()
    for record in records:
        if record.id in seen:
            raise ValueError(f"Duplicate vehicle id {record.id}")
        seen.add(record.id)
    return records


class TrafficLattice:
    """Lattice over the roads spanned by a set of vehicles.

    Construction is all or nothing: either every vehicle is registered onto
    the lattice without overlap, or a TrafficLatticeError is raised and no
    object is produced. A new instance is built for every snapshot.
    """

    def __init__(
        self,
        vehicles: Iterable[VehicleRecord | Any],
        road_network: RoadNetwork,
        router: Router,
        config: TrafficLatticeConfig | None = None,
        lattice_factory: LatticeFactory | None = None,
    ):
        """Initialize TrafficLattice.

        Args:
            vehicles: VehicleRecords, or live agent handles convertible with
                VehicleRecord.from_actor
            road_network: Road network the vehicles are on
            router: Router providing segment connectivity
            config: Lattice configuration
            lattice_factory: Creates an empty spatial lattice for a resolution.
                Defaults to a WaypointLattice, which requires ``road_network``
                to also implement LaneNetwork.

        Raises:
            ValueError: If the vehicle set is empty or has duplicate ids
            TrafficLatticeError: If the lattice cannot be built
        """
        self.config = config or TrafficLatticeConfig()
        self.road_network = road_network
        self.router = router

        records = _to_records(vehicles)

        try:
            estimate = SpanEstimator(road_network, router, self.config).estimate(records)

            if estimate.span <= self.config.resolution:
                raise SpanTooSmallError(
                    f"The given span [{estimate.span:.2f}] is too small. "
                    f"Span should be at least 1x resolution [{self.config.resolution}]."
                )

            if lattice_factory is None:
                self._lattice: SpatialLattice = WaypointLattice(
                    road_network, router, self.config.resolution
                )
            else:
                self._lattice = lattice_factory(self.config.resolution)

            self._lattice.create_root(estimate.start)
            self._lattice.extend(estimate.span)

            registrar = OccupancyRegistrar(VehicleGeometry(road_network), self.config.node_tolerance)
            self._vehicle_to_nodes = registrar.register(records, self._lattice)
        except TrafficLatticeError as e:
            logger.error(f"[TrafficLattice] Failed to build lattice for {len(records)} vehicles: {e}")
            raise

        self.span = estimate.span
        self.roads = estimate.roads

        logger.info(
            f"[TrafficLattice] Built lattice over roads {self.roads}: span={self.span:.2f}m, "
            f"vehicles={len(self._vehicle_to_nodes)}"
        )

    @classmethod
    def from_actors(
        cls,
        actors: Sequence[Any],
        road_network: RoadNetwork,
        router: Router,
        config: TrafficLatticeConfig | None = None,
        lattice_factory: LatticeFactory | None = None,
    ) -> "TrafficLattice":
        """Build a lattice from live agent handles."""
        records = [VehicleRecord.from_actor(actor) for actor in actors]
        return cls(records, road_network, router, config, lattice_factory)

    @property
    def resolution(self) -> float:
        return self.config.resolution

    @property
    def lattice_entry(self) -> LatticeNode:
        return self._lattice.entry

    @property
    def lattice_exit(self) -> LatticeNode:
        return self._lattice.exit

    def vehicles(self) -> set[int]:
        """Ids of the registered vehicles."""
        return set(self._vehicle_to_nodes)

    def vehicle_nodes(self, vehicle_id: int) -> list[LatticeNode]:
        """Nodes occupied by a vehicle, ordered from rear to head.

        Raises:
            KeyError: If the vehicle is not on the lattice
        """
        return [self._lattice.node(index) for index in self._vehicle_to_nodes[vehicle_id]]

    def vehicle_at(self, position: RoadPosition) -> int | None:
        """Id of the vehicle occupying the node at a road position, if any."""
        node = self._lattice.nearest_node(position, self.config.node_tolerance)
        if node is None:
            return None
        return node.vehicle

    def front_vehicle(
        self, vehicle_id: int, lookahead: float | None = None
    ) -> tuple[int, float] | None:
        """Closest vehicle ahead of the given one.

        Args:
            vehicle_id: Reference vehicle
            lookahead: Max gap to search [m], None for the whole lattice

        Returns:
            Tuple of (vehicle id, gap between the head and the other rear [m]),
            or None if no vehicle is found
        """
        head = self.vehicle_nodes(vehicle_id)[-1]
        node = head
        while node.front is not None:
            node = self._lattice.node(node.front)
            gap = node.distance - head.distance
            if lookahead is not None and gap > lookahead:
                break
            if node.vehicle is not None and node.vehicle != vehicle_id:
                return node.vehicle, gap
        return None

    def back_vehicle(
        self, vehicle_id: int, lookbehind: float | None = None
    ) -> tuple[int, float] | None:
        """Closest vehicle behind the given one.

        Args:
            vehicle_id: Reference vehicle
            lookbehind: Max gap to search [m], None for the whole lattice

        Returns:
            Tuple of (vehicle id, gap between the rear and the other head [m]),
            or None if no vehicle is found
        """
        rear = self.vehicle_nodes(vehicle_id)[0]
        node = rear
        while node.back is not None:
            node = self._lattice.node(node.back)
            gap = rear.distance - node.distance
            if lookbehind is not None and gap > lookbehind:
                break
            if node.vehicle is not None and node.vehicle != vehicle_id:
                return node.vehicle, gap
        return None
