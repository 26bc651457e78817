"""Start position and span of the lattice covering a set of vehicles."""

import logging
from collections import defaultdict
from collections.abc import Sequence

from traffic_lattice.config import TrafficLatticeConfig
from traffic_lattice.errors import UnresolvedLocationError
from traffic_lattice.geometry import VehicleGeometry
from traffic_lattice.interfaces import RoadNetwork, Router
from traffic_lattice.road_chain import RoadChainSorter
from traffic_lattice.road_map import distance_from_segment_start
from traffic_lattice.types import RoadPosition, SpanEstimate, VehicleRecord

logger = logging.getLogger(__name__)


class SpanEstimator:
    """Finds where a traffic lattice starts and how long it is."""

    def __init__(
        self,
        road_network: RoadNetwork,
        router: Router,
        config: TrafficLatticeConfig | None = None,
    ):
        """Initialize SpanEstimator.

        Args:
            road_network: Road network used to resolve vehicle locations
            router: Router used to chain the occupied roads
            config: Lattice configuration (margin and sort rounds)
        """
        self.road_network = road_network
        self.config = config or TrafficLatticeConfig()
        self.geometry = VehicleGeometry(road_network)
        self.sorter = RoadChainSorter(router, max_rounds=self.config.max_sort_rounds)

    def estimate(self, vehicles: Sequence[VehicleRecord]) -> SpanEstimate:
        """Estimate the lattice start and span for the given vehicles.

        The lattice starts at the rear of the first vehicle and ends at the
        head of the last one. If either reference point resolves onto a road
        outside of the chain built from the vehicle centers, the span is
        padded by the boundary margin instead of being trimmed.

        Args:
            vehicles: Vehicles to cover, ids must be unique

        Returns:
            SpanEstimate with start position, span and sorted roads

        Raises:
            ValueError: If no vehicle is given
            UnresolvedLocationError: If a required location is off road
        """
        if not vehicles:
            raise ValueError("At least one vehicle is required")

        vehicle_table = {vehicle.id: vehicle for vehicle in vehicles}

        # Group the vehicles by road, ordered by distance along the road.
        center_distances: dict[int, float] = {}
        road_to_vehicles: dict[int, list[int]] = defaultdict(list)
        for vehicle in vehicles:
            position = self._require(self.geometry.center_position(vehicle), vehicle, "center")
            center_distances[vehicle.id] = distance_from_segment_start(position, self.road_network)
            road_to_vehicles[position.segment_id].append(vehicle.id)

        for ids in road_to_vehicles.values():
            ids.sort(key=lambda vid: center_distances[vid])

        roads = self.sorter.sort(road_to_vehicles.keys())

        first_vehicle = vehicle_table[road_to_vehicles[roads[0]][0]]
        last_vehicle = vehicle_table[road_to_vehicles[roads[-1]][-1]]

        rear = self._require(self.geometry.rear_position(first_vehicle), first_vehicle, "rear")
        head = self._require(self.geometry.head_position(last_vehicle), last_vehicle, "head")

        span = sum(self.road_network.segment_length(road) for road in roads)

        if rear.segment_id == roads[0]:
            span -= distance_from_segment_start(rear, self.road_network)
        else:
            logger.warning(
                f"[SpanEstimator] Rear of vehicle {first_vehicle.id} is on road {rear.segment_id}, "
                f"outside of {roads}. Padding span by {self.config.boundary_margin}m."
            )
            span += self.config.boundary_margin

        if head.segment_id == roads[-1]:
            span -= self.road_network.segment_length(roads[-1]) - distance_from_segment_start(
                head, self.road_network
            )
        else:
            logger.warning(
                f"[SpanEstimator] Head of vehicle {last_vehicle.id} is on road {head.segment_id}, "
                f"outside of {roads}. Padding span by {self.config.boundary_margin}m."
            )
            span += self.config.boundary_margin

        logger.debug(
            f"[SpanEstimator] roads={roads} first={first_vehicle.id} last={last_vehicle.id} "
            f"span={span:.2f}"
        )
        return SpanEstimate(start=rear, span=span, roads=roads)

    @staticmethod
    def _require(
        position: RoadPosition | None, vehicle: VehicleRecord, label: str
    ) -> RoadPosition:
        if position is None:
            raise UnresolvedLocationError(
                f"Cannot resolve the {label} of vehicle {vehicle.id} onto the road network."
            )
        return position
