"""Waypoint lattice: a node arena stretched along the road network."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np
from scipy.spatial import KDTree

from traffic_lattice.errors import LatticeExtensionError, SpanTooSmallError
from traffic_lattice.interfaces import LaneNetwork, Router
from traffic_lattice.road_map import distance_from_segment_start
from traffic_lattice.types import RoadPosition

logger = logging.getLogger(__name__)

_EPS = 1e-6


@dataclass
class LatticeNode:
    """A discretized longitudinal position of the lattice."""

    index: int  # Arena index, identity of the node
    position: RoadPosition
    distance: float = 0.0  # Distance from the lattice entry [m]
    vehicle: int | None = None  # Occupying vehicle id
    front: int | None = None  # Arena index of the next node
    back: int | None = None  # Arena index of the previous node


class WaypointLattice:
    """Single lane lattice with fixed longitudinal resolution."""

    def __init__(self, road_network: LaneNetwork, router: Router, resolution: float = 1.0):
        """Initialize WaypointLattice.

        Args:
            road_network: Road network used to step along lanes
            router: Router used to cross segment boundaries
            resolution: Distance between adjacent nodes [m]
        """
        if resolution <= 0.0:
            raise ValueError(f"Resolution must be positive, got {resolution}")

        self.road_network = road_network
        self.router = router
        self.resolution = resolution

        self._nodes: list[LatticeNode] = []
        self._points: list[tuple[float, float]] = []
        self._tree: KDTree | None = None
        self._entry: int | None = None
        self._exit: int | None = None

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def entry(self) -> LatticeNode:
        if self._entry is None:
            raise RuntimeError("Lattice has no root node")
        return self._nodes[self._entry]

    @property
    def exit(self) -> LatticeNode:
        if self._exit is None:
            raise RuntimeError("Lattice has no root node")
        return self._nodes[self._exit]

    def node(self, index: int) -> LatticeNode:
        return self._nodes[index]

    def nodes(self) -> Iterator[LatticeNode]:
        return iter(self._nodes)

    def create_root(self, position: RoadPosition) -> LatticeNode:
        """Drop all nodes and start over from a single root node.

        Args:
            position: Road position of the root

        Returns:
            The root node, both entry and exit of the lattice
        """
        self._nodes = []
        self._points = []
        self._tree = None

        root = self._add_node(position, distance=0.0, back=None)
        self._entry = root.index
        self._exit = root.index
        return root

    def extend(self, span: float) -> None:
        """Append nodes after the exit until it is ``span`` from the entry.

        Args:
            span: Target distance of the exit node [m]

        Raises:
            SpanTooSmallError: If span is not larger than the resolution
            LatticeExtensionError: If the road ends before span is reached
        """
        if span <= self.resolution:
            raise SpanTooSmallError(
                f"The given span [{span}] is too small. "
                f"Span should be at least 1x resolution [{self.resolution}]."
            )

        tail = self.exit
        while tail.distance + _EPS < span:
            position = self._step(tail.position)
            if position is None:
                raise LatticeExtensionError(
                    f"Road ends on segment {tail.position.segment_id} at "
                    f"{tail.distance:.2f}m, before the span [{span:.2f}m] is covered."
                )
            node = self._add_node(position, distance=tail.distance + self.resolution, back=tail.index)
            tail.front = node.index
            tail = node

        self._exit = tail.index
        logger.debug(
            f"[WaypointLattice] Extended to {tail.distance:.2f}m with {len(self._nodes)} nodes"
        )

    def nearest_node(self, position: RoadPosition, tolerance: float) -> LatticeNode | None:
        """Find the node closest to a road position.

        Args:
            position: Query road position
            tolerance: Max distance between the position and the node [m]

        Returns:
            Closest node, or None if no node is within tolerance
        """
        if not self._nodes:
            return None

        if self._tree is None:
            self._tree = KDTree(np.asarray(self._points))

        location = self.road_network.location_of(position)
        # The query bound is exclusive, a point exactly at tolerance still matches.
        dist, idx = self._tree.query(
            [location.x, location.y], distance_upper_bound=tolerance + _EPS
        )
        if np.isinf(dist) or dist > tolerance + _EPS:
            return None
        return self._nodes[int(idx)]

    def _add_node(self, position: RoadPosition, distance: float, back: int | None) -> LatticeNode:
        node = LatticeNode(index=len(self._nodes), position=position, distance=distance, back=back)
        self._nodes.append(node)

        location = self.road_network.location_of(position)
        self._points.append((location.x, location.y))
        self._tree = None
        return node

    def _step(self, position: RoadPosition) -> RoadPosition | None:
        """Road position one resolution ahead, None at a dead end."""
        segment_id = position.segment_id
        distance = distance_from_segment_start(position, self.road_network) + self.resolution
        length = self.road_network.segment_length(segment_id)

        while distance > length + _EPS:
            next_segment = self.router.next_segment(segment_id)
            if next_segment is None:
                return None
            distance -= length
            segment_id = next_segment
            length = self.road_network.segment_length(segment_id)

        return self.road_network.position_at(segment_id, distance)
