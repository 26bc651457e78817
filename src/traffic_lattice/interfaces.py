"""Interfaces of the services a traffic lattice is built on."""

from typing import TYPE_CHECKING, Protocol

from traffic_lattice.types import Location, RoadPosition

if TYPE_CHECKING:
    from traffic_lattice.lattice import LatticeNode


class RoadNetwork(Protocol):
    """Road network queries."""

    def resolve(self, location: Location) -> RoadPosition | None:
        """Resolve a world location to a road position, None if off road."""
        ...

    def segment_length(self, segment_id: int) -> float:
        """Length of a road segment [m]."""
        ...


class LaneNetwork(RoadNetwork, Protocol):
    """Road network that can also walk along its lanes."""

    def position_at(self, segment_id: int, distance: float) -> RoadPosition:
        """Road position at a travel distance from the segment start."""
        ...

    def location_of(self, position: RoadPosition) -> Location:
        """World location of a road position."""
        ...


class Router(Protocol):
    """Connectivity between road segments in the direction of travel."""

    def previous_segment(self, segment_id: int) -> int | None:
        ...

    def next_segment(self, segment_id: int) -> int | None:
        ...


class SpatialLattice(Protocol):
    """Longitudinal node structure over road positions."""

    resolution: float

    @property
    def entry(self) -> "LatticeNode":
        ...

    @property
    def exit(self) -> "LatticeNode":
        ...

    def create_root(self, position: RoadPosition) -> "LatticeNode":
        """Reset the lattice to a single node at ``position`` (distance 0)."""
        ...

    def extend(self, span: float) -> None:
        """Grow forward until the exit node is ``span`` from the entry."""
        ...

    def nearest_node(self, position: RoadPosition, tolerance: float) -> "LatticeNode | None":
        """Closest node within ``tolerance``, None if there is none."""
        ...

    def node(self, index: int) -> "LatticeNode":
        """Node by arena index."""
        ...
