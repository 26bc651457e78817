"""Tests for TrafficLattice."""

import logging
from types import SimpleNamespace

import pytest

from traffic_lattice import (
    LatticeExtensionError,
    OccupancyCollisionError,
    RoadPosition,
    SegmentRouter,
    SpanTooSmallError,
    TrafficLattice,
    TrafficLatticeConfig,
    TrafficLatticeError,
    UnsortableRoadsError,
    WaypointLattice,
)


def make_actor(actor_id: int, x: float, yaw: float = 0.0, extent: float = 2.0) -> SimpleNamespace:
    """Minimal live agent handle."""
    transform = SimpleNamespace(
        location=SimpleNamespace(x=x, y=0.0, z=0.0), rotation=SimpleNamespace(yaw=yaw)
    )
    bounding_box = SimpleNamespace(extent=SimpleNamespace(x=extent, y=1.0, z=1.0))
    return SimpleNamespace(
        id=actor_id,
        get_transform=lambda: transform,
        get_bounding_box=lambda: bounding_box,
    )


class TestTrafficLatticeConstruction:
    """Tests for building the lattice."""

    def test_two_vehicles_on_one_road(self, straight_road, vehicle) -> None:
        """Two vehicles 10m apart are both registered."""
        road_map, router = straight_road([100.0])

        traffic = TrafficLattice([vehicle(1, 50.0), vehicle(2, 40.0)], road_map, router)

        assert traffic.vehicles() == {1, 2}
        assert traffic.roads == [1]
        assert traffic.span == pytest.approx(14.0)
        assert traffic.resolution == 1.0
        assert traffic.lattice_entry.position.offset == pytest.approx(38.0)
        assert traffic.lattice_exit.distance == pytest.approx(14.0)
        assert [n.index for n in traffic.vehicle_nodes(1)] == [10, 11, 12, 13, 14]
        assert [n.index for n in traffic.vehicle_nodes(2)] == [0, 1, 2, 3, 4]

    def test_overlapping_vehicles(self, straight_road, vehicle) -> None:
        """Overlapping vehicles cannot be registered."""
        road_map, router = straight_road([100.0])

        with pytest.raises(OccupancyCollisionError):
            TrafficLattice([vehicle(1, 50.0), vehicle(2, 53.0)], road_map, router)

    def test_vehicles_on_two_roads(self, straight_road, vehicle) -> None:
        """The lattice follows the chain of roads."""
        road_map, router = straight_road([50.0, 80.0])

        traffic = TrafficLattice([vehicle(1, 100.0), vehicle(2, 20.0)], road_map, router)

        assert traffic.roads == [1, 2]
        assert traffic.span == pytest.approx(84.0)
        nodes = traffic.vehicle_nodes(1)
        assert len(nodes) == 5
        assert {n.position.segment_id for n in nodes} == {2}

    def test_positive_lane(self, straight_road, vehicle) -> None:
        """Vehicles driving against the reference line."""
        road_map, router = straight_road([100.0], lane_id=1)

        traffic = TrafficLattice(
            [vehicle(1, 40.0, yaw=180.0), vehicle(2, 50.0, yaw=180.0)], road_map, router
        )

        assert traffic.lattice_entry.position.lane_id == 1
        assert traffic.lattice_entry.position.offset == pytest.approx(52.0)
        assert traffic.front_vehicle(2) == (1, pytest.approx(6.0))

    def test_span_too_small(self, straight_road, vehicle) -> None:
        """No lattice is created when the span is too small."""
        road_map, router = straight_road([100.0])
        created: list[float] = []

        def factory(resolution: float) -> WaypointLattice:
            created.append(resolution)
            return WaypointLattice(road_map, router, resolution)

        with pytest.raises(SpanTooSmallError, match="too small"):
            TrafficLattice([vehicle(1, 50.0, extent=0.4)], road_map, router, lattice_factory=factory)

        assert created == []

    def test_custom_lattice_factory(self, straight_road, vehicle) -> None:
        """The factory receives the configured resolution."""
        road_map, router = straight_road([100.0])
        created: list[float] = []

        def factory(resolution: float) -> WaypointLattice:
            created.append(resolution)
            return WaypointLattice(road_map, router, resolution)

        config = TrafficLatticeConfig(resolution=0.5)
        traffic = TrafficLattice(
            [vehicle(1, 50.0)], road_map, router, config=config, lattice_factory=factory
        )

        assert created == [0.5]
        assert len(traffic.vehicle_nodes(1)) == 9

    def test_reference_point_half_way_between_nodes(self, straight_road, vehicle) -> None:
        """Rear and head points half a resolution from two nodes are registered."""
        road_map, router = straight_road([100.0])

        for x in (40.5, 41.5):
            traffic = TrafficLattice([vehicle(1, 50.0), vehicle(2, x)], road_map, router)

            assert traffic.vehicles() == {1, 2}
            front_nodes = {n.index for n in traffic.vehicle_nodes(1)}
            back_nodes = {n.index for n in traffic.vehicle_nodes(2)}
            assert front_nodes.isdisjoint(back_nodes)
            assert [n.index for n in traffic.vehicle_nodes(2)] == [0, 1, 2, 3, 4]
            rear_distance = 48.0 - (x - 2.0)
            assert abs(traffic.vehicle_nodes(1)[0].distance - rear_distance) == pytest.approx(0.5)

    def test_road_ends_before_span(self, straight_road, vehicle) -> None:
        """Extension failures of the lattice reach the caller."""
        road_map, router = straight_road([50.0, 50.0])

        def factory(resolution: float) -> WaypointLattice:
            return WaypointLattice(road_map, SegmentRouter({}), resolution)

        with pytest.raises(LatticeExtensionError, match="Road ends"):
            TrafficLattice(
                [vehicle(1, 20.0), vehicle(2, 80.0)], road_map, router, lattice_factory=factory
            )

    def test_disconnected_roads(self, straight_road, vehicle) -> None:
        """Vehicles on unconnected roads."""
        road_map, _ = straight_road([50.0, 50.0])

        with pytest.raises(UnsortableRoadsError):
            TrafficLattice([vehicle(1, 20.0), vehicle(2, 80.0)], road_map, SegmentRouter({}))

    def test_failure_is_logged(self, straight_road, vehicle, caplog) -> None:
        """Construction failures are logged before propagating."""
        road_map, router = straight_road([100.0])

        with caplog.at_level(logging.ERROR, logger="traffic_lattice"):
            with pytest.raises(TrafficLatticeError):
                TrafficLattice([vehicle(1, 50.0), vehicle(2, 53.0)], road_map, router)

        assert "[TrafficLattice]" in caplog.text

    def test_empty_vehicles(self, straight_road) -> None:
        road_map, router = straight_road([100.0])
        with pytest.raises(ValueError, match="At least one vehicle"):
            TrafficLattice([], road_map, router)

    def test_duplicate_ids(self, straight_road, vehicle) -> None:
        road_map, router = straight_road([100.0])
        with pytest.raises(ValueError, match="Duplicate vehicle id 1"):
            TrafficLattice([vehicle(1, 20.0), vehicle(1, 60.0)], road_map, router)

    def test_from_actors(self, straight_road) -> None:
        """Live agent handles are accepted."""
        road_map, router = straight_road([100.0])

        traffic = TrafficLattice.from_actors([make_actor(7, 50.0), make_actor(8, 40.0)], road_map, router)

        assert traffic.vehicles() == {7, 8}

    def test_mixed_inputs(self, straight_road, vehicle) -> None:
        """Records and handles can be mixed."""
        road_map, router = straight_road([100.0])

        traffic = TrafficLattice([vehicle(1, 50.0), make_actor(2, 40.0)], road_map, router)

        assert traffic.vehicles() == {1, 2}


class TestTrafficLatticeQueries:
    """Tests for queries on a built lattice."""

    @pytest.fixture
    def traffic(self, straight_road, vehicle) -> TrafficLattice:
        road_map, router = straight_road([100.0])
        return TrafficLattice(
            [vehicle(1, 50.0), vehicle(2, 40.0), vehicle(3, 70.0)], road_map, router
        )

    def test_vehicle_at(self, traffic: TrafficLattice) -> None:
        assert traffic.vehicle_at(RoadPosition(1, -1, 50.0)) == 1
        assert traffic.vehicle_at(RoadPosition(1, -1, 39.0)) == 2
        assert traffic.vehicle_at(RoadPosition(1, -1, 60.0)) is None
        # Before the lattice entry.
        assert traffic.vehicle_at(RoadPosition(1, -1, 10.0)) is None

    def test_unknown_vehicle(self, traffic: TrafficLattice) -> None:
        with pytest.raises(KeyError):
            traffic.vehicle_nodes(99)

    def test_front_vehicle(self, traffic: TrafficLattice) -> None:
        """Gap is measured from the head to the rear of the next vehicle."""
        assert traffic.front_vehicle(2) == (1, pytest.approx(6.0))
        assert traffic.front_vehicle(1) == (3, pytest.approx(16.0))
        assert traffic.front_vehicle(3) is None

    def test_front_vehicle_lookahead(self, traffic: TrafficLattice) -> None:
        assert traffic.front_vehicle(1, lookahead=10.0) is None
        assert traffic.front_vehicle(2, lookahead=6.0) == (1, pytest.approx(6.0))

    def test_back_vehicle(self, traffic: TrafficLattice) -> None:
        """Gap is measured from the rear to the head of the previous vehicle."""
        assert traffic.back_vehicle(3) == (1, pytest.approx(16.0))
        assert traffic.back_vehicle(1) == (2, pytest.approx(6.0))
        assert traffic.back_vehicle(2) is None
        assert traffic.back_vehicle(3, lookbehind=5.0) is None
