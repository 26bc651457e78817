"""Traffic lattice configuration."""

from pathlib import Path

from pydantic import BaseModel, Field


class TrafficLatticeConfig(BaseModel):
    """Configuration for TrafficLattice."""

    resolution: float = Field(1.0, gt=0, description="Longitudinal node spacing [m]")
    boundary_margin: float = Field(
        5.0,
        ge=0,
        description="Span padding when a reference point falls off the road chain [m]",
    )
    max_sort_rounds: int = Field(
        5, gt=0, description="Max router expansions when chaining roads"
    )

    @property
    def node_tolerance(self) -> float:
        """Max distance between a reference point and its lattice node [m]."""
        return self.resolution / 2.0

    @classmethod
    def from_yaml(cls, path: str | Path) -> "TrafficLatticeConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML file

        Returns:
            TrafficLatticeConfig instance
        """
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f)
        return cls(**(data or {}))
