"""Chain an unordered set of road segments into a single corridor."""

import logging
from collections import deque
from collections.abc import Iterable

from traffic_lattice.errors import UnsortableRoadsError
from traffic_lattice.interfaces import Router

logger = logging.getLogger(__name__)


class RoadChainSorter:
    """Sorts road segments into forward traversal order."""

    def __init__(self, router: Router, max_rounds: int = 5):
        """Initialize RoadChainSorter.

        Args:
            router: Router providing previous / next segments
            max_rounds: Max number of times the chain is grown at both ends
        """
        if max_rounds <= 0:
            raise ValueError(f"max_rounds must be positive, got {max_rounds}")
        self.router = router
        self.max_rounds = max_rounds

    def sort(self, roads: Iterable[int]) -> list[int]:
        """Sort the given roads into a chain.

        The roads are assumed to be close to each other and free of parallel
        branches: starting from any of them, all others are reached within
        ``max_rounds`` steps forward or backward. Segments outside the input
        may be added to fill the gaps between input segments.

        Args:
            roads: Segment ids to sort

        Returns:
            Sorted segment ids, first and last ones belong to the input

        Raises:
            ValueError: If no road is given
            UnsortableRoadsError: If the roads cannot be chained
        """
        road_set = set(roads)
        if not road_set:
            raise ValueError("At least one road is required")

        remaining = set(road_set)
        seed = min(remaining)
        remaining.discard(seed)
        chain: deque[int] = deque([seed])

        for round_idx in range(self.max_rounds):
            new_first = self.router.previous_segment(chain[0])
            new_last = self.router.next_segment(chain[-1])

            if new_first is not None:
                chain.appendleft(new_first)
                remaining.discard(new_first)
            if new_last is not None:
                chain.append(new_last)
                remaining.discard(new_last)

            logger.debug(
                f"[RoadChainSorter] round={round_idx} chain={list(chain)} remaining={sorted(remaining)}"
            )
            if not remaining:
                break

        if remaining:
            raise UnsortableRoadsError(
                f"The given roads cannot be sorted, {sorted(remaining)} are not connected "
                f"to {list(chain)}. The given vehicles probably do not form a local traffic."
            )

        while chain[0] not in road_set:
            chain.popleft()
        while chain[-1] not in road_set:
            chain.pop()

        return list(chain)
