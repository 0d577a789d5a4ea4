"""
ranking.py

Orders the cars of a frame by race position for the standings table.
Unclassified cars (position 0) are left out and leave a gap, they are never
filled with an empty car.
"""

from typing import Iterable, Iterator, List, Optional

from f1_core.model import CAR_CAPACITY, CarSnapshot


class RunningOrder:
    """
    Cars keyed by ``car_position - 1``.
    - len(): number of classified cars
    - order[i]: car at position i + 1, or None for a gap
    - iteration: classified cars in position order
    """

    def __init__(self, capacity: int = CAR_CAPACITY):
        self._slots: List[Optional[CarSnapshot]] = [None] * capacity

    def place(self, car: CarSnapshot) -> bool:
        idx = car.car_position - 1
        if not (0 <= idx < len(self._slots)):
            return False
        self._slots[idx] = car
        return True

    def __len__(self) -> int:
        return sum(1 for car in self._slots if car is not None)

    def __getitem__(self, index: int) -> Optional[CarSnapshot]:
        if 0 <= index < len(self._slots):
            return self._slots[index]
        return None

    def __iter__(self) -> Iterator[CarSnapshot]:
        return (car for car in self._slots if car is not None)

    def slots(self) -> List[Optional[CarSnapshot]]:
        """Positions 1..highest classified, with None in the gaps."""
        last = max((i for i, car in enumerate(self._slots) if car is not None), default=-1)
        return list(self._slots[:last + 1])

    def leader(self) -> Optional[CarSnapshot]:
        return self._slots[0] if self._slots else None


def rank_cars(cars: Iterable[CarSnapshot], capacity: int = CAR_CAPACITY) -> RunningOrder:
    """Return the cars ordered by race position, skipping unclassified ones."""
    order = RunningOrder(capacity)
    for car in cars:
        if car.car_position == 0:
            continue
        order.place(car)
    return order
