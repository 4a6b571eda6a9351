"""
Bean counter (quincunx / Galton box) state machine.

Logical coordinates for a 4-slot machine; row y has columns 0..y and the
bean leaving the last row settles in the slot under its column:

                     (0, 0)
              (0, 1)        (1, 1)
       (0, 2)        (1, 2)        (2, 2)
 (0, 3)       (1, 3)        (2, 3)       (3, 3)
[Slot0]       [Slot1]       [Slot2]      [Slot3]

Beans are moved between the waiting pool, the rows and the slots, never
copied, so every bean is held by exactly one of them.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from .bean import Bean
from .config import NO_BEAN_IN_YPOS


class BoardState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINED = "drained"


class GaltonBoard:
    """
    Board with `slot_count` rows and slots.

    Every tick moves all in-flight beans down one row at once and drops the
    next waiting bean (last in, first out) into row 0.
    """

    def __init__(self, slot_count: int) -> None:
        if slot_count < 0:
            raise ValueError("slot_count must be >= 0")
        self._slot_count = int(slot_count)
        self._waiting: list[Bean] = []
        self._rows: list[Optional[Bean]] = [None] * self._slot_count
        self._slots: list[list[Bean]] = [[] for _ in range(self._slot_count)]
        self._total_beans = 0
        self._loaded = False

    # ---- queries

    @property
    def slot_count(self) -> int:
        return self._slot_count

    @property
    def total_beans(self) -> int:
        """Beans in the current run (waiting + in flight + settled)."""
        return self._total_beans

    @property
    def state(self) -> BoardState:
        """
        IDLE before the first reset, DRAINED once nothing waits or falls.

        A zero-slot board has no row 0 to drop into, so beans given to it
        stay waiting and it reports RUNNING forever even though
        advance_step() returns False.
        """
        if not self._loaded:
            return BoardState.IDLE
        if self._waiting or self.in_flight_bean_count() > 0:
            return BoardState.RUNNING
        return BoardState.DRAINED

    def remaining_bean_count(self) -> int:
        return len(self._waiting)

    def in_flight_bean_count(self) -> int:
        return sum(1 for b in self._rows if b is not None)

    def settled_bean_count(self) -> int:
        return sum(len(s) for s in self._slots)

    def in_flight_bean(self, y: int) -> Optional[Bean]:
        if 0 <= y < self._slot_count:
            return self._rows[y]
        return None

    def in_flight_bean_xpos(self, y: int) -> int:
        """Column of the bean in row `y`, or NO_BEAN_IN_YPOS."""
        bean = self.in_flight_bean(y)
        return NO_BEAN_IN_YPOS if bean is None else bean.position

    def slot_bean_count(self, i: int) -> int:
        if 0 <= i < self._slot_count:
            return len(self._slots[i])
        return 0

    def slot_counts(self) -> list[int]:
        return [len(s) for s in self._slots]

    def average_slot_bean_count(self) -> float:
        """Mean slot index over all settled beans (0.0 when none)."""
        total = self.settled_bean_count()
        if total == 0:
            return 0.0
        weighted = sum(i * len(s) for i, s in enumerate(self._slots))
        return weighted / total

    # ---- transitions

    def _drop_next(self) -> None:
        if self._waiting and self._slot_count > 0:
            self._rows[0] = self._waiting.pop()

    def reset(self, beans: Sequence[Bean]) -> None:
        """
        Hard reset: load `beans` and put the last of them at the top.

        Bean state is left as is; callers reset beans they are reusing.
        """
        self._rows = [None] * self._slot_count
        self._slots = [[] for _ in range(self._slot_count)]
        self._waiting = list(beans)
        self._total_beans = len(self._waiting)
        self._loaded = True
        self._drop_next()

    def advance_step(self) -> bool:
        """
        Move every in-flight bean down one row, bottom row first.

        The row order fixes the order of random draws and must not change.
        Returns False once nothing is in flight (the machine is finished).
        """
        last = self._slot_count - 1
        status_change = False
        for i in range(last, -1, -1):
            bean = self._rows[i]
            if bean is not None:
                if i == last:
                    self._slots[bean.position].append(bean)
                else:
                    bean.choose()
                    self._rows[i + 1] = bean
                self._rows[i] = None
                status_change = True
            elif i < last:
                self._rows[i + 1] = None
        self._drop_next()
        return status_change

    def repeat(self) -> None:
        """
        Soft reset: scoop in-flight and settled beans back into the pool.

        In-flight beans go first (top row first), then each slot from its
        newest bean. Bean positions and skill budgets are not reset.
        """
        for i in range(self._slot_count):
            bean = self._rows[i]
            if bean is not None:
                self._waiting.append(bean)
                self._rows[i] = None
        for slot in self._slots:
            while slot:
                self._waiting.append(slot.pop())
        self._drop_next()

    def _remove_half(self, slot_order: Sequence[int]) -> int:
        total = self.settled_bean_count()
        to_remove = total // 2 if total % 2 == 0 else (total - 1) // 2
        removed = 0
        for i in slot_order:
            slot = self._slots[i]
            while slot and to_remove > 0:
                slot.pop()
                to_remove -= 1
                removed += 1
            if to_remove == 0:
                break
        self._total_beans -= removed
        return removed

    def upper_half(self) -> int:
        """
        Keep the upper half of the settled beans.

        Removes floor(N/2) beans starting from slot 0, newest first in each
        slot, so ceil(N/2) beans remain. Returns the number removed.
        """
        return self._remove_half(range(self._slot_count))

    def lower_half(self) -> int:
        """Keep the lower half of the settled beans (mirror of upper_half)."""
        return self._remove_half(range(self._slot_count - 1, -1, -1))
