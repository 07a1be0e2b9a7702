"""
Scroll State Model
==================

State value threaded through the scroll choreography loop.

The choreographer never mutates a ScrollState in place: every iteration
produces a new value via `advance`, which keeps the decision logic pure
and testable without a live view.

Invariants:
    - scrolled_position never decreases
    - elapsed_time_ms == start_elapsed_ms + cycle_count * frame_interval_ms
      (computed, so it cannot drift through repeated float addition)
    - page_height never decreases
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class ScrollState:
    """
    Progress of one choreography run.

    Attributes:
        scrolled_position: Bottom edge of the viewport in document pixels
        page_height: Document height the run is scrolling towards
        start_elapsed_ms: GIF time already consumed when the run started
        frame_interval_ms: GIF time consumed per iteration (1000 / fps)
        cycle_count: Number of completed choreography iterations
    """

    scrolled_position: float
    page_height: float
    start_elapsed_ms: float
    frame_interval_ms: float
    cycle_count: int = 0

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.scrolled_position < 0:
            raise ValueError("scrolled_position must be non-negative")
        if self.start_elapsed_ms < 0:
            raise ValueError("start_elapsed_ms must be non-negative")
        if self.frame_interval_ms <= 0:
            raise ValueError("frame_interval_ms must be positive")
        if self.cycle_count < 0:
            raise ValueError("cycle_count must be non-negative")

    @property
    def elapsed_time_ms(self) -> float:
        """GIF time consumed so far, holds included."""
        return self.start_elapsed_ms + self.cycle_count * self.frame_interval_ms

    @property
    def progress(self) -> float:
        """Distance fraction scrolled, clamped to [0, 1]."""
        if self.page_height <= 0:
            return 1.0
        return min(1.0, max(0.0, self.scrolled_position / self.page_height))

    def reached_bottom(self) -> bool:
        return self.scrolled_position >= self.page_height

    def out_of_time(self, time_budget_ms: float) -> bool:
        return self.elapsed_time_ms >= time_budget_ms

    def advance(self, delta: int) -> "ScrollState":
        """Return the state after one iteration that scrolled by `delta`."""
        if delta < 0:
            raise ValueError("scroll delta must be non-negative")
        return replace(
            self,
            scrolled_position=self.scrolled_position + delta,
            cycle_count=self.cycle_count + 1,
        )

    def with_page_height(self, page_height: float) -> "ScrollState":
        """Return a copy tracking a taller document (never shrinks)."""
        if page_height <= self.page_height:
            return self
        return replace(self, page_height=page_height)

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "scrolled_position": round(self.scrolled_position, 1),
            "page_height": round(self.page_height, 1),
            "elapsed_time_ms": round(self.elapsed_time_ms, 3),
            "cycle_count": self.cycle_count,
        }
