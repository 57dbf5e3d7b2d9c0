"""
Metrics tracker for path planning.

Purpose: Track planning calls and walking distance during a session.

Inputs:
    - PathResult per planning call
    - Distance walked by the player

Outputs:
    - Current metrics for the HUD
    - Finalized summary dictionary

Params:
    None
"""

from collections import Counter
from typing import Dict


class PlanningMetrics:
    """Planning and walking metrics for one session."""

    def __init__(self):
        self.reset()

    def reset(self):
        """Reset all counters."""
        self.plans = 0
        self.failures = Counter()
        self.total_plan_time = 0.0
        self.max_plan_time = 0.0
        self.total_expansions = 0
        self.oracle_failures = 0
        self.distance_walked = 0.0
        self.planned_length = 0.0

    def record_plan(self, result):
        """Record one planning call."""
        self.plans += 1
        self.total_plan_time += result.cpu_ms
        self.max_plan_time = max(self.max_plan_time, result.cpu_ms)
        self.total_expansions += result.expansions
        self.oracle_failures += result.oracle_failures
        if result.success:
            self.planned_length += result.length
        else:
            self.failures[result.failure.value] += 1

    def update_distance(self, distance: float):
        """Set total distance walked (monotone)."""
        self.distance_walked = max(self.distance_walked, distance)

    @property
    def successes(self) -> int:
        return self.plans - sum(self.failures.values())

    def get_current_metrics(self) -> Dict:
        """Get current metrics."""
        return {
            "plans": self.plans,
            "successes": self.successes,
            "failures": dict(self.failures),
            "plan_time_ms": self.total_plan_time / max(1, self.plans),
            "distance_walked": self.distance_walked,
        }

    def finalize(self) -> Dict:
        """
        Summarize the session.

        Returns:
            Dictionary with all metrics; efficiency is walked / planned distance
        """
        if self.planned_length > 0:
            efficiency = self.distance_walked / self.planned_length
        else:
            efficiency = 0.0

        return {
            "plans": self.plans,
            "successes": self.successes,
            "failures": dict(self.failures),
            "avg_plan_ms": self.total_plan_time / max(1, self.plans),
            "max_plan_ms": self.max_plan_time,
            "avg_expansions": self.total_expansions / max(1, self.plans),
            "oracle_failures": self.oracle_failures,
            "distance_walked": self.distance_walked,
            "efficiency": efficiency,
        }
