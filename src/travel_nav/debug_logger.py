"""
Diagnostic output for travel_nav.

Navigation never fails loudly: incomplete searches, failed coarse routes and
agents burning too much search time are reported here instead. Output is
line-oriented and greppable.

Verbosity levels (``NavigatorConfig.debug``):
    0: silent; events are still recorded in ``events``
    1: diagnostics (default)
    2: diagnostics plus one line per emitted step and a per-tick summary

All output lines are prefixed with ``[travel_nav]``.
"""

from __future__ import annotations

import json
import sys
from collections import Counter
from dataclasses import dataclass
from typing import Any, Optional

# Event kinds
INCOMPLETE_PATH = "incomplete_path"
HEAVY_COST = "heavy_cost"
ROUTE_FAILED = "route_failed"
ENSURE_PATH_RETRY = "ensure_path_retry"
ENSURE_PATH_RESULT = "ensure_path_result"
STEP = "step"


@dataclass
class NavEvent:
    """One diagnostic event."""

    tick: int
    kind: str
    agent: Optional[str] = None
    detail: str = ""


class NavDebugLogger:
    """Collects and emits navigation diagnostics.

    Parameters
    ----------
    level : int
        Verbosity level (0, 1 or 2).
    output : file-like, optional
        Where to write output. Defaults to ``sys.stderr``.
    """

    PREFIX = "[travel_nav]"

    def __init__(self, level: int = 1, output: Any = None) -> None:
        self.level = level
        self._out = output or sys.stderr
        self.events: list[NavEvent] = []
        self._tick_counts: Counter[str] = Counter()
        self._current_tick = 0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, tick: int, kind: str, detail: str, agent: Optional[str] = None, min_level: int = 1) -> None:
        self._current_tick = max(self._current_tick, tick)
        self.events.append(NavEvent(tick=tick, kind=kind, agent=agent, detail=detail))
        self._tick_counts[kind] += 1
        if self.level >= min_level:
            who = f" {agent}" if agent else ""
            self._emit(f"t={tick} {kind}{who}: {detail}")

    def incomplete_path(self, tick: int, agent: str, origin: Any, destination: Any) -> None:
        self.record(tick, INCOMPLETE_PATH, f"{origin}=>{destination}", agent=agent)

    def heavy_cost(
        self,
        tick: int,
        agent: str,
        cost: float,
        age: int,
        repaths: int,
        invocations: int,
        origin: Any,
        destination: Any,
    ) -> None:
        per_tick = cost / age if age else 0.0
        ratio = repaths / invocations if invocations else 0.0
        self.record(
            tick,
            HEAVY_COST,
            f"cost={cost}/{age}={per_tick:.2f},repathRatio={repaths}/{invocations}={ratio:.2f},{origin}=>{destination}",
            agent=agent,
        )

    def route_failed(self, tick: int, origin: str, destination: str) -> None:
        self.record(tick, ROUTE_FAILED, f"couldn't find route {origin}=>{destination}")

    def ensure_path_retry(self, tick: int, origin: Any, destination: Any) -> None:
        self.record(tick, ENSURE_PATH_RETRY, f"path failed without route planning, retrying {origin}=>{destination}")

    def ensure_path_result(self, tick: int, success: bool) -> None:
        self.record(tick, ENSURE_PATH_RESULT, "second attempt was " + ("successful" if success else "not successful"))

    def step(self, tick: int, agent: str, pos: Any, direction: Any, remaining: int) -> None:
        self.record(tick, STEP, f"{pos} dir={int(direction)} left={remaining}", agent=agent, min_level=2)

    def count(self, kind: str) -> int:
        return sum(1 for event in self.events if event.kind == kind)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def flush_tick(self) -> None:
        """Emit a per-tick event count summary (level 2) and reset the tick counters."""
        if self._tick_counts and self.level >= 2:
            parts = " ".join(f"{kind}={n}" for kind, n in sorted(self._tick_counts.items()))
            self._emit(f"t={self._current_tick} {parts}")
        self._tick_counts.clear()

    def emit_summary(self) -> None:
        """Emit a one-line JSON summary of every recorded event kind."""
        by_kind = Counter(event.kind for event in self.events)
        by_agent = Counter(event.agent for event in self.events if event.agent and event.kind != STEP)
        summary = {
            "last_tick": self._current_tick,
            "events": dict(sorted(by_kind.items())),
            "agents": dict(by_agent.most_common(10)),
        }
        line = json.dumps(summary, separators=(",", ":"))
        print(f"[travel_nav:summary] {line}", file=self._out, flush=True)

    def reset(self) -> None:
        self.events.clear()
        self._tick_counts.clear()
        self._current_tick = 0

    def _emit(self, msg: str) -> None:
        print(f"{self.PREFIX} {msg}", file=self._out, flush=True)
