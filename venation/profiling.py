"""
Per-phase timing of the growth step.

`GrowthNetwork.step` is timed as a whole and each of its phases (pairing,
growth, consumption, index rebuild) separately, so the printed table shows
where a step spends its time. Off by default; `VenationConfig(profile=True)`
switches it on and the table is printed when the interpreter exits.
"""

import atexit
import time
from dataclasses import dataclass
from functools import wraps
from typing import Dict

STEP = 'step'
PAIRING = 'pairing'
GROWTH = 'growth'
CONSUMPTION = 'consumption'
INDEX = 'index rebuild'

PHASES = (PAIRING, GROWTH, CONSUMPTION, INDEX)


@dataclass
class PhaseTiming:
    calls: int = 0
    total: float = 0.0

    @property
    def average_ms(self) -> float:
        return self.total / self.calls * 1000 if self.calls else 0.0


class GrowthProfiler:
    def __init__(self):
        self.enabled = False
        self.timings: Dict[str, PhaseTiming] = {}

    def record(self, phase: str, elapsed: float):
        timing = self.timings.setdefault(phase, PhaseTiming())
        timing.calls += 1
        timing.total += elapsed

    def share(self, phase: str) -> float:
        """Fraction of total step time spent in `phase` (0 when no step was timed)."""
        step = self.timings.get(STEP)
        if step is None or step.total <= 0 or phase not in self.timings:
            return 0.0
        return self.timings[phase].total / step.total

    def report(self):
        if not self.timings:
            return

        step = self.timings.get(STEP, PhaseTiming())
        print("\n" + "=" * 64)
        print(f"GROWTH PHASE TIMING ({step.calls} steps, {step.total:.3f}s)")
        print("=" * 64)
        print(f"{'Phase':<16} {'Calls':>8} {'Total(s)':>10} {'Avg(ms)':>10} {'Share':>8}")
        print("-" * 64)
        for phase in PHASES:
            timing = self.timings.get(phase)
            if timing is None:
                continue
            print(f"{phase:<16} {timing.calls:>8} {timing.total:>10.3f} "
                  f"{timing.average_ms:>10.3f} {self.share(phase):>7.1%}")
        print("=" * 64)

    def reset(self):
        self.timings.clear()


profiler = GrowthProfiler()
atexit.register(profiler.report)


def profile(phase: str):
    """Time the decorated call under `phase` while the profiler is enabled."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not profiler.enabled:
                return func(*args, **kwargs)
            start = time.perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                profiler.record(phase, time.perf_counter() - start)
        return wrapper
    return decorator
