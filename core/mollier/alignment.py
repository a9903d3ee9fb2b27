"""
Time Alignment of Temperature and Humidity Series

Temperature and humidity sensors report independently. Before a point can
be plotted, each temperature reading needs a humidity reading for the same
moment. How that partner is chosen is a strategy:

- ExactAlignment: partner must carry the identical timestamp. Unmatched
  temperature readings are dropped. This is the default.
- NearestAlignment: closest humidity reading within a tolerance.
- InterpolatedAlignment: humidity linearly interpolated between the two
  readings that bracket the temperature timestamp.

All strategies preserve the order of the temperature series.
"""

import bisect
from datetime import timedelta
from typing import Sequence

from .exceptions import ConfigurationError
from .models import HistorySample, Sample

ALIGNMENT_STRATEGIES = ("exact", "nearest", "interpolate")


class AlignmentStrategy:
    """Pairs temperature readings with humidity readings."""

    name = "base"

    def align(
        self,
        temperatures: Sequence[HistorySample],
        humidities: Sequence[HistorySample],
    ) -> list[Sample]:
        raise NotImplementedError


class ExactAlignment(AlignmentStrategy):
    """Pair only readings whose timestamps are identical."""

    name = "exact"

    def align(self, temperatures, humidities):
        # First humidity reading wins on duplicate timestamps
        by_timestamp: dict = {}
        for reading in humidities:
            by_timestamp.setdefault(reading.timestamp, reading.value)

        samples = []
        for reading in temperatures:
            if reading.timestamp in by_timestamp:
                samples.append(
                    Sample(
                        timestamp=reading.timestamp,
                        temperature=reading.value,
                        relative_humidity=by_timestamp[reading.timestamp],
                    )
                )
        return samples


def _sorted_humidities(humidities: Sequence[HistorySample]) -> list[HistorySample]:
    return sorted(humidities, key=lambda r: r.timestamp)


class NearestAlignment(AlignmentStrategy):
    """Pair each temperature reading with the nearest humidity reading.

    Readings farther apart than `tolerance` are not paired. On a tie the
    earlier humidity reading is used.
    """

    name = "nearest"

    def __init__(self, tolerance: timedelta = timedelta(seconds=60)):
        if tolerance < timedelta(0):
            raise ConfigurationError(f"Alignment tolerance must not be negative: {tolerance}")
        self.tolerance = tolerance

    def align(self, temperatures, humidities):
        ordered = _sorted_humidities(humidities)
        timestamps = [r.timestamp for r in ordered]

        samples = []
        for reading in temperatures:
            idx = bisect.bisect_left(timestamps, reading.timestamp)
            candidates = [ordered[i] for i in (idx - 1, idx) if 0 <= i < len(ordered)]
            if not candidates:
                continue

            nearest = min(candidates, key=lambda r: abs(r.timestamp - reading.timestamp))
            if abs(nearest.timestamp - reading.timestamp) > self.tolerance:
                continue

            samples.append(
                Sample(
                    timestamp=reading.timestamp,
                    temperature=reading.value,
                    relative_humidity=nearest.value,
                )
            )
        return samples


class InterpolatedAlignment(AlignmentStrategy):
    """Linearly interpolate humidity at each temperature timestamp.

    Temperature readings outside the humidity series' time span are
    dropped, as are readings whose bracketing humidity readings lie more
    than `max_gap` apart (when a gap limit is given).
    """

    name = "interpolate"

    def __init__(self, max_gap: timedelta | None = None):
        if max_gap is not None and max_gap <= timedelta(0):
            raise ConfigurationError(f"Interpolation gap must be positive: {max_gap}")
        self.max_gap = max_gap

    def align(self, temperatures, humidities):
        ordered = _sorted_humidities(humidities)
        timestamps = [r.timestamp for r in ordered]

        samples = []
        for reading in temperatures:
            idx = bisect.bisect_left(timestamps, reading.timestamp)

            if idx < len(ordered) and timestamps[idx] == reading.timestamp:
                humidity = ordered[idx].value
            elif 0 < idx < len(ordered):
                before, after = ordered[idx - 1], ordered[idx]
                span = after.timestamp - before.timestamp
                if self.max_gap is not None and span > self.max_gap:
                    continue
                fraction = (reading.timestamp - before.timestamp) / span
                humidity = before.value + fraction * (after.value - before.value)
            else:
                continue

            samples.append(
                Sample(
                    timestamp=reading.timestamp,
                    temperature=reading.value,
                    relative_humidity=humidity,
                )
            )
        return samples


def get_alignment_strategy(name: str, tolerance_seconds: float = 60) -> AlignmentStrategy:
    """Build an alignment strategy from its configuration name.

    Args:
        name: "exact", "nearest" or "interpolate"
        tolerance_seconds: Pairing tolerance for "nearest", maximum gap
            between bracketing readings for "interpolate" (0 means no limit)

    Raises:
        ConfigurationError: If the name is unknown
    """
    if name == "exact":
        return ExactAlignment()
    if name == "nearest":
        return NearestAlignment(timedelta(seconds=tolerance_seconds))
    if name == "interpolate":
        max_gap = timedelta(seconds=tolerance_seconds) if tolerance_seconds > 0 else None
        return InterpolatedAlignment(max_gap)
    raise ConfigurationError(
        f"Unknown alignment strategy: {name}. Must be one of {ALIGNMENT_STRATEGIES}"
    )
