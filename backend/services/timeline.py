"""
Chart preparation for backtest timelines.

enrich_with_trend attaches a trailing 200-day moving average of the reference
price to every point; sample_preserving_events then bounds the timeline for
rendering without dropping endpoints or days with strategy activity.
Both are pure: new lists of shallow copies, inputs untouched, never raise.
"""
import math
from collections import deque
from collections.abc import Sequence

from schemas.backtesting import StrategyResult, TimelinePoint

DMA_WINDOW = 200
REFERENCE_ASSET = "btc"

MIN_CHART_POINTS = 90
MAX_CHART_POINTS = 150
CRITICAL_POINT_PADDING = 20

# Passive DCA baseline buys every day; its events never force retention.
BASELINE_SIGNAL = "dca"


def _is_finite_number(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def select_reference_price(token_price: dict[str, float | None]) -> float | None:
    """Reference asset price if finite, else the first finite price, else None."""
    preferred = token_price.get(REFERENCE_ASSET)
    if _is_finite_number(preferred):
        return float(preferred)
    for price in token_price.values():
        if _is_finite_number(price):
            return float(price)
    return None


class _RollingWindow:
    """Fixed-capacity price window with a running sum."""

    def __init__(self, size: int) -> None:
        self.size = size
        self.prices: deque[float] = deque()
        self.total = 0.0

    def reset(self) -> None:
        self.prices.clear()
        self.total = 0.0

    def push(self, price: float) -> None:
        self.prices.append(price)
        self.total += price
        if len(self.prices) > self.size:
            self.total -= self.prices.popleft()

    def average(self) -> float | None:
        if len(self.prices) < self.size:
            return None
        return self.total / self.size


def enrich_with_trend(
    timeline: Sequence[TimelinePoint] | None,
) -> list[TimelinePoint]:
    """
    Return a copy of `timeline` with dma_200 set on every point.
    A day without a usable price resets the window, so the average only
    reappears after DMA_WINDOW consecutive priced days.
    """
    if not timeline:
        return []

    window = _RollingWindow(DMA_WINDOW)
    enriched: list[TimelinePoint] = []
    for point in timeline:
        price = select_reference_price(point.token_price)
        if price is None:
            window.reset()
            dma = None
        else:
            window.push(price)
            dma = window.average()
        enriched.append(point.model_copy(update={"dma_200": dma}))
    return enriched


def _has_activity(strategy: StrategyResult) -> bool:
    if strategy.metrics.signal == BASELINE_SIGNAL:
        return False
    return strategy.event is not None or len(strategy.transfers) > 0


def is_critical_point(point: TimelinePoint) -> bool:
    """True when a non-baseline strategy traded or moved funds on this day."""
    return any(_has_activity(s) for s in point.strategies.values())


def find_critical_indices(timeline: Sequence[TimelinePoint]) -> list[int]:
    """Sorted indices that must survive sampling, endpoints included."""
    last = len(timeline) - 1
    return [
        i
        for i, point in enumerate(timeline)
        if i == 0 or i == last or is_critical_point(point)
    ]


def _even_sample(indices: list[int], count: int) -> list[int]:
    """Pick `count` entries spread evenly across `indices`, first and last included."""
    if count <= 0 or not indices:
        return []
    if count >= len(indices):
        return list(indices)
    if count == 1:
        return [indices[len(indices) // 2]]

    step = (len(indices) - 1) / (count - 1)
    picked: list[int] = []
    seen: set[int] = set()
    for slot in range(count):
        # round half up; round() is banker's rounding and can collide
        position = math.floor(slot * step + 0.5)
        index = indices[position]
        if index not in seen:
            seen.add(index)
            picked.append(index)
    return picked


def sample_preserving_events(
    timeline: Sequence[TimelinePoint] | None,
    min_points: int = MIN_CHART_POINTS,
) -> list[TimelinePoint]:
    """
    Downsample `timeline` to at most the effective budget.

    The budget is min(MAX_CHART_POINTS, max(min_points, critical + padding)),
    so event-dense runs grow the chart instead of losing events. Critical
    points are always kept even when they alone exceed the budget; remaining
    slots are filled with evenly spaced non-critical points.
    Timelines already within budget are returned as-is.
    """
    if not timeline:
        return []
    if len(timeline) <= min_points:
        return timeline

    critical = find_critical_indices(timeline)
    effective_max = min(
        MAX_CHART_POINTS, max(min_points, len(critical) + CRITICAL_POINT_PADDING)
    )
    if len(timeline) <= effective_max:
        return timeline

    critical_set = set(critical)
    non_critical = [i for i in range(len(timeline)) if i not in critical_set]
    sampled = _even_sample(non_critical, effective_max - len(critical))

    keep = sorted(critical_set.union(sampled))
    return [timeline[i] for i in keep]


def prepare_chart_timeline(
    timeline: Sequence[TimelinePoint] | None,
    min_points: int = MIN_CHART_POINTS,
) -> list[TimelinePoint]:
    """Enrich over the full history first, then sample."""
    return sample_preserving_events(enrich_with_trend(timeline), min_points)
