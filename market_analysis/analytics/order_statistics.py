"""Order Statistics

Selection primitives backing the rank-based reducers:
- quicksort: in-place, single-pivot Lomuto partition
- MinHeap: array-backed binary min-heap (heap-sort via repeated extract_min)
- percentile: interpolated order statistic over a sorted array

Sorting and percentile (unless ``presorted``) work in place on the caller's
list. Callers that need the input untouched pass a copy.
"""
import math
import random
from typing import Iterable, List, MutableSequence, Optional, Sequence, Union

from market_analysis.core.enums import InterpolationMethod, PivotStrategy
from market_analysis.core.exceptions import EmptyQueueError
from market_analysis.logger import logger


Number = Union[int, float]


# =============================================================================
# Quicksort
# =============================================================================

def _choose_pivot(
    values: MutableSequence,
    low: int,
    high: int,
    strategy: PivotStrategy,
    rng: Optional[random.Random]
) -> int:
    if strategy == PivotStrategy.LAST or high - low < 2:
        return high

    if strategy == PivotStrategy.RANDOM:
        return (rng or random).randint(low, high)

    # Median of first, middle and last element
    mid = (low + high) // 2
    a, b, c = values[low], values[mid], values[high]
    if a < b:
        if b < c:
            return mid
        return high if a < c else low
    if a < c:
        return low
    return high if b < c else mid


def _partition(
    values: MutableSequence,
    low: int,
    high: int,
    strategy: PivotStrategy,
    rng: Optional[random.Random]
) -> int:
    """Partition ``values[low:high+1]`` around a pivot moved to ``high``.

    Returns the final pivot index; everything left of it is strictly smaller.
    """
    chosen = _choose_pivot(values, low, high, strategy, rng)
    if chosen != high:
        values[chosen], values[high] = values[high], values[chosen]

    pivot_value = values[high]
    store = low
    for i in range(low, high):
        if values[i] < pivot_value:
            values[i], values[store] = values[store], values[i]
            store += 1
    values[store], values[high] = values[high], values[store]
    return store


def quicksort(
    values: MutableSequence,
    low: int = 0,
    high: Optional[int] = None,
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE,
    rng: Optional[random.Random] = None
) -> None:
    """Sort ``values[low:high+1]`` ascending, in place.

    Not stable. ``PivotStrategy.LAST`` reproduces the classic scheme, which
    degrades to O(n²) on sorted or reverse-sorted input; the other strategies
    avoid that pathology. Recursion always descends into the smaller
    partition, so stack depth stays logarithmic.

    Args:
        values: List to sort
        low: First index of the active range
        high: Last index of the active range (default: last element)
        pivot: Pivot selection strategy
        rng: Random source for ``PivotStrategy.RANDOM``
    """
    if high is None:
        high = len(values) - 1
    strategy = PivotStrategy(pivot)

    while low < high:
        p = _partition(values, low, high, strategy, rng)
        if p - low < high - p:
            quicksort(values, low, p - 1, strategy, rng)
            low = p + 1
        else:
            quicksort(values, p + 1, high, strategy, rng)
            high = p - 1


def sorted_copy(
    values: Iterable[Number],
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE
) -> List[Number]:
    """Return a new ascending list, leaving ``values`` untouched."""
    result = list(values)
    quicksort(result, pivot=pivot)
    return result


# =============================================================================
# Binary min-heap
# =============================================================================

class MinHeap:
    """Array-backed binary min-heap.

    Invariant: every element is <= both of its children.
    Index arithmetic is 0-based: parent(i) = (i-1)//2, children 2i+1 and 2i+2.
    """

    def __init__(self, values: Iterable[Number] = ()):
        self._queue: List[Number] = []
        for v in values:
            self.insert(v)

    def __len__(self) -> int:
        return len(self._queue)

    def __repr__(self) -> str:
        return f"MinHeap(size={len(self._queue)})"

    @staticmethod
    def parent(index: int) -> int:
        return (index - 1) // 2

    @staticmethod
    def children(index: int) -> tuple:
        return 2 * index + 1, 2 * index + 2

    def insert(self, value: Number) -> None:
        """Append ``value`` and bubble it up while smaller than its parent."""
        self._queue.append(value)
        self._bubble_up(len(self._queue) - 1)

    def peek(self) -> Number:
        """Return the smallest element without removing it.

        Raises:
            EmptyQueueError: If the heap is empty
        """
        if not self._queue:
            raise EmptyQueueError("Empty queue, no elements left")
        return self._queue[0]

    def extract_min(self) -> Number:
        """Remove and return the smallest element.

        Raises:
            EmptyQueueError: If the heap is empty
        """
        if not self._queue:
            raise EmptyQueueError("Empty queue, no elements left")

        last = len(self._queue) - 1
        self._queue[0], self._queue[last] = self._queue[last], self._queue[0]
        result = self._queue.pop()

        if self._queue:
            self._bubble_down(0)

        return result

    def _bubble_up(self, index: int) -> None:
        queue = self._queue
        while index > 0:
            parent = self.parent(index)
            if queue[index] < queue[parent]:
                queue[index], queue[parent] = queue[parent], queue[index]
                index = parent
            else:
                break

    def _bubble_down(self, index: int) -> None:
        queue = self._queue
        size = len(queue)
        while True:
            left, right = self.children(index)
            smallest = index
            if left < size and queue[left] < queue[smallest]:
                smallest = left
            if right < size and queue[right] < queue[smallest]:
                smallest = right
            if smallest == index:
                return
            queue[index], queue[smallest] = queue[smallest], queue[index]
            index = smallest


def heapsort(values: Iterable[Number]) -> List[Number]:
    """Return the values ascending by draining a fresh MinHeap."""
    heap = MinHeap(values)
    return [heap.extract_min() for _ in range(len(heap))]


# =============================================================================
# Percentiles
# =============================================================================

def _check_percentile(p: float) -> None:
    if math.isnan(p):
        raise ValueError("Percentile must be a number, got NaN")
    if p < 0:
        raise ValueError(f"Percentile must be >= 0, got {p}")


def _interpolate(p: float, ordered: Sequence[Number], method: InterpolationMethod) -> Number:
    if p == 0:
        return ordered[0]
    if p >= 100:
        if p > 100:
            logger.warning(f"Percentile {p} exceeds 100, returning the maximum")
        return ordered[-1]

    pos = p / 100.0 * (len(ordered) - 1)
    f = math.floor(pos)
    c = math.ceil(pos)
    lower, upper = ordered[f], ordered[c]

    if method == InterpolationMethod.LINEAR:
        return lower + (upper - lower) * (pos - f)
    if method == InterpolationMethod.LOWER:
        return lower
    if method == InterpolationMethod.HIGHER:
        return upper
    if method == InterpolationMethod.NEAREST:
        return ordered[round(pos)]
    if method == InterpolationMethod.MIDPOINT:
        return (lower + upper) / 2.0

    raise ValueError(f"Unknown interpolation method: {method}")


def percentile(
    p: float,
    values: MutableSequence,
    method: Union[str, InterpolationMethod] = InterpolationMethod.LINEAR,
    presorted: bool = False,
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE
) -> Number:
    """Interpolated percentile of ``values``.

    Position is ``p/100 * (n-1)``. ``p == 0`` gives the minimum, ``p >= 100``
    the maximum (with a warning above 100).

    Args:
        p: Percentile in [0, 100]
        values: Data; sorted in place unless ``presorted``
        method: Interpolation between the neighbouring order statistics
        presorted: Skip sorting when ``values`` is already ascending
        pivot: Pivot strategy for the sort

    Raises:
        ValueError: If ``p`` is negative or NaN
        EmptyQueueError: If ``values`` is empty

    Example:
        >>> percentile(75, [20, 30, 15, 75])
        41.25
    """
    _check_percentile(p)
    if not values:
        raise EmptyQueueError("Cannot take a percentile of an empty array")

    if not presorted:
        quicksort(values, pivot=pivot)

    return _interpolate(p, values, InterpolationMethod(method))


def percentiles(
    ps: Sequence[float],
    values: MutableSequence,
    method: Union[str, InterpolationMethod] = InterpolationMethod.LINEAR,
    presorted: bool = False,
    pivot: Union[str, PivotStrategy] = PivotStrategy.MEDIAN_OF_THREE
) -> List[Number]:
    """Several percentiles from one sort of ``values``."""
    for p in ps:
        _check_percentile(p)
    if not values:
        raise EmptyQueueError("Cannot take a percentile of an empty array")

    if not presorted:
        quicksort(values, pivot=pivot)

    method = InterpolationMethod(method)
    return [_interpolate(p, values, method) for p in ps]
