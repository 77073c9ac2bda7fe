"""
Sparse parameter vector with lazily applied regularization.

Keys are feature identifiers, values are weights. Storage is a pair of
growable numpy arrays (weights and per-slot clocks) addressed through a
``key -> slot`` index, which keeps bulk operations (rescaling, norms,
thresholding) vectorized while single-coordinate access stays O(1).

Lazy regularization
-------------------
Conceptually every coordinate decays on every tick. Touching all of them on
each step would cost O(dimension), so each slot instead remembers the clock
value it was last brought current at. Any read or write first applies
``penalty.decay(clock - slot_clock)`` to that slot and then stamps it with the
current clock. Per-step cost is therefore proportional to the number of
coordinates an example touches.
"""

from typing import Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from .interfaces import FeatureVector, Penalty
from .penalties import NoPenalty

VectorLike = Union[Mapping[str, float], "ParameterStore"]


class ParameterStore:
    """
    Sparse ``str -> float`` map with deferred per-coordinate decay.

    Parameters
    ----------
    initial : mapping or ParameterStore, optional
        Warm-start weights
    penalty : Penalty, optional
        Lazy regularizer; defaults to no decay
    capacity : int, default=100
        Initial slot capacity (grows by doubling)
    freeze_key_set : bool, default=False
        Reject new keys once the warm-start weights are loaded

    Examples
    --------
    >>> store = ParameterStore({"a": 1.0})
    >>> store.add({"a": 0.5, "b": -2.0})
    >>> store.get_coordinate("b")
    -2.0
    >>> store.dot({"a": 2.0, "zzz": 9.0})
    3.0
    """

    def __init__(
        self,
        initial: Optional[VectorLike] = None,
        penalty: Optional[Penalty] = None,
        capacity: int = 100,
        freeze_key_set: bool = False,
    ):
        self.penalty = penalty if penalty is not None else NoPenalty()
        capacity = max(int(capacity), 1)
        self._index: Dict[str, int] = {}
        self._keys: List[str] = []
        self._values = np.zeros(capacity, dtype=float)
        self._clocks = np.zeros(capacity, dtype=np.int64)
        self._clock = 0
        self._frozen = False

        if initial is not None:
            for key, value in initial.items():
                self.set_coordinate(key, value)
        self._frozen = bool(freeze_key_set)

    # ------------------------------------------------------------------
    # Slot management

    def _grow(self) -> None:
        new_capacity = 2 * len(self._values)
        values = np.zeros(new_capacity, dtype=float)
        clocks = np.zeros(new_capacity, dtype=np.int64)
        n = len(self._keys)
        values[:n] = self._values[:n]
        clocks[:n] = self._clocks[:n]
        self._values, self._clocks = values, clocks

    def _append(self, key: str, value: float) -> int:
        slot = len(self._keys)
        if slot == len(self._values):
            self._grow()
        self._values[slot] = value
        self._clocks[slot] = self._clock
        self._index[key] = slot
        self._keys.append(key)
        return slot

    def _catch_up(self, slot: int) -> None:
        ticks = self._clock - int(self._clocks[slot])
        if ticks > 0:
            self._values[slot] *= self.penalty.decay(ticks)
            self._clocks[slot] = self._clock

    def _catch_up_all(self) -> None:
        n = len(self._keys)
        if n == 0:
            return
        ticks = self._clock - self._clocks[:n]
        stale = ticks > 0
        if np.any(stale):
            self._values[:n][stale] *= self.penalty.decay(ticks[stale])
            self._clocks[:n] = self._clock

    def _writable_slot(self, key: str) -> Optional[int]:
        """Caught-up slot for ``key``, created if allowed; None when frozen out."""
        slot = self._index.get(key)
        if slot is not None:
            self._catch_up(slot)
            return slot
        if self._frozen:
            return None
        return self._append(key, 0.0)

    def _compact(self, keep: np.ndarray) -> None:
        """Keep only the slots in ``keep`` (ascending), preserving their order."""
        m = len(keep)
        self._values[:m] = self._values[keep]
        self._clocks[:m] = self._clocks[keep]
        self._keys = [self._keys[i] for i in keep]
        self._index = {key: slot for slot, key in enumerate(self._keys)}

    # ------------------------------------------------------------------
    # Reads

    def get_coordinate(self, key: str) -> float:
        """Caught-up weight for ``key``; 0.0 when absent."""
        slot = self._index.get(key)
        if slot is None:
            return 0.0
        self._catch_up(slot)
        return float(self._values[slot])

    def dot(self, x: FeatureVector) -> float:
        """Sum of ``weight(k) * x[k]`` over the keys of ``x``; missing keys contribute 0."""
        total = 0.0
        for key, value in x.items():
            slot = self._index.get(key)
            if slot is None:
                continue
            self._catch_up(slot)
            total += float(self._values[slot]) * value
        return total

    def norm(self, p: float = 2.0) -> float:
        """Lp norm over present coordinates."""
        if not self._keys:
            return 0.0
        self._catch_up_all()
        return float(np.linalg.norm(self._values[:len(self._keys)], ord=p))

    def catch_up(self, keys: Iterable[str]) -> None:
        """
        Bring the given coordinates current without changing their logical value.

        After this, reads of those keys perform no writes until the next
        tick, so several threads may read them concurrently.
        """
        for key in keys:
            slot = self._index.get(key)
            if slot is not None:
                self._catch_up(slot)

    def iterate(self) -> Iterator[Tuple[str, float]]:
        """
        Yield caught-up ``(key, value)`` pairs in slot order.

        Iterates over a snapshot of the key set, so coordinates may be removed
        (or added) while iterating; removed keys are skipped.
        """
        for key in list(self._keys):
            slot = self._index.get(key)
            if slot is None:
                continue
            self._catch_up(slot)
            yield key, float(self._values[slot])

    __iter__ = iterate
    items = iterate

    def keys(self) -> List[str]:
        return list(self._keys)

    def to_dict(self) -> Dict[str, float]:
        return dict(self.iterate())

    def view(self) -> "ReadOnlyParameters":
        """Read-only handle for optimizers and model families."""
        return ReadOnlyParameters(self)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __repr__(self):
        return (f"ParameterStore(n_keys={len(self)}, clock={self._clock}, "
                f"frozen={self._frozen}, penalty={self.penalty!r})")

    # ------------------------------------------------------------------
    # Writes

    def set_coordinate(self, key: str, value: float) -> None:
        """Overwrite ``key`` with ``value`` and stamp it current; no-op for new keys when frozen."""
        slot = self._index.get(key)
        if slot is None:
            if self._frozen:
                return
            self._append(key, float(value))
            return
        self._values[slot] = float(value)
        self._clocks[slot] = self._clock

    def add(self, delta: VectorLike) -> None:
        self.add_scaled(delta, 1.0)

    def add_scaled(self, delta: VectorLike, scale: float) -> None:
        """``self[k] += delta[k] * scale`` for every key of ``delta``."""
        for key, value in delta.items():
            slot = self._writable_slot(key)
            if slot is None:
                continue
            self._values[slot] += value * scale

    def mul(self, scale: float) -> None:
        """
        Multiply every present coordinate by ``scale``.

        No catch-up is needed: the lazy decay is multiplicative, so scaling
        before or after the deferred factor gives the same result.
        """
        self._values[:len(self._keys)] *= scale

    def transform(self, fn: Callable[[np.ndarray], np.ndarray],
                  keys: Optional[Iterable[str]] = None) -> None:
        """
        Apply an array-aware ``fn`` to caught-up values.

        Args:
            fn: Elementwise function taking and returning a float array
            keys: Restrict to these keys (absent ones are ignored); all when None
        """
        if keys is None:
            if not self._keys:
                return
            self._catch_up_all()
            n = len(self._keys)
            self._values[:n] = fn(self._values[:n].copy())
            return

        slots = [self._index[k] for k in keys if k in self._index]
        if not slots:
            return
        for slot in slots:
            self._catch_up(slot)
        slots = np.asarray(slots, dtype=np.intp)
        self._values[slots] = fn(self._values[slots].copy())

    def remove(self, key: str) -> bool:
        """
        Drop ``key``; returns False when absent.

        The last slot is moved into the freed one, so iteration order of the
        remaining keys may change.
        """
        slot = self._index.pop(key, None)
        if slot is None:
            return False
        last = len(self._keys) - 1
        if slot != last:
            moved = self._keys[last]
            self._keys[slot] = moved
            self._values[slot] = self._values[last]
            self._clocks[slot] = self._clocks[last]
            self._index[moved] = slot
        self._keys.pop()
        self._values[last] = 0.0
        self._clocks[last] = 0
        return True

    def retain(self, predicate: Callable[[np.ndarray], np.ndarray]) -> int:
        """
        Keep coordinates whose caught-up value satisfies ``predicate``.

        Two-phase: the predicate marks a boolean mask over all values, then
        the store is compacted in one pass.

        Returns:
            Number of coordinates removed
        """
        n = len(self._keys)
        if n == 0:
            return 0
        self._catch_up_all()
        mask = np.asarray(predicate(self._values[:n].copy()), dtype=bool)
        keep = np.flatnonzero(mask)
        removed = n - len(keep)
        if removed:
            self._compact(keep)
            self._values[len(keep):n] = 0.0
            self._clocks[len(keep):n] = 0
        return removed

    filter = retain

    def remove_zero_coordinates(self, keys: Optional[Iterable[str]] = None) -> int:
        """
        Drop coordinates whose value is exactly 0.0.

        Zero is a fixed point of the multiplicative decay, so no catch-up is
        needed. With ``keys`` only those coordinates are inspected.

        Returns:
            Number of coordinates removed
        """
        if keys is None:
            return self.retain(lambda v: v != 0.0)
        removed = 0
        for key in keys:
            slot = self._index.get(key)
            if slot is not None and self._values[slot] == 0.0:
                self.remove(key)
                removed += 1
        return removed

    # ------------------------------------------------------------------
    # Clock and key-set policy

    def increment_iteration(self) -> None:
        """Advance the lazy clock by one tick without touching any coordinate."""
        self._clock += 1

    @property
    def clock(self) -> int:
        return self._clock

    def set_freeze_key_set(self, freeze: bool) -> None:
        self._frozen = bool(freeze)

    @property
    def frozen(self) -> bool:
        return self._frozen


class ReadOnlyParameters:
    """Read-only facade over a ``ParameterStore``."""

    __slots__ = ("_store",)

    def __init__(self, store: ParameterStore):
        self._store = store

    def dot(self, x: FeatureVector) -> float:
        return self._store.dot(x)

    def get_coordinate(self, key: str) -> float:
        return self._store.get_coordinate(key)

    def norm(self, p: float = 2.0) -> float:
        return self._store.norm(p)

    def catch_up(self, keys: Iterable[str]) -> None:
        self._store.catch_up(keys)

    def items(self) -> Iterator[Tuple[str, float]]:
        return self._store.iterate()

    __iter__ = items

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
