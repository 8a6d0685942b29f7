"""
Sorting Micro-Benchmark Harness - Core Module
=============================================

Contains: configuration, input distributions, sorting methods,
result types, the benchmark engine and console formatting.
"""

from __future__ import annotations
import gc, math, platform, random, sys, time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple
from contextlib import contextmanager

from hybrid_quicksort import bubble_sort, insertion_sort, quickersort

try:
    import numpy as np
    HAS_NUMPY = True
except ImportError:
    np = None
    HAS_NUMPY = False

# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class BenchmarkConfig:
    seed: int = 42
    runs: int = 2
    lengths: Tuple[int, ...] = (100, 1_000, 10_000)
    gc_between_runs: bool = True
    uniform_bits: int = 32

    def __post_init__(self):
        _check_runs(self.runs)
        _check_lengths(self.lengths)
        if self.uniform_bits < 1:
            raise ValueError(f"uniform_bits must be >= 1, got {self.uniform_bits}")


def _check_runs(runs):
    if runs < 1:
        raise ValueError(f"runs must be >= 1, got {runs}")


def _check_lengths(lengths):
    if not lengths:
        raise ValueError("at least one input length is required")
    for n in lengths:
        if n < 0:
            raise ValueError(f"input lengths must be >= 0, got {n}")


class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        for a in ['HEADER','BLUE','CYAN','GREEN','YELLOW','RED','BOLD','UNDERLINE','END']:
            setattr(cls, a, '')

if not sys.stdout.isatty():
    Colors.disable()

# =============================================================================
# Input Distributions
# =============================================================================

class InputDistribution(ABC):
    """
    A named rule for synthesizing an input of a requested length.

    The random source is passed in by handle; only distributions that
    shuffle or sample draw from it, everything else is a pure function
    of the length.
    """

    @property
    @abstractmethod
    def key(self) -> str: pass

    @property
    @abstractmethod
    def name(self) -> str: pass

    @property
    @abstractmethod
    def description(self) -> str: pass

    @abstractmethod
    def generate(self, rng: random.Random, n: int) -> List[int]: pass

    def __repr__(self):
        return f"{type(self).__name__}()"


def _check_length(n):
    if n < 0:
        raise ValueError(f"length must be >= 0, got {n}")


class Sorted(InputDistribution):
    key = "sorted"
    name = "Sorted"
    description = "Ascending 0..n-1"
    def generate(self, rng, n):
        _check_length(n)
        return list(range(n))

class Reverse(InputDistribution):
    key = "reversed"
    name = "Reversed"
    description = "Descending from n down to 1"
    def generate(self, rng, n):
        _check_length(n)
        return list(range(n, 0, -1))

class AllEqual(InputDistribution):
    key = "all_equal"
    name = "All equal"
    description = "All elements zero"
    def generate(self, rng, n):
        _check_length(n)
        return [0] * n

class ShuffledValues(InputDistribution):
    """Sorted input reduced modulo `modulus`, then shuffled. 0 disables the reduction."""

    def __init__(self, modulus: int):
        if modulus < 0:
            raise ValueError(f"modulus must be >= 0, got {modulus}")
        self.modulus = modulus

    @property
    def key(self):
        return "shuffled" if self.modulus == 0 else f"shuffled_{self.modulus}"

    @property
    def name(self):
        return "Shuffled" if self.modulus == 0 else f"Shuffled ({self.modulus} values)"

    @property
    def description(self):
        if self.modulus == 0:
            return "Uniformly random permutation"
        return f"Random permutation of i mod {self.modulus}"

    def generate(self, rng, n):
        a = Sorted().generate(rng, n)
        if self.modulus:
            a = [x % self.modulus for x in a]
        rng.shuffle(a)
        return a

    def __repr__(self):
        return f"ShuffledValues({self.modulus})"

class Shuffled(ShuffledValues):
    def __init__(self):
        super().__init__(0)

    def __repr__(self):
        return "Shuffled()"

class AscendingDescending(InputDistribution):
    key = "asc_dsc"
    name = "Asc+Dsc"
    description = "Ascending from 0, then descending from n"
    def generate(self, rng, n):
        _check_length(n)
        m = n // 2
        return list(range(m)) + list(range(n, m, -1))

class PushFront(InputDistribution):
    key = "push_front"
    name = "Push front int"
    description = "Sorted with the first element moved to the end"
    def generate(self, rng, n):
        a = Sorted().generate(rng, n)
        if n == 0:
            return a
        a.append(a.pop(0))
        return a

class PushMiddle(InputDistribution):
    key = "push_middle"
    name = "Push middle int"
    description = "Sorted with the middle element moved to the end"
    def generate(self, rng, n):
        a = Sorted().generate(rng, n)
        if n == 0:
            return a
        a.append(a.pop(n // 2))
        return a

class Uniform(InputDistribution):
    key = "uniform"
    name = "Uniform"

    def __init__(self, bits: int = 32):
        if bits < 1:
            raise ValueError(f"bits must be >= 1, got {bits}")
        self.bits = bits

    @property
    def description(self):
        return f"Independent draws over the signed {self.bits}-bit range"

    def generate(self, rng, n):
        _check_length(n)
        lo, hi = -(1 << (self.bits - 1)), (1 << (self.bits - 1)) - 1
        return [rng.randint(lo, hi) for _ in range(n)]

    def __repr__(self):
        return f"Uniform(bits={self.bits})"


DISTRIBUTIONS: Dict[str, InputDistribution] = {d.key: d for d in [
    Uniform(), Sorted(), Reverse(), AllEqual(), Shuffled(), ShuffledValues(16),
    AscendingDescending(), PushFront(), PushMiddle(),
]}

DEFAULT_DISTRIBUTIONS = ["uniform", "sorted", "reversed", "all_equal", "shuffled", "shuffled_16"]


def get_distributions(keys: Iterable[str], uniform_bits: int = 32) -> List[InputDistribution]:
    """Resolve registry keys to distributions, keeping the requested order."""
    out = []
    for k in keys:
        if k not in DISTRIBUTIONS:
            raise KeyError(f"unknown distribution {k!r}; choose from {sorted(DISTRIBUTIONS)}")
        d = DISTRIBUTIONS[k]
        if isinstance(d, Uniform) and d.bits != uniform_bits:
            d = Uniform(uniform_bits)
        out.append(d)
    return out

# =============================================================================
# Sorting Methods
# =============================================================================

@dataclass
class SortingMethod:
    """
    A sort routine plus its descriptor.

    `function` sorts a list in place and returns None. `stable` is a static
    claim about the algorithm; the engine groups results by it but never
    checks it.
    """
    name: str
    function: Callable[[List[Any]], None]
    stable: bool
    category: str = "reference"
    expected_complexity: str = "O(n log n)"
    description: str = ""

    def sort(self, data: List[Any]) -> None:
        self.function(data)


def _builtin_sort(a):
    a.sort()

def _numpy_qs(a):
    x = np.array(a)
    x.sort(kind='quicksort')
    a[:] = x.tolist()

def _numpy_stable(a):
    x = np.array(a)
    x.sort(kind='stable')
    a[:] = x.tolist()


def get_sorting_methods(include_slow=False, include_numpy=True) -> Dict[str, SortingMethod]:
    algos = {
        "quicksort": SortingMethod(
            "Hybrid quicksort", quickersort, False, "candidate",
            "O(n log n) expected",
            "Last-element pivot, insertion sort below 21 elements"),
        "insertion": SortingMethod(
            "Basic insertion sort", insertion_sort, False, "candidate",
            "O(n^2)", "Shift-left insertion sort"),
        # Claimed unstable although Timsort is stable
        "builtin": SortingMethod(
            "Python list.sort()", _builtin_sort, False, "baseline",
            "O(n log n)", "Python built-in list.sort()"),
    }

    if include_slow:
        algos["bubble"] = SortingMethod(
            "Basic bubblesort", bubble_sort, False, "reference",
            "O(n^2)", "Adjacent-swap passes over a shrinking suffix")

    if HAS_NUMPY and include_numpy:
        algos.update({
            "numpy_quicksort": SortingMethod(
                "NumPy quicksort", _numpy_qs, False, "baseline",
                "O(n log n)", "NumPy introsort, copied back into the list"),
            "numpy_stable": SortingMethod(
                "NumPy stable", _numpy_stable, True, "baseline",
                "O(n log n)", "NumPy stable sort, copied back into the list"),
        })

    return algos

# =============================================================================
# Verification
# =============================================================================

def is_sorted(a) -> bool:
    """True iff every adjacent pair satisfies left <= right."""
    return all(a[i] <= a[i + 1] for i in range(len(a) - 1))


def breakpoint_indices(a) -> List[int]:
    """Return all indices i where a[i] > a[i+1]."""
    return [i for i in range(len(a) - 1) if a[i] > a[i + 1]]

# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class DistributionOutput:
    name: str
    data: Tuple[Any, ...]

    def __len__(self):
        return len(self.data)


@dataclass(frozen=True)
class SortOutcome:
    time: float
    success: bool
    error: Optional[str] = None

    def to_dict(self):
        return {"time_seconds": self.time, "success": self.success, "error": self.error}


@dataclass(frozen=True)
class BenchmarkRecord:
    outcome: SortOutcome
    name: str
    stable: bool


ResultMap = Dict[int, Dict[str, List[Tuple[str, SortOutcome]]]]


@dataclass
class ResultTable:
    """
    Benchmark results grouped as stability -> length -> algorithm -> distributions.

    Each algorithm lands in exactly one partition, chosen by its stability
    claim. Per (length, algorithm) the distribution entries keep the order
    the distributions were requested in.
    """
    unstable: ResultMap = field(default_factory=dict)
    stable: ResultMap = field(default_factory=dict)

    def partition(self, stable: bool) -> ResultMap:
        return self.stable if stable else self.unstable

    def record(self, length: int, record: BenchmarkRecord, distribution: str):
        size_map = self.partition(record.stable).setdefault(length, {})
        size_map.setdefault(record.name, []).append((distribution, record.outcome))

    def __iter__(self) -> Iterator[Tuple[str, ResultMap]]:
        yield "unstable", self.unstable
        yield "stable", self.stable

    def lengths(self) -> List[int]:
        return sorted(set(self.unstable) | set(self.stable))

    def algorithms(self, length: int) -> List[str]:
        return list(self.unstable.get(length, {})) + list(self.stable.get(length, {}))

    def outcomes(self):
        for stability, by_length in self:
            for length, by_algo in by_length.items():
                for algo, entries in by_algo.items():
                    for dist, outcome in entries:
                        yield stability, length, algo, dist, outcome

    @property
    def all_successful(self) -> bool:
        return all(o.success for *_, o in self.outcomes())

    def to_dict(self):
        return {
            stability: {
                length: {
                    algo: [(dist, o.to_dict()) for dist, o in entries]
                    for algo, entries in by_algo.items()
                }
                for length, by_algo in by_length.items()
            }
            for stability, by_length in self
        }

# =============================================================================
# Benchmark Engine
# =============================================================================

class BenchmarkEngine:
    def __init__(self, config: BenchmarkConfig = BenchmarkConfig()):
        self.config = config

    @contextmanager
    def _gc_pause(self):
        if self.config.gc_between_runs:
            gc.collect()
            gc.disable()
        try:
            yield
        finally:
            if self.config.gc_between_runs:
                gc.enable()

    def generate_input(self, rng: random.Random, lengths: Sequence[int],
                       distributions: Sequence[InputDistribution]) -> List[DistributionOutput]:
        """Build the input catalogue: one labelled output per (length, distribution)."""
        catalogue = []
        for n in lengths:
            for dist in distributions:
                catalogue.append(DistributionOutput(dist.name, tuple(dist.generate(rng, n))))
        return catalogue

    def run_method(self, method: SortingMethod, data: Sequence[Any], runs: int) -> SortOutcome:
        """
        Sort `runs` private copies of `data` and time the batch as a whole.

        The reported time is the batch time divided by `runs`. Success needs
        every copy to come back non-descending; the first breakpoint of the
        first bad copy is kept in `error`. An exception from the method is
        recorded in the outcome instead of propagating.
        """
        inputs = [list(data) for _ in range(runs)]
        try:
            with self._gc_pause():
                t0 = time.perf_counter()
                for a in inputs:
                    method.sort(a)
                t1 = time.perf_counter()
        except Exception as e:
            return SortOutcome(float('inf'), False, f"{type(e).__name__}: {e}")

        elapsed = (t1 - t0) / runs
        for i, a in enumerate(inputs):
            bad = breakpoint_indices(a)
            if bad:
                k = bad[0]
                return SortOutcome(elapsed, False,
                                   f"run {i}: a[{k}] > a[{k + 1}] ({a[k]!r} > {a[k + 1]!r})")
        return SortOutcome(elapsed, True)

    def run_all(self, catalogue: Sequence[DistributionOutput], methods: Sequence[SortingMethod],
                runs: int, on_record: Optional[Callable] = None
                ) -> List[Tuple[DistributionOutput, BenchmarkRecord]]:
        results = []
        for method in methods:
            for entry in catalogue:
                outcome = self.run_method(method, entry.data, runs)
                record = BenchmarkRecord(outcome, method.name, method.stable)
                results.append((entry, record))
                if on_record is not None:
                    on_record(entry, record)
        return results

    def bench(self, rng: random.Random, lengths: Sequence[int], runs: int,
              distributions: Sequence[InputDistribution], methods: Sequence[SortingMethod],
              on_record: Optional[Callable] = None) -> ResultTable:
        _check_runs(runs)
        _check_lengths(lengths)
        if not distributions:
            raise ValueError("at least one distribution is required")
        if not methods:
            raise ValueError("at least one sorting method is required")
        names = [m.name for m in methods]
        if len(set(names)) != len(names):
            raise ValueError(f"sorting method names must be unique, got {names}")

        #a repeated length would double the entries in its bucket
        lengths = list(dict.fromkeys(lengths))

        catalogue = self.generate_input(rng, lengths, distributions)
        table = ResultTable()
        for entry, record in self.run_all(catalogue, methods, runs, on_record):
            table.record(len(entry), record, entry.name)
        return table


def bench(rng: random.Random, lengths: Sequence[int], runs: int,
          distributions: Sequence[InputDistribution], methods: Sequence[SortingMethod],
          config: Optional[BenchmarkConfig] = None) -> ResultTable:
    """
    Run every method over every (length, distribution) input `runs` times.

    Returns a ResultTable: two partitions (unstable, stable), each keyed by
    the number of elements, then by algorithm name, holding the ordered
    (distribution name, SortOutcome) pairs.
    """
    engine = BenchmarkEngine(config if config is not None else BenchmarkConfig())
    return engine.bench(rng, lengths, runs, distributions, methods)

# =============================================================================
# Formatting & Output
# =============================================================================

def fmt_time(t):
    """Format time with appropriate units."""
    if t == float('inf'):
        return "error"
    if t < 1e-6:
        return f"{t*1e9:.1f}ns"
    if t < 1e-3:
        return f"{t*1e6:.1f}us"
    if t < 1:
        return f"{t*1e3:.2f}ms"
    return f"{t:.3f}s"


def fmt_per_element(t, n):
    """Nanoseconds per element; the plain time when there are no elements."""
    if not n or math.isinf(t):
        return fmt_time(t)
    return f"{t * 1e9 / n:.1f}"


def get_system_info():
    """Interpreter and NumPy versions for the run banner."""
    return {
        "python_version": platform.python_version(),
        "numpy_version": np.__version__ if HAS_NUMPY else None,
    }


def print_header(text):
    print(f"\n{Colors.BOLD}{Colors.HEADER}{'='*70}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.HEADER}{text.center(70)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.HEADER}{'='*70}{Colors.END}\n")


def print_subheader(text):
    print(f"\n{Colors.BOLD}{Colors.CYAN}{text}{Colors.END}")
    print(f"{Colors.CYAN}{'-'*len(text)}{Colors.END}")


def print_result_slice(stability: str, n: int, by_algo: Dict[str, List[Tuple[str, SortOutcome]]]):
    """
    Print one (stability, length) slice: a row per algorithm, a column per distribution.

    Cells are ns per element; failed outcomes are marked FAIL.
    """
    print_subheader(f"Sorting {n:,} elements ({stability})")
    if not by_algo:
        print("  (no algorithms)")
        return

    #columns are positional; a repeated distribution name gets a #k suffix
    names = [d for d, _ in max(by_algo.values(), key=len)]
    dists = []
    for i, d in enumerate(names):
        k = names[:i + 1].count(d)
        dists.append(d if k == 1 else f"{d} #{k}")

    width = max([12] + [len(d) + 2 for d in dists])
    hdr = f"{'Algorithm':<24}" + "".join(f"{d:>{width}}" for d in dists)
    print(f"{Colors.BOLD}{hdr}{Colors.END}")
    print("-" * len(hdr))

    for algo, entries in by_algo.items():
        row = f"{algo:<24}"
        for i in range(len(dists)):
            o = entries[i][1] if i < len(entries) else None
            if o is None:
                row += f"{'-':>{width}}"
            elif o.success:
                row += f"{fmt_per_element(o.time, n):>{width}}"
            else:
                row += f"{Colors.RED}{'FAIL':>{width}}{Colors.END}"
        print(row)
    print("\n  ns per element, mean over runs")
