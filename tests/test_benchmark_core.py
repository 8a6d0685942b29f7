"""
Tests for the sorting method registry, the benchmark engine and the result table.
"""

import math
import random
from types import SimpleNamespace

import pytest

import benchmark_core
from benchmark_core import (
    BenchmarkConfig, BenchmarkEngine, BenchmarkRecord,
    ResultTable, SortOutcome, SortingMethod,
    AllEqual, Reverse, Shuffled, Sorted, Uniform,
    bench, breakpoint_indices, fmt_per_element, fmt_time, get_sorting_methods, get_system_info,
    is_sorted, print_result_slice,
)
from hybrid_quicksort import insertion_sort, quickersort


def _noop(a):
    pass


def _raises(a):
    raise RuntimeError("boom")


QUICK = SortingMethod("Hybrid quicksort", quickersort, False)
INSERTION = SortingMethod("Basic insertion sort", insertion_sort, False)
STABLE = SortingMethod("Stable builtin", list.sort, True)
BROKEN = SortingMethod("Does nothing", _noop, False)
EXPLODES = SortingMethod("Explodes", _raises, True)

FAST = BenchmarkConfig(gc_between_runs=False)


# =============================================================================
# Sorting methods
# =============================================================================

class TestSortingMethods:

    def test_default_registry(self):
        methods = get_sorting_methods(include_numpy=False)
        assert list(methods) == ["quicksort", "insertion", "builtin"]
        assert not any(m.stable for m in methods.values())

    def test_slow_adds_bubble_sort(self):
        methods = get_sorting_methods(include_slow=True, include_numpy=False)
        assert methods["bubble"].name == "Basic bubblesort"
        assert methods["bubble"].stable is False

    @pytest.mark.skipif(not benchmark_core.HAS_NUMPY, reason="NumPy not installed")
    def test_numpy_methods_sort_in_place(self):
        methods = get_sorting_methods(include_numpy=True)
        assert methods["numpy_stable"].stable is True
        for key in ("numpy_quicksort", "numpy_stable"):
            a = [5, -3, 2, 2, 0]
            ident = id(a)
            methods[key].sort(a)
            assert id(a) == ident
            assert a == [-3, 0, 2, 2, 5]

    @pytest.mark.parametrize("key", ["quicksort", "insertion", "builtin", "bubble"])
    @pytest.mark.parametrize("data", [[], [1], [2, 1], [4, 4, 4], list(range(30, 0, -1))])
    def test_every_method_sorts(self, key, data):
        method = get_sorting_methods(include_slow=True, include_numpy=False)[key]
        a = list(data)
        method.sort(a)
        assert a == sorted(data)


class TestVerification:

    @pytest.mark.parametrize("a", [[], [1], [1, 1], [1, 2, 2, 3]])
    def test_sorted_inputs(self, a):
        assert is_sorted(a)
        assert breakpoint_indices(a) == []

    def test_unsorted_input(self):
        a = [1, 3, 2, 5, 4]
        assert not is_sorted(a)
        assert breakpoint_indices(a) == [1, 3]


# =============================================================================
# Configuration
# =============================================================================

class TestBenchmarkConfig:

    def test_defaults(self):
        c = BenchmarkConfig()
        assert c.runs == 2
        assert c.lengths == (100, 1_000, 10_000)

    @pytest.mark.parametrize("kwargs", [
        {"runs": 0},
        {"lengths": ()},
        {"lengths": (10, -1)},
        {"uniform_bits": 0},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            BenchmarkConfig(**kwargs)


# =============================================================================
# Engine
# =============================================================================

class TestGenerateInput:

    def test_catalogue_order(self):
        engine = BenchmarkEngine(FAST)
        cat = engine.generate_input(random.Random(0), [3, 5], [Sorted(), Reverse()])
        assert [(e.name, len(e)) for e in cat] == [
            ("Sorted", 3), ("Reversed", 3), ("Sorted", 5), ("Reversed", 5),
        ]
        assert cat[1].data == (3, 2, 1)

    def test_outputs_are_immutable(self):
        (entry,) = BenchmarkEngine(FAST).generate_input(random.Random(0), [4], [Sorted()])
        assert isinstance(entry.data, tuple)

    def test_reproducible_with_same_seed(self):
        engine = BenchmarkEngine(FAST)
        dists = [Shuffled(), Uniform()]
        a = engine.generate_input(random.Random(99), [10, 20], dists)
        b = engine.generate_input(random.Random(99), [10, 20], dists)
        assert a == b


class TestRunMethod:

    def test_successful_outcome(self):
        o = BenchmarkEngine(FAST).run_method(QUICK, (3, 1, 2), runs=3)
        assert o.success
        assert o.error is None
        assert o.time >= 0

    def test_input_is_not_mutated(self):
        data = [3, 1, 2]
        BenchmarkEngine(FAST).run_method(INSERTION, data, runs=2)
        assert data == [3, 1, 2]

    def test_each_run_gets_a_private_copy(self):
        seen = []

        def record(a):
            seen.append(list(a))
            a.sort()

        BenchmarkEngine(FAST).run_method(SortingMethod("rec", record, False), (2, 1), runs=3)
        assert seen == [[2, 1], [2, 1], [2, 1]]

    def test_incorrect_sort_is_data(self):
        o = BenchmarkEngine(FAST).run_method(BROKEN, (2, 1), runs=2)
        assert o.success is False
        assert not math.isinf(o.time)
        assert o.error == "run 0: a[0] > a[1] (2 > 1)"

    def test_diagnostic_names_first_bad_copy(self):
        calls = []

        def breaks_second_copy(a):
            calls.append(1)
            a.sort()
            if len(calls) == 2:
                a[2], a[3] = a[3], a[2]

        method = SortingMethod("flaky", breaks_second_copy, False)
        o = BenchmarkEngine(FAST).run_method(method, (4, 3, 2, 1, 0), runs=3)
        assert o.success is False
        assert o.error == "run 1: a[2] > a[3] (3 > 2)"

    def test_exception_is_recorded(self):
        o = BenchmarkEngine(FAST).run_method(EXPLODES, (2, 1), runs=2)
        assert o.success is False
        assert math.isinf(o.time)
        assert "boom" in o.error

    def test_time_is_mean_of_batch(self, monkeypatch):
        ticks = iter([10.0, 16.0])
        monkeypatch.setattr(benchmark_core, "time", SimpleNamespace(perf_counter=lambda: next(ticks)))
        o = BenchmarkEngine(FAST).run_method(QUICK, (1, 2), runs=3)
        assert o.time == pytest.approx(2.0)

    def test_gc_is_restored(self):
        import gc
        BenchmarkEngine(BenchmarkConfig(gc_between_runs=True)).run_method(EXPLODES, (1,), runs=1)
        assert gc.isenabled()


class TestBench:

    def test_two_lengths_two_distributions_two_methods(self):
        table = bench(random.Random(1), [10, 20], 3, [Sorted(), Shuffled()],
                      [QUICK, INSERTION], config=FAST)
        assert table.stable == {}
        assert sorted(table.unstable) == [10, 20]
        for n in (10, 20):
            by_algo = table.unstable[n]
            assert list(by_algo) == ["Hybrid quicksort", "Basic insertion sort"]
            for entries in by_algo.values():
                assert [d for d, _ in entries] == ["Sorted", "Shuffled"]
                assert all(o.success for _, o in entries)
        assert table.all_successful

    def test_stability_partitioning(self):
        table = bench(random.Random(1), [0, 5], 1, [Reverse(), AllEqual()],
                      [QUICK, STABLE, INSERTION], config=FAST)
        for n in (0, 5):
            assert set(table.unstable[n]) == {"Hybrid quicksort", "Basic insertion sort"}
            assert set(table.stable[n]) == {"Stable builtin"}

    def test_failures_do_not_stop_the_run(self):
        table = bench(random.Random(1), [4], 2, [Reverse(), Sorted()],
                      [EXPLODES, BROKEN, QUICK], config=FAST)
        broken = dict(table.unstable[4]["Does nothing"])
        assert broken["Reversed"].success is False
        assert broken["Sorted"].success is True
        assert all(not o.success for _, o in table.stable[4]["Explodes"])
        assert all(o.success for _, o in table.unstable[4]["Hybrid quicksort"])
        assert not table.all_successful

    def test_distribution_order_follows_request(self):
        dists = [AllEqual(), Reverse(), Sorted()]
        table = bench(random.Random(1), [8], 1, dists, [QUICK], config=FAST)
        assert [d for d, _ in table.unstable[8]["Hybrid quicksort"]] == [
            "All equal", "Reversed", "Sorted",
        ]

    def test_repeated_lengths_are_collapsed(self):
        table = bench(random.Random(1), [6, 6], 1, [Sorted()], [QUICK], config=FAST)
        assert len(table.unstable[6]["Hybrid quicksort"]) == 1

    def test_progress_callback(self):
        calls = []
        BenchmarkEngine(FAST).bench(random.Random(1), [3], 1, [Sorted(), Reverse()], [QUICK, STABLE],
                                    on_record=lambda e, r: calls.append((r.name, e.name)))
        assert calls == [
            ("Hybrid quicksort", "Sorted"), ("Hybrid quicksort", "Reversed"),
            ("Stable builtin", "Sorted"), ("Stable builtin", "Reversed"),
        ]

    @pytest.mark.parametrize("args", [
        ([10], 0, [Sorted()], [QUICK]),
        ([], 1, [Sorted()], [QUICK]),
        ([-2], 1, [Sorted()], [QUICK]),
        ([10], 1, [], [QUICK]),
        ([10], 1, [Sorted()], []),
        ([10], 1, [Sorted()], [QUICK, SortingMethod("Hybrid quicksort", sorted, True)]),
    ])
    def test_misuse_is_rejected(self, args):
        with pytest.raises(ValueError):
            bench(random.Random(1), *args, config=FAST)


# =============================================================================
# Result table
# =============================================================================

class TestResultTable:

    def _table(self):
        t = ResultTable()
        ok = SortOutcome(0.5, True)
        t.record(10, BenchmarkRecord(ok, "A", False), "Sorted")
        t.record(10, BenchmarkRecord(ok, "A", False), "Reversed")
        t.record(10, BenchmarkRecord(SortOutcome(1.0, False), "B", True), "Sorted")
        t.record(20, BenchmarkRecord(ok, "A", False), "Sorted")
        return t

    def test_iteration_order(self):
        assert [name for name, _ in self._table()] == ["unstable", "stable"]

    def test_queries(self):
        t = self._table()
        assert t.lengths() == [10, 20]
        assert t.algorithms(10) == ["A", "B"]
        assert t.algorithms(30) == []
        assert t.partition(True) is t.stable
        assert len(list(t.outcomes())) == 4
        assert not t.all_successful

    def test_to_dict(self):
        d = self._table().to_dict()
        assert d["unstable"][10]["A"] == [
            ("Sorted", {"time_seconds": 0.5, "success": True, "error": None}),
            ("Reversed", {"time_seconds": 0.5, "success": True, "error": None}),
        ]
        assert d["stable"][10]["B"][0][1]["success"] is False


# =============================================================================
# Formatting
# =============================================================================

class TestFormatting:

    @pytest.mark.parametrize("t, expected", [
        (5e-7, "500.0ns"),
        (2.5e-5, "25.0us"),
        (0.0125, "12.50ms"),
        (2.0, "2.000s"),
        (float("inf"), "error"),
    ])
    def test_fmt_time(self, t, expected):
        assert fmt_time(t) == expected

    def test_fmt_per_element(self):
        assert fmt_per_element(1e-6, 100) == "10.0"
        assert fmt_per_element(1e-6, 0) == "1.0us"

    def test_print_result_slice(self, capsys):
        print_result_slice("unstable", 100, {
            "Hybrid quicksort": [("Sorted", SortOutcome(1e-5, True)),
                                 ("Reversed", SortOutcome(2e-5, False))],
        })
        out = capsys.readouterr().out
        assert "Sorting 100 elements (unstable)" in out
        assert "Hybrid quicksort" in out
        assert "100.0" in out
        assert "FAIL" in out

    def test_repeated_distribution_names_keep_their_own_columns(self, capsys):
        table = bench(random.Random(1), [50], 1, [Sorted(), Sorted()], [BROKEN, QUICK], config=FAST)
        entries = table.unstable[50]["Does nothing"]
        assert [d for d, _ in entries] == ["Sorted", "Sorted"]

        print_result_slice("unstable", 50, {
            "Hybrid quicksort": [("Sorted", SortOutcome(1e-6, True)),
                                 ("Sorted", SortOutcome(2e-6, False))],
        })
        lines = capsys.readouterr().out.splitlines()
        header = next(line for line in lines if "Algorithm" in line)
        row = next(line for line in lines if "Hybrid quicksort" in line)
        assert "Sorted #2" in header
        assert "20.0" in row and "FAIL" in row
        assert row.index("20.0") < row.index("FAIL")

    def test_system_info(self):
        info = get_system_info()
        assert set(info) == {"python_version", "numpy_version"}
        assert info["python_version"].count(".") == 2
        if not benchmark_core.HAS_NUMPY:
            assert info["numpy_version"] is None
