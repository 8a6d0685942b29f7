#!/usr/bin/env python3
"""
Sorting Micro-Benchmark Harness - Main Runner
=============================================

Runs every selected sorting method over every selected input distribution
and length, then prints one table per (stability, length) slice.

Usage:
    python benchmark_sorts.py
    python benchmark_sorts.py --lengths 100 1000 --runs 5
    python benchmark_sorts.py --dist sorted reversed asc_dsc --algo quicksort insertion
    python benchmark_sorts.py --slow --no-numpy
"""

import argparse
import math
import random
import sys

from benchmark_core import (
    BenchmarkConfig, BenchmarkEngine, ResultTable,
    DISTRIBUTIONS, DEFAULT_DISTRIBUTIONS,
    get_distributions, get_sorting_methods, get_system_info,
    print_header, print_subheader, print_result_slice, fmt_time,
    Colors, HAS_NUMPY,
)


def run_benchmark(config: BenchmarkConfig, distributions: list, methods: list,
                  quiet: bool = False) -> ResultTable:
    """Benchmark all methods over all distributions for the configured lengths."""
    engine = BenchmarkEngine(config)
    rng = random.Random(config.seed)

    if not quiet:
        print_header("Sorting Benchmark")
        print(f"  lengths = {list(config.lengths)}, runs = {config.runs}, seed = {config.seed}")
        print(f"  {len(distributions)} distributions x {len(methods)} methods\n")
        for d in distributions:
            print(f"    {d.name:<22} {d.description}")
        print()

    def progress(entry, record):
        o = record.outcome
        if o.success:
            status = f"{Colors.GREEN}OK{Colors.END} ({fmt_time(o.time)})"
        elif math.isinf(o.time):
            status = f"{Colors.RED}ERROR{Colors.END} ({o.error})"
        else:
            status = f"{Colors.RED}INCORRECT{Colors.END} ({o.error})"
        print(f"  {record.name:<24} {entry.name:<22} n={len(entry):<8} {status}")

    return engine.bench(rng, config.lengths, config.runs, distributions, methods,
                        on_record=None if quiet else progress)


def print_catalogue(distributions: dict, methods: dict):
    """List the registered distributions and sorting methods with their descriptors."""
    print_subheader("Input distributions")
    for key, d in distributions.items():
        print(f"  {key:<14} {d.name:<22} {d.description}")

    print_subheader("Sorting methods")
    hdr = f"  {'Key':<16} {'Name':<22} {'Category':<10} {'Complexity':<20} {'Stable':<7} Description"
    print(f"{Colors.BOLD}{hdr}{Colors.END}")
    for key, m in methods.items():
        stable = "yes" if m.stable else "no"
        print(f"  {key:<16} {m.name:<22} {m.category:<10} {m.expected_complexity:<20} {stable:<7} {m.description}")


def print_results(table: ResultTable):
    for stability, by_length in table:
        for n in sorted(by_length):
            print_result_slice(stability, n, by_length[n])


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Sorting Micro-Benchmark Harness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   Default lengths and distributions
  %(prog)s --lengths 100 1000 --runs 5       Custom sizes and repetitions
  %(prog)s --algo quicksort builtin          Only some methods
  %(prog)s --slow                            Include bubble sort
        """
    )

    algo_keys = list(get_sorting_methods(include_slow=True, include_numpy=HAS_NUMPY))

    parser.add_argument("--lengths", type=int, nargs="+", default=list(BenchmarkConfig.lengths),
                        help="Input lengths (default: 100 1000 10000)")
    parser.add_argument("--runs", type=int, default=BenchmarkConfig.runs,
                        help="Sorts per input, averaged (default: 2)")
    parser.add_argument("--seed", type=int, default=BenchmarkConfig.seed, help="Random seed (default: 42)")
    parser.add_argument("--bits", type=int, default=BenchmarkConfig.uniform_bits,
                        help="Bit width of uniform values (default: 32)")
    parser.add_argument("--dist", nargs="+", choices=list(DISTRIBUTIONS), default=DEFAULT_DISTRIBUTIONS,
                        help="Input distributions, in order")
    parser.add_argument("--algo", nargs="+", choices=algo_keys,
                        help="Sorting methods (default: all enabled)")
    parser.add_argument("--slow", action="store_true", help="Include bubble sort")
    parser.add_argument("--no-numpy", action="store_true", help="Exclude NumPy methods")
    parser.add_argument("--no-gc-pause", action="store_true", help="Leave GC enabled while timing")
    parser.add_argument("--list", action="store_true", help="List distributions and methods, then exit")
    parser.add_argument("--quiet", "-q", action="store_true", help="Only print the result tables")

    args = parser.parse_args(argv)

    try:
        config = BenchmarkConfig(
            seed=args.seed,
            runs=args.runs,
            lengths=tuple(args.lengths),
            gc_between_runs=not args.no_gc_pause,
            uniform_bits=args.bits,
        )
    except ValueError as e:
        parser.error(str(e))

    available = get_sorting_methods(
        include_slow=args.slow or bool(args.algo and "bubble" in args.algo),
        include_numpy=(not args.no_numpy) and HAS_NUMPY,
    )
    if args.algo:
        missing = [k for k in args.algo if k not in available]
        if missing:
            parser.error(f"methods not enabled: {', '.join(missing)}")
        methods = [available[k] for k in args.algo]
    else:
        methods = list(available.values())

    if args.list:
        print_catalogue(DISTRIBUTIONS, available)
        return 0

    distributions = get_distributions(args.dist, uniform_bits=config.uniform_bits)

    if not args.quiet:
        info = get_system_info()
        print(f"\n{Colors.BOLD}Sorting Micro-Benchmark Harness{Colors.END}")
        print(f"Python {info['python_version']} | NumPy: {info['numpy_version'] or 'No'}")

    table = run_benchmark(config, distributions, methods, args.quiet)
    print_results(table)

    failures = [o for *_, o in table.outcomes() if not o.success]
    if failures:
        print(f"\n{Colors.RED}{len(failures)} outcome(s) failed verification{Colors.END}\n")
        return 1

    if not args.quiet:
        print(f"\n{Colors.CYAN}Benchmark complete.{Colors.END}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
