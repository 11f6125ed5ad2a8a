#!/usr/bin/env python3
"""
FnMaxima Performance Benchmarks

Times the incremental maxima maintenance against rebuilding the maxima from
scratch after every update, plus the cost of copy-on-write forks.

Usage:
    python scripts/benchmark.py              # Run all benchmarks
    python scripts/benchmark.py --size 5000  # Larger functions
    python scripts/benchmark.py --help       # Show help
"""

import argparse
import random
import sys
import time
from dataclasses import dataclass
from typing import Callable, List

# Add the project root to the Python path
sys.path.insert(0, ".")

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table, box

from fnmaxima import FunctionMaxima

DEFAULT_SIZE = 2000
DEFAULT_UPDATES = 2000
VALUE_RANGE = 8


@dataclass
class BenchmarkResult:
    """Timing of one benchmark."""

    name: str
    workload: str
    operations: int
    seconds: float

    @property
    def operations_per_second(self) -> float:
        return self.operations / self.seconds if self.seconds > 0 else float("inf")


def timed(name: str, workload: str, operations: int, body: Callable[[], None]) -> BenchmarkResult:
    start = time.perf_counter()
    body()
    return BenchmarkResult(name, workload, operations, time.perf_counter() - start)


class FnMaximaBenchmark:
    """Rich-formatted display for FnMaxima performance benchmarking."""

    def __init__(self, size: int, updates: int, seed: int = 0):
        self.console = Console()
        self.size = size
        self.updates = updates
        self.rng = random.Random(seed)
        self.results: List[BenchmarkResult] = []

    def _random_updates(self, count: int):
        return [
            (self.rng.randrange(self.size), self.rng.randrange(VALUE_RANGE))
            for _ in range(count)
        ]

    def run_benchmarks(self):
        """Run all benchmarks and display results with rich formatting."""
        self._display_header()

        base = self._random_updates(self.size)
        updates = self._random_updates(self.updates)

        self._run(self._bench_incremental_build, base)
        self._run(self._bench_bulk_build, base)
        self._run(self._bench_incremental_updates, base, updates)
        self._run(self._bench_rebuild_updates, base, updates[: max(1, len(updates) // 20)])
        self._run(self._bench_cow_forks, base, updates)

        self._display_final_results()

    def _run(self, bench: Callable[..., BenchmarkResult], *args):
        self.console.print(f"[yellow]Running {bench.__name__[7:]}...[/yellow]")
        result = bench(*args)
        self.results.append(result)
        self.console.print(
            f"[green]✓[/green] {result.name}: {result.operations_per_second:,.0f} ops/sec"
        )

    def _bench_incremental_build(self, base) -> BenchmarkResult:
        def body():
            f = FunctionMaxima()
            for argument, value in base:
                f.set_value(argument, value)

        return timed("Incremental build", f"{len(base)} set_value", len(base), body)

    def _bench_bulk_build(self, base) -> BenchmarkResult:
        return timed(
            "Bulk build (from_items)",
            f"{len(base)} pairs",
            len(base),
            lambda: FunctionMaxima.from_items(base),
        )

    def _bench_incremental_updates(self, base, updates) -> BenchmarkResult:
        f = FunctionMaxima.from_items(base)

        def body():
            for argument, value in updates:
                if value == 0:
                    f.erase(argument)
                else:
                    f.set_value(argument, value)

        result = timed("Incremental updates", f"{len(updates)} edits", len(updates), body)
        if not f.verify():
            self.console.print("[red]✗ maxima index inconsistent after updates[/red]")
        return result

    def _bench_rebuild_updates(self, base, updates) -> BenchmarkResult:
        model = dict(base)

        def body():
            for argument, value in updates:
                if value == 0:
                    model.pop(argument, None)
                else:
                    model[argument] = value
                FunctionMaxima.from_items(model)

        return timed("Rebuild per update", f"{len(updates)} edits", len(updates), body)

    def _bench_cow_forks(self, base, updates) -> BenchmarkResult:
        f = FunctionMaxima.from_items(base)

        def body():
            for argument, value in updates:
                fork = f.copy()
                fork.set_value(argument, value + VALUE_RANGE)

        return timed("Fork + first write", f"{len(updates)} forks", len(updates), body)

    def _display_header(self):
        header = Panel(
            Align.center(f"FnMaxima Benchmark Suite ({self.size} points)"),
            title="FnMaxima Benchmarks",
            border_style="blue",
        )
        self.console.print(header)
        self.console.print()

    def _display_final_results(self):
        table = Table(title="Final Benchmark Results", box=box.SIMPLE_HEAVY)
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Workload", style="magenta")
        table.add_column("Performance", style="green", justify="right")
        table.add_column("Time", style="yellow", justify="right")

        for result in self.results:
            table.add_row(
                result.name,
                result.workload,
                f"{result.operations_per_second / 1000:.1f}K ops/sec",
                f"{result.seconds * 1000:.1f} ms",
            )

        self.console.print()
        self.console.print(table)


def main():
    parser = argparse.ArgumentParser(description="FnMaxima performance benchmarks")
    parser.add_argument("--size", type=int, default=DEFAULT_SIZE, help="Points per function")
    parser.add_argument("--updates", type=int, default=DEFAULT_UPDATES, help="Edits to time")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    args = parser.parse_args()

    FnMaximaBenchmark(args.size, args.updates, args.seed).run_benchmarks()


if __name__ == "__main__":
    main()
