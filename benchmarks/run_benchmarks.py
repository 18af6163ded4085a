#!/usr/bin/env python3
"""Run all typedqs microbenchmarks and print a summary table.

Usage:
    python -m benchmarks.run_benchmarks
    # or
    python benchmarks/run_benchmarks.py
"""

import sys
import os

# Ensure project root is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


def run_all():
    results = []

    print("=" * 70)
    print("  typedqs Microbenchmark Suite")
    print("=" * 70)
    print()

    from benchmarks.microbenchmarks.bench_decode import (
        bench_decode_brackets,
        bench_decode_duplicate,
        bench_decode_urlencoded,
        bench_stdlib_parse_qs,
        print_result,
    )

    # ---- Flat decoding -----------------------------------------------------
    print("[1/2] Flat query strings")
    print("-" * 70)
    try:
        decoded = bench_decode_urlencoded()
        print_result(decoded)
        results.append(decoded)

        stdlib_result = bench_stdlib_parse_qs()
        print_result(stdlib_result)
        results.append(stdlib_result)
    except Exception as exc:
        print(f"  ERROR: {exc}")
    print()

    # ---- Sequences and maps ------------------------------------------------
    print("[2/2] Repeated and bracketed keys")
    print("-" * 70)
    try:
        duplicate = bench_decode_duplicate()
        print_result(duplicate)
        results.append(duplicate)

        brackets = bench_decode_brackets()
        print_result(brackets)
        results.append(brackets)
    except Exception as exc:
        print(f"  ERROR: {exc}")
    print()

    # ---- Summary table ------------------------------------------------------
    print("=" * 70)
    print("  Summary")
    print("=" * 70)
    print()
    print(f"  {'Benchmark':<30s} {'Median (s)':>12s} {'Ops/sec':>14s}")
    print(f"  {'-' * 30} {'-' * 12} {'-' * 14}")

    for r in results:
        print(f"  {r['name']:<30s} {r['median_s']:>12.4f} {r['ops_per_sec']:>14,.0f}")

    print()
    print("Done.")


if __name__ == "__main__":
    run_all()
