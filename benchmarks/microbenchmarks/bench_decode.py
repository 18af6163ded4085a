"""Microbenchmark: typed query-string decoding.

1. decode() into a dataclass in urlencoded mode (10K iterations).
2. decode() with repeated keys in duplicate mode (10K iterations).
3. decode() of nested maps in brackets mode (10K iterations).
4. stdlib urllib.parse.parse_qs on the same inputs, for comparison.
"""

import statistics
import time
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class Listing:
    page: int
    limit: int
    sort: str
    order: str
    filter: Optional[str] = None
    q: Optional[str] = None


@dataclass
class Tagged:
    page: int
    tag: List[str]


@dataclass
class Filtered:
    page: int
    where: Dict[str, str]


def _timed(name, n, func, inputs):
    # Warm up
    for item in inputs[:100]:
        func(item)

    timings = []
    for _ in range(5):
        start = time.perf_counter()
        for item in inputs:
            func(item)
        elapsed = time.perf_counter() - start
        timings.append(elapsed)

    return {
        "name": name,
        "n": n,
        "min_s": min(timings),
        "median_s": statistics.median(timings),
        "mean_s": statistics.mean(timings),
        "ops_per_sec": n / statistics.median(timings),
    }


def _listing_queries(n):
    return [
        f"page={i % 10}&limit=20&sort=name&order=asc&filter=active&q=search+term+{i}"
        .encode()
        for i in range(n)
    ]


def _tagged_queries(n):
    return [
        f"page={i % 10}&tag=red&tag=green&tag=blue+{i}&tag=caf%C3%A9".encode()
        for i in range(n)
    ]


def _bracket_queries(n):
    return [
        f"page={i % 10}&where[name]=bob&where[city]=new+york&where[id]={i}".encode()
        for i in range(n)
    ]


def bench_decode_urlencoded(n=10_000):
    """Benchmark typedqs.decode into a flat dataclass."""
    from typedqs import decode

    return _timed(
        "decode (urlencoded)", n, lambda qs: decode(qs, Listing), _listing_queries(n)
    )


def bench_decode_duplicate(n=10_000):
    """Benchmark typedqs.decode with a repeated key."""
    from typedqs import DUPLICATE, decode

    return _timed(
        "decode (duplicate)",
        n,
        lambda qs: decode(qs, Tagged, DUPLICATE),
        _tagged_queries(n),
    )


def bench_decode_brackets(n=10_000):
    """Benchmark typedqs.decode with a nested map."""
    from typedqs import BRACKETS, decode

    return _timed(
        "decode (brackets)",
        n,
        lambda qs: decode(qs, Filtered, BRACKETS),
        _bracket_queries(n),
    )


def bench_stdlib_parse_qs(n=10_000):
    """Benchmark stdlib urllib.parse.parse_qs for comparison."""
    from urllib.parse import parse_qs

    return _timed("stdlib parse_qs", n, parse_qs, _listing_queries(n))


def print_result(result):
    """Pretty-print a benchmark result dict."""
    print(f"  {result['name']:>30s}: "
          f"median={result['median_s']:.4f}s  "
          f"min={result['min_s']:.4f}s  "
          f"({result['ops_per_sec']:,.0f} ops/sec)")


def main():
    n = 10_000

    print(f"Decode benchmarks ({n} iterations, 5 rounds each)")
    print("-" * 70)

    urlencoded_result = bench_decode_urlencoded(n)
    print_result(urlencoded_result)

    stdlib_result = bench_stdlib_parse_qs(n)
    print_result(stdlib_result)

    ratio = urlencoded_result["median_s"] / stdlib_result["median_s"]
    print(f"\n  typed decode takes {ratio:.2f}x the time of stdlib parse_qs "
          f"(which does no type conversion)")
    print()

    print_result(bench_decode_duplicate(n))
    print_result(bench_decode_brackets(n))

    print()
    return urlencoded_result, stdlib_result


if __name__ == "__main__":
    main()
