#!/usr/bin/env python3
"""
Send N identity requests in parallel and check every one gets the same identity.

Each request runs the identity factory in its own execution context, so a factory
with module-level state (e.g. a counter) must still produce identical results.

Usage:
  python scripts/identity_concurrent.py [--url URL] [--concurrent N] [--id ID]
  Or set env: IDENTITY_URL, CONCURRENT
"""

import argparse
import os
import sys
from concurrent.futures import ThreadPoolExecutor, as_completed

import httpx


def do_request(url: str, doc_id: str, index: int) -> tuple[int, int, str | None]:
    """Send one POST; return (index, status_code, identity number or None)."""
    try:
        r = httpx.post(url, json={"data": {"id": doc_id}}, timeout=30)
    except httpx.HTTPError:
        return (index, -1, None)  # -1 = error
    number = None
    if r.status_code == 200:
        identity = r.json().get("identity") or {}
        number = identity.get("number")
    return (index, r.status_code, number)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Check identity derivation under N parallel requests."
    )
    parser.add_argument(
        "--url",
        default=os.environ.get("IDENTITY_URL", "http://localhost:8000/api/v1/identity"),
        help="Identity endpoint URL",
    )
    parser.add_argument(
        "--concurrent",
        type=int,
        default=int(os.environ.get("CONCURRENT", "20")),
        help="Number of concurrent requests (default 20)",
    )
    parser.add_argument("--id", default="abc", help="Document id sent as data.id")
    args = parser.parse_args()

    print(f"Testing {args.concurrent} concurrent POST requests to {args.url}")
    print("---")

    results: list[tuple[int, int, str | None]] = []
    with ThreadPoolExecutor(max_workers=args.concurrent) as executor:
        futures = {
            executor.submit(do_request, args.url, args.id, i): i
            for i in range(1, args.concurrent + 1)
        }
        for fut in as_completed(futures):
            idx, code, number = fut.result()
            results.append((idx, code, number))
            code_str = str(code) if code >= 0 else "ERR"
            print(f"{idx} HTTP {code_str} {number}")

    print("---")
    ok = sum(1 for _, c, _ in results if c == 200)
    err = sum(1 for _, c, _ in results if c < 0)
    numbers = {n for _, c, n in results if c == 200}
    print(f"Done. 200={ok} other={len(results) - ok - err} errors={err} distinct={len(numbers)}")
    if len(numbers) > 1:
        print("Identity differs between requests: contexts are leaking state.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
