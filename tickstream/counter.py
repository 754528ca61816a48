"""Many threads incrementing one shared counter."""

from __future__ import annotations

import argparse
import threading


class AtomicCounter:
    """An integer counter whose updates are safe across threads."""

    def __init__(self, value: int = 0) -> None:
        self._value = value
        self._lock = threading.Lock()

    def fetch_add(self, amount: int = 1) -> int:
        """Add ``amount`` and return the value held before the addition."""
        with self._lock:
            previous = self._value
            self._value += amount
            return previous

    def load(self) -> int:
        """Return the current value."""
        with self._lock:
            return self._value


def increment(counter: AtomicCounter, times: int) -> None:
    """Add one to ``counter`` ``times`` times."""
    for _ in range(times):
        counter.fetch_add(1)


def run(thread_count: int = 10, add_times: int = 100000) -> int:
    """Start ``thread_count`` threads that each increment ``add_times`` times."""
    counter = AtomicCounter()
    threads = [
        threading.Thread(target=increment, args=(counter, add_times))
        for _ in range(thread_count)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return counter.load()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Count from many threads at once.")
    parser.add_argument("--threads", type=int, default=10)
    parser.add_argument("--times", type=int, default=100000)
    args = parser.parse_args(argv)
    print(f"Final counter value: {run(args.threads, args.times)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())