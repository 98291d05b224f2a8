"""
Tracing sinks for the packers' search and split steps.

Packers never print.  They report each step to a ``Tracer`` which is
inert by default; pass a ``StepTracer`` to keep a structured record of the
search and, with ``verbose=True``, echo it to the console.

Usage:
    tracer = StepTracer(verbose=True)
    packer = GuillotinePacker(1500, 1500, 800, tracer=tracer)
    packer.insert(510, 290, 210)
    tracer.get_records()
"""

from abc import ABC, abstractmethod
from typing import List


class Tracer(ABC):
    """Receives one call per traced packer step."""

    # Packers skip computing costly event fields when this is False.
    enabled: bool = True

    @abstractmethod
    def emit(self, event: str, **fields) -> None:
        ...


class NullTracer(Tracer):
    """Discards everything.  The default sink of every packer."""

    enabled = False

    def emit(self, event: str, **fields) -> None:
        pass


class StepTracer(Tracer):
    """Stores traced steps as dicts and optionally prints them."""

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose
        self._records: List[dict] = []

    def emit(self, event: str, **fields) -> None:
        record = {"event": event}
        record.update(fields)
        self._records.append(record)

        if not self.verbose:
            return

        details = "  ".join(f"{k}={v}" for k, v in fields.items())
        print(f"  [{len(self._records):4d}] {event:<18s} {details}")

    def get_records(self) -> List[dict]:
        """All traced steps as dicts, oldest first."""
        return list(self._records)

    def events(self, name: str) -> List[dict]:
        """Only the records of one event type."""
        return [r for r in self._records if r["event"] == name]

    def clear(self) -> None:
        self._records.clear()
