"""
Data models for failures extracted from JUnit reports.
"""

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class FailureRecord:
    """One failure or error reported for a single test case execution.

    Records sort by class name, then test name. Two records with the same
    class and test name are equivalent for sorting even when their other
    fields differ.
    """
    test_name: str
    display_name: str
    class_name: str
    failure_type: str
    failure_message: str
    stack_trace: str = ""
    time: float = 0.0

    def __post_init__(self):
        if self.test_name is None:
            raise ValueError("Test name cannot be None")
        if self.class_name is None:
            raise ValueError("Class name cannot be None")
        if self.failure_type is None:
            raise ValueError("Failure type cannot be None")
        if self.failure_message is None:
            raise ValueError("Failure message cannot be None")
        if self.stack_trace is None:
            object.__setattr__(self, "stack_trace", "")
        if self.display_name is None:
            object.__setattr__(self, "display_name", "")
        if self.time < 0:
            raise ValueError("Time cannot be negative")

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.class_name, self.test_name)

    def __lt__(self, other):
        if not isinstance(other, FailureRecord):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __le__(self, other):
        if not isinstance(other, FailureRecord):
            return NotImplemented
        return self.sort_key <= other.sort_key

    def __gt__(self, other):
        if not isinstance(other, FailureRecord):
            return NotImplemented
        return self.sort_key > other.sort_key

    def __ge__(self, other):
        if not isinstance(other, FailureRecord):
            return NotImplemented
        return self.sort_key >= other.sort_key


class ClassFailureGroup:
    """All failures reported for one test class.

    Safe to fill from several threads. The failure count and total time are
    kept alongside the list and updated under the same lock, so a reader never
    sees them disagree. Sorting is deferred until the failures are read or
    ``sort_failures()`` is called.
    """

    def __init__(self, class_name: str):
        if class_name is None:
            raise ValueError("Class name cannot be None")
        self._class_name = class_name
        self._failures: list[FailureRecord] = []
        self._lock = threading.Lock()
        self._is_sorted = True  # empty list is sorted
        self._total_failures = 0
        self._total_time = 0.0

    @property
    def class_name(self) -> str:
        return self._class_name

    def add_failure(self, failure: FailureRecord) -> None:
        """Append a failure and update the running totals."""
        if failure is None:
            raise ValueError("Failure cannot be None")
        with self._lock:
            self._failures.append(failure)
            self._total_failures += 1
            self._total_time += failure.time
            self._is_sorted = False

    def sort_failures(self) -> None:
        """Sort the stored failures if anything was added since the last sort."""
        with self._lock:
            self._sort_locked()

    def _sort_locked(self) -> None:
        if not self._is_sorted:
            self._failures.sort(key=lambda f: f.sort_key)
            self._is_sorted = True

    @property
    def failures(self) -> list[FailureRecord]:
        """Sorted copy of the failures added so far."""
        with self._lock:
            self._sort_locked()
            return list(self._failures)

    @property
    def total_failures(self) -> int:
        with self._lock:
            return self._total_failures

    @property
    def total_time(self) -> float:
        with self._lock:
            return self._total_time

    def __eq__(self, other):
        if self is other:
            return True
        if not isinstance(other, ClassFailureGroup):
            return NotImplemented
        return self._class_name == other._class_name

    def __hash__(self):
        return hash(self._class_name)

    def __repr__(self):
        with self._lock:
            return (f"ClassFailureGroup(class_name={self._class_name!r}, "
                    f"total_failures={self._total_failures}, total_time={self._total_time})")


# Class name -> group, in ascending class name order.
GroupedFailures = dict[str, ClassFailureGroup]
