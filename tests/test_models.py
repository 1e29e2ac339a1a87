"""Tests for FailureRecord and ClassFailureGroup."""

import random
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from junit_reporter.models import ClassFailureGroup, FailureRecord


def make_failure(test_name="testMethod", class_name="TestClass", time=0.1, **kwargs):
    fields = dict(
        test_name=test_name,
        display_name="",
        class_name=class_name,
        failure_type="AssertionError",
        failure_message="Test failed",
        stack_trace="",
        time=time,
    )
    fields.update(kwargs)
    return FailureRecord(**fields)


# ---------------------------------------------------------------------------
# FailureRecord
# ---------------------------------------------------------------------------


def test_failure_record_fields():
    failure = FailureRecord("testMethod", "Test Method", "TestClass", "AssertionError",
                            "Test failed", "at line 1", 1.5)

    assert failure.test_name == "testMethod"
    assert failure.display_name == "Test Method"
    assert failure.class_name == "TestClass"
    assert failure.failure_type == "AssertionError"
    assert failure.failure_message == "Test failed"
    assert failure.stack_trace == "at line 1"
    assert failure.time == 1.5


@pytest.mark.parametrize("field", ["test_name", "class_name", "failure_type", "failure_message"])
def test_failure_record_rejects_none(field):
    with pytest.raises(ValueError, match="cannot be None"):
        make_failure(**{field: None})


def test_failure_record_allows_empty_strings():
    failure = make_failure(test_name="", class_name="", failure_type="", failure_message="")
    assert failure.test_name == ""
    assert failure.class_name == ""


def test_failure_record_none_stack_trace_becomes_empty():
    assert make_failure(stack_trace=None).stack_trace == ""


def test_failure_record_none_display_name_becomes_empty():
    assert make_failure(display_name=None).display_name == ""


def test_failure_record_rejects_negative_time():
    with pytest.raises(ValueError, match="Time cannot be negative"):
        make_failure(time=-0.001)


def test_failure_record_zero_time_allowed():
    assert make_failure(time=0.0).time == 0.0


def test_failure_record_is_immutable():
    failure = make_failure()
    with pytest.raises(AttributeError):
        failure.test_name = "other"


def test_failure_record_orders_by_class_then_test_name():
    a1 = make_failure(test_name="alpha", class_name="A")
    a2 = make_failure(test_name="beta", class_name="A")
    b1 = make_failure(test_name="aardvark", class_name="B")

    assert a1 < a2 < b1
    assert b1 > a2 > a1
    assert sorted([b1, a2, a1]) == [a1, a2, b1]


def test_failure_record_same_key_compares_equivalent():
    first = make_failure(failure_message="first", time=1.0)
    second = make_failure(failure_message="second", time=2.0)

    assert not first < second
    assert not second < first
    assert first <= second and first >= second
    # equality still looks at every field
    assert first != second


def test_failure_record_comparison_with_other_type():
    with pytest.raises(TypeError):
        make_failure() < "TestClass"


# ---------------------------------------------------------------------------
# ClassFailureGroup
# ---------------------------------------------------------------------------


def test_group_starts_empty():
    group = ClassFailureGroup("TestClass")

    assert group.class_name == "TestClass"
    assert group.failures == []
    assert group.total_failures == 0
    assert group.total_time == 0.0


def test_group_rejects_none_class_name():
    with pytest.raises(ValueError):
        ClassFailureGroup(None)


def test_group_add_failure_rejects_none():
    group = ClassFailureGroup("TestClass")
    with pytest.raises(ValueError, match="Failure cannot be None"):
        group.add_failure(None)
    assert group.total_failures == 0


def test_group_accumulates_count_and_time():
    group = ClassFailureGroup("TestClass")
    group.add_failure(make_failure("t1", time=1.25))
    group.add_failure(make_failure("t2", time=0.5))

    assert group.total_failures == 2
    assert group.total_time == pytest.approx(1.75)


def test_group_failures_sorted_on_read():
    group = ClassFailureGroup("C")
    for name in ["zebra", "alpha", "beta"]:
        group.add_failure(make_failure(name, class_name="C"))

    assert [f.test_name for f in group.failures] == ["alpha", "beta", "zebra"]


def test_group_failures_returns_copy():
    group = ClassFailureGroup("C")
    group.add_failure(make_failure("one", class_name="C"))

    snapshot = group.failures
    snapshot.clear()

    assert len(group.failures) == 1


def test_group_resorts_after_new_failures():
    group = ClassFailureGroup("C")
    group.add_failure(make_failure("m", class_name="C"))
    assert [f.test_name for f in group.failures] == ["m"]

    group.add_failure(make_failure("a", class_name="C"))
    assert [f.test_name for f in group.failures] == ["a", "m"]


def test_group_sort_is_idempotent():
    group = ClassFailureGroup("C")
    for name in ["c", "a", "b"]:
        group.add_failure(make_failure(name, class_name="C"))

    group.sort_failures()
    once = group.failures
    group.sort_failures()
    group.sort_failures()

    assert group.failures == once


def test_group_keeps_duplicate_keys():
    group = ClassFailureGroup("C")
    group.add_failure(make_failure("same", class_name="C", failure_type="failure"))
    group.add_failure(make_failure("same", class_name="C", failure_type="error"))

    assert group.total_failures == 2
    assert {f.failure_type for f in group.failures} == {"failure", "error"}


def test_group_equality_by_class_name_only():
    first = ClassFailureGroup("TestClass")
    second = ClassFailureGroup("TestClass")
    second.add_failure(make_failure())

    assert first == second
    assert hash(first) == hash(second)
    assert first != ClassFailureGroup("Other")
    assert first != "TestClass"


def test_group_repr():
    group = ClassFailureGroup("TestClass")
    group.add_failure(make_failure(time=2.0))

    assert repr(group) == "ClassFailureGroup(class_name='TestClass', total_failures=1, total_time=2.0)"


def test_group_concurrent_adds_are_not_lost():
    group = ClassFailureGroup("C")
    failures = [make_failure(f"test{i:04d}", class_name="C", time=i / 1000) for i in range(2000)]
    random.Random(7).shuffle(failures)

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(group.add_failure, failures))

    assert group.total_failures == 2000
    assert group.total_time == pytest.approx(sum(f.time for f in failures))
    names = [f.test_name for f in group.failures]
    assert names == sorted(names)
    assert len(names) == 2000


def test_group_reads_stay_consistent_during_concurrent_adds():
    group = ClassFailureGroup("C")
    stop = threading.Event()
    problems = []

    def writer(offset):
        for i in range(500):
            group.add_failure(make_failure(f"t{offset}-{i}", class_name="C", time=1.0))

    def reader():
        while not stop.is_set():
            failures = group.failures
            if [f.sort_key for f in failures] != sorted(f.sort_key for f in failures):
                problems.append("unsorted read")

    reader_thread = threading.Thread(target=reader)
    reader_thread.start()
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for t in writers:
        t.start()
    for t in writers:
        t.join()
    stop.set()
    reader_thread.join()

    assert problems == []
    assert group.total_failures == 2000
    assert group.total_time == 2000.0
    assert len(group.failures) == 2000
