"""Tests for once-per-cause conflict reporting."""

from __future__ import annotations

from vcf_header_merge.conflicts import ConflictWarner


def test_each_cause_is_reported_once(messages, sink):
    warner = ConflictWarner(sink)

    assert warner.warn("INFO.DP:Number", "first")
    assert not warner.warn("INFO.DP:Number", "second")
    assert warner.warn("INFO.AF:Type", "third")

    assert messages == ["first", "third"]
    assert warner.issued == {"INFO.DP:Number", "INFO.AF:Type"}


def test_hundred_identical_conflicts_produce_one_message(messages, sink):
    warner = ConflictWarner(sink)

    for index in range(100):
        warner.warn("center:Value", f"conflict {index}")

    assert messages == ["conflict 0"]


def test_without_sink_warnings_are_dropped():
    warner = ConflictWarner()

    assert not warner.warn("INFO.DP:Number", "nobody listens")
    assert warner.issued == set()


def test_warners_do_not_share_state(messages, sink):
    ConflictWarner(sink).warn("cause", "one")
    ConflictWarner(sink).warn("cause", "two")

    assert messages == ["one", "two"]
