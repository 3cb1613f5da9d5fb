"""Tests for the per-request run log."""

import logging
from zoneinfo import ZoneInfo

from run_log import RunLog


def test_entries_are_formatted_and_ordered():
    run_log = RunLog("%Y", ZoneInfo("UTC"))

    run_log.append("first")
    run_log.append("second", "error")

    lines = run_log.lines()
    assert len(run_log) == 2
    assert lines[0].endswith(" --- INFO: first")
    assert lines[1].endswith(" --- ERROR: second")
    assert lines[0][:4].isdigit()


def test_count_matches_message_text():
    run_log = RunLog("%Y", ZoneInfo("UTC"))
    run_log.append("No commit data in request.")
    run_log.append("something else")

    assert run_log.count("No commit data") == 1


def test_entries_are_mirrored_to_service_log(caplog):
    run_log = RunLog("%Y", ZoneInfo("UTC"))

    with caplog.at_level(logging.INFO, logger="run_log"):
        run_log.append("Pulling in changes... ")
        run_log.append("hook failed", "ERROR")

    assert [(r.levelname, r.getMessage()) for r in caplog.records] == [
        ("INFO", "Pulling in changes... "),
        ("ERROR", "hook failed"),
    ]
