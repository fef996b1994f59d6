"""Tests for bonsaigen.logging."""

from __future__ import annotations

import io

from bonsaigen.logging import configure_logging, get_logger


def test_records_are_prefixed_with_their_stage() -> None:
    stream = io.StringIO()
    configure_logging(verbose=True, stream=stream)

    get_logger("discovery").debug("Could not resolve %s", "Broken")
    get_logger().info("Starting pass")

    assert stream.getvalue().splitlines() == [
        "[bonsaigen:discovery] DEBUG Could not resolve Broken",
        "[bonsaigen] INFO Starting pass",
    ]


def test_debug_records_are_hidden_unless_verbose() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)

    get_logger("grouping").debug("Skipping nested owner")
    get_logger("writer").info("Wrote unit")

    assert stream.getvalue() == "[bonsaigen:writer] INFO Wrote unit\n"


def test_reconfiguring_replaces_the_previous_handler() -> None:
    first = io.StringIO()
    second = io.StringIO()
    configure_logging(stream=first)
    logger = configure_logging(stream=second)

    get_logger("generator").info("once")

    assert len(logger.handlers) == 1
    assert first.getvalue() == ""
    assert second.getvalue() == "[bonsaigen:generator] INFO once\n"
