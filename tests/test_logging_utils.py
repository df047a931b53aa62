"""Mini README: Tests for the package logger tree."""

from __future__ import annotations

import logging

from droneroute.logging_utils import PACKAGE_LOGGER, configure_logging, get_logger


def test_module_loggers_live_under_package() -> None:
    assert get_logger("droneroute.airspace.index").name == "droneroute.airspace.index"
    assert get_logger("route_planner_cli").name == "droneroute.route_planner_cli"
    assert get_logger().name == PACKAGE_LOGGER


def test_configure_logging_installs_one_handler() -> None:
    package_logger = configure_logging("DEBUG")
    handlers = list(package_logger.handlers)

    configure_logging("warning")

    assert package_logger.handlers == handlers
    assert len(handlers) == 1
    assert package_logger.level == logging.WARNING
    assert package_logger.propagate
    configure_logging("not-a-level")
    assert package_logger.level == logging.INFO
