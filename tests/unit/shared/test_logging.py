"""Unit tests for logging configuration."""

import json
import logging

from dcs_cli.shared.logging import configure_logging, get_logger


def test_level_from_env(monkeypatch):
    monkeypatch.setenv("DCS_LOG_LEVEL", "debug")
    configure_logging()
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_level_falls_back_to_warning():
    configure_logging(level="chatty")
    assert logging.getLogger().level == logging.WARNING


def test_json_output(capsys):
    configure_logging(level="info", json_output=True)
    get_logger("dcs_cli.test_json").info("port_resolved", service="backend", port=3000)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "port_resolved"
    assert event["port"] == 3000
