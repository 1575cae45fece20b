"""
Tests for CLI commands.
"""

from __future__ import annotations

import json
import sys
from unittest.mock import patch

import pytest
from conftest import FakeTransport
from loguru import logger
from typer.testing import CliRunner

from hostwallet.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    # setup_logging() points loguru at the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def patched_transport(transport: FakeTransport):
    with patch("hostwallet.cli.HttpTransport", return_value=transport):
        yield transport


def test_info(patched_transport: FakeTransport, wallet_json: dict) -> None:
    result = runner.invoke(app, ["info", "--wallet", wallet_json["id"]])

    assert result.exit_code == 0
    assert "test wallet" in result.output
    assert "5,000,000 sats" in result.output
    assert patched_transport.closed


def test_keychain(patched_transport: FakeTransport, wallet_json: dict) -> None:
    result = runner.invoke(app, ["keychain", "-w", wallet_json["id"]])

    assert result.exit_code == 0
    assert result.output.strip() == "xpub1"


def test_unspents(patched_transport: FakeTransport, wallet_json: dict) -> None:
    path = f"/wallet/{wallet_json['id']}/unspents"
    patched_transport.responses[("GET", path)] = {"unspents": [{"value": 1}]}

    result = runner.invoke(app, ["unspents", "-w", wallet_json["id"]])

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"value": 1}]


def test_broadcast(patched_transport: FakeTransport, wallet_json: dict) -> None:
    result = runner.invoke(app, ["broadcast", "deadbeef", "-w", wallet_json["id"], "-l", "WARNING"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"hash": "h1", "tx": "deadbeef"}


def test_unknown_wallet_exits_with_error(patched_transport: FakeTransport) -> None:
    result = runner.invoke(app, ["info", "-w", "2Munknown"])
    assert result.exit_code == 1


def test_wallet_required() -> None:
    result = runner.invoke(app, ["info"], env={"HOSTWALLET_WALLET_ID": ""})
    assert result.exit_code != 0
