from __future__ import annotations

import pytest

from scanledger.config import ScannerConfig
from scanledger.exceptions import ScanLedgerConfigError
from scanledger.models.scan import ControlKey
from scanledger.models.session import SessionState


def test_idle_timeout_depends_on_state() -> None:
    config = ScannerConfig(location_idle_timeout=0.3, item_idle_timeout=0.1)

    assert config.idle_timeout_for(SessionState.AWAITING_LOCATION) == 0.3
    assert config.idle_timeout_for(SessionState.AWAITING_ITEMS) == 0.1
    assert config.idle_timeout_for(SessionState.FINISHED) == 0.3


def test_finished_timeout_override() -> None:
    config = ScannerConfig(finished_idle_timeout=1.0)
    assert config.idle_timeout_for(SessionState.FINISHED) == 1.0


def test_default_item_timeout_shorter_than_location() -> None:
    config = ScannerConfig()
    assert config.item_idle_timeout < config.location_idle_timeout


@pytest.mark.parametrize(
    "kwargs",
    [
        {"item_idle_timeout": 0},
        {"location_idle_timeout": -1.0},
        {"finished_idle_timeout": 0.0},
        {"location_prefixes": ("LOCATION:",)},
        {"terminator_keys": ("Escape",)},
        {"terminator_keys": (ControlKey.BACKSPACE,)},
        {"sub_lot_width": 0},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(ScanLedgerConfigError):
        ScannerConfig(**kwargs)


def test_terminator_names_normalized() -> None:
    config = ScannerConfig(terminator_keys=("enter",))
    assert config.terminator_keys == (ControlKey.ENTER,)


def test_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SCANLEDGER_ITEM_IDLE_TIMEOUT", "0.05")
    monkeypatch.setenv("SCANLEDGER_FINISH_COMMANDS", "END, DONE")
    monkeypatch.setenv("SCANLEDGER_IGNORED_PREFIX", "TEST")

    config = ScannerConfig.from_env()

    assert config.item_idle_timeout == 0.05
    assert config.finish_commands == ("END", "DONE")
    assert config.ignored_prefix == "TEST"


def test_from_env_overrides_win(monkeypatch) -> None:
    monkeypatch.setenv("SCANLEDGER_ITEM_IDLE_TIMEOUT", "0.05")

    config = ScannerConfig.from_env(item_idle_timeout=0.2)

    assert config.item_idle_timeout == 0.2


def test_from_env_without_terminator(monkeypatch) -> None:
    monkeypatch.setenv("SCANLEDGER_USE_TERMINATOR", "no")

    config = ScannerConfig.from_env()

    assert config.terminator_keys == ()


def test_from_env_bad_number(monkeypatch) -> None:
    monkeypatch.setenv("SCANLEDGER_LOCATION_IDLE_TIMEOUT", "soon")

    with pytest.raises(ScanLedgerConfigError):
        ScannerConfig.from_env()
