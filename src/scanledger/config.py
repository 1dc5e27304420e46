"""Scanner and session configuration for scanledger."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from scanledger._constants import (
    DEFAULT_CLOSE_LOCATION_COMMANDS,
    DEFAULT_FINISH_COMMANDS,
    DEFAULT_IGNORED_PREFIX,
    DEFAULT_LOCATION_PREFIXES,
    DEFAULT_SUB_LOT_WIDTH,
    LOCATION_PREFIX_LENGTH,
)
from scanledger.exceptions import ScanLedgerConfigError
from scanledger.models.scan import ControlKey
from scanledger.models.session import SessionState


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_list(value: str) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blanks."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _coerce_keys(values: Any) -> tuple[ControlKey, ...]:
    keys: list[ControlKey] = []
    for value in values:
        if isinstance(value, ControlKey):
            keys.append(value)
            continue
        try:
            keys.append(ControlKey(str(value).strip().capitalize()))
        except ValueError as exc:
            raise ScanLedgerConfigError(f"unknown terminator key: {value!r}") from exc
    return tuple(keys)


@dataclasses.dataclass(frozen=True)
class ScannerConfig:
    """Scanner and session configuration.

    Parameters
    ----------
    location_idle_timeout : float
        Seconds of silence after which a partial buffer is flushed while
        waiting for a location.  Location labels are scanned one at a
        time, so this can be relatively long.
    item_idle_timeout : float
        Same, while waiting for items.  Items are scanned in quick
        succession, so this is shorter.
    finished_idle_timeout : float or None
        Same, after the inventory was finished.  ``None`` means "use
        ``location_idle_timeout``" since the next scan re-opens the
        session as a location.
    terminator_keys : tuple of ControlKey
        Keys that flush the buffer immediately.  Empty to rely on the
        idle timer only.
    ignored_prefix : str
        Non-semantic marker some test labels carry.  Stripped when it
        prefixes a scan; a scan that is exactly the marker is dropped.
    finish_commands : tuple of str
        Scans (case-insensitive) that finish the inventory.
    close_location_commands : tuple of str
        Scans that close the current location.
    location_prefixes : tuple of str
        4-character prefixes that set the location to the remainder.
    sub_lot_width : int
        Numeric sub-lots are left-padded with zeros to this width.
    """

    location_idle_timeout: float = 0.25
    item_idle_timeout: float = 0.09
    finished_idle_timeout: float | None = None
    terminator_keys: tuple[ControlKey, ...] = (ControlKey.ENTER, ControlKey.TAB)
    ignored_prefix: str = DEFAULT_IGNORED_PREFIX
    finish_commands: tuple[str, ...] = DEFAULT_FINISH_COMMANDS
    close_location_commands: tuple[str, ...] = DEFAULT_CLOSE_LOCATION_COMMANDS
    location_prefixes: tuple[str, ...] = DEFAULT_LOCATION_PREFIXES
    sub_lot_width: int = DEFAULT_SUB_LOT_WIDTH

    def __post_init__(self) -> None:
        for name in ("location_idle_timeout", "item_idle_timeout"):
            if getattr(self, name) <= 0:
                raise ScanLedgerConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.finished_idle_timeout is not None and self.finished_idle_timeout <= 0:
            raise ScanLedgerConfigError(f"finished_idle_timeout must be positive, got {self.finished_idle_timeout}")
        if ControlKey.BACKSPACE in _coerce_keys(self.terminator_keys):
            raise ScanLedgerConfigError("Backspace cannot be a terminator key")
        # Frozen: normalize through object.__setattr__.
        object.__setattr__(self, "terminator_keys", _coerce_keys(self.terminator_keys))
        for prefix in self.location_prefixes:
            if len(prefix) != LOCATION_PREFIX_LENGTH:
                raise ScanLedgerConfigError(
                    f"location prefix must be {LOCATION_PREFIX_LENGTH} characters, got {prefix!r}"
                )
        if self.sub_lot_width < 1:
            raise ScanLedgerConfigError(f"sub_lot_width must be >= 1, got {self.sub_lot_width}")

    def idle_timeout_for(self, state: SessionState) -> float:
        """Return the idle flush delay to arm while in *state*."""
        if state is SessionState.AWAITING_ITEMS:
            return self.item_idle_timeout
        if state is SessionState.FINISHED and self.finished_idle_timeout is not None:
            return self.finished_idle_timeout
        return self.location_idle_timeout

    @classmethod
    def from_env(cls, **overrides: Any) -> ScannerConfig:
        """Create configuration from environment variables.

        Reads optional ``SCANLEDGER_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        ScannerConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        _ENV_FLOAT_MAP = {
            "SCANLEDGER_LOCATION_IDLE_TIMEOUT": "location_idle_timeout",
            "SCANLEDGER_ITEM_IDLE_TIMEOUT": "item_idle_timeout",
            "SCANLEDGER_FINISHED_IDLE_TIMEOUT": "finished_idle_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise ScanLedgerConfigError(f"{env_key} must be a number, got {val!r}") from exc

        _ENV_LIST_MAP = {
            "SCANLEDGER_TERMINATOR_KEYS": "terminator_keys",
            "SCANLEDGER_FINISH_COMMANDS": "finish_commands",
            "SCANLEDGER_CLOSE_LOCATION_COMMANDS": "close_location_commands",
            "SCANLEDGER_LOCATION_PREFIXES": "location_prefixes",
        }
        for env_key, field_name in _ENV_LIST_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_list(val)

        # An explicit "no terminator" switch reads better than an empty list.
        if "terminator_keys" not in overrides and not _env_bool(env.get("SCANLEDGER_USE_TERMINATOR"), True):
            config_kwargs["terminator_keys"] = ()

        prefix_env = env.get("SCANLEDGER_IGNORED_PREFIX")
        if prefix_env is not None and "ignored_prefix" not in overrides:
            config_kwargs["ignored_prefix"] = prefix_env.strip()

        width_env = env.get("SCANLEDGER_SUB_LOT_WIDTH")
        if width_env is not None and "sub_lot_width" not in overrides:
            config_kwargs["sub_lot_width"] = int(width_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
