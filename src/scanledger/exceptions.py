"""Custom exception hierarchy for scanledger."""

from __future__ import annotations


class ScanLedgerError(Exception):
    """Base exception for all scanledger errors."""


class ScanLedgerConfigError(ScanLedgerError):
    """Invalid or missing configuration."""


class EmptyLocationError(ScanLedgerError):
    """A location candidate was empty or whitespace only."""


class NoActiveLocationError(ScanLedgerError):
    """An item was written while no location is active."""


class DuplicateSubLotError(ScanLedgerError):
    """An item carrying a sub-lot was scanned a second time.

    Lines with a sub-lot are unique per key; the second write is
    rejected instead of being aggregated.
    """

    def __init__(self, message: str, *, key: str = "") -> None:
        self.key = key
        super().__init__(message)


class DecoderRuntimeFault(ScanLedgerError):
    """A decoding strategy raised unexpectedly.

    This is distinct from a payload that simply does not decode, which
    is reported as :class:`~scanledger.models.item.NotDecodable`.
    """

    def __init__(self, message: str, *, strategy: str = "") -> None:
        self.strategy = strategy
        super().__init__(message)


class StoreOperationError(ScanLedgerError):
    """The storage collaborator failed during a get/put/delete/clear.

    The message is the store's own error text. Nothing was committed.
    """

    def __init__(self, message: str, *, operation: str = "") -> None:
        self.operation = operation
        super().__init__(message)


class StoreInitError(ScanLedgerError):
    """The storage collaborator could not be initialized at startup.

    Unlike per-scan errors this one is fatal: the session refuses to
    process anything until a store opens successfully.
    """
