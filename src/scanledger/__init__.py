"""scanledger - Keyboard-wedge barcode scans to an aggregated inventory ledger."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("scanledger")
except PackageNotFoundError:
    __version__ = "0+local"
from scanledger.classifier import Classification, CodeClassifier, ScanKind
from scanledger.config import ScannerConfig
from scanledger.decoding import Gs1Decoder, decode
from scanledger.exceptions import (
    DecoderRuntimeFault,
    DuplicateSubLotError,
    EmptyLocationError,
    NoActiveLocationError,
    ScanLedgerConfigError,
    ScanLedgerError,
    StoreInitError,
    StoreOperationError,
)
from scanledger.export import EXPORT_COLUMNS, ExportRow, ExportSink, export_rows
from scanledger.ledger import InventoryLedger, UpsertAction, UpsertResult
from scanledger.models import (
    ControlKey,
    DecodedItem,
    EncodingVariant,
    InventoryLine,
    MessageLevel,
    NotDecodable,
    ScanEvent,
    ScanOutcome,
    SessionContext,
    SessionSnapshot,
    SessionState,
    make_line_key,
)
from scanledger.scanner import ScanAssembler, ScannerInput
from scanledger.session import ScanSession
from scanledger.store import LineStore, MemoryLineStore

__all__ = [
    "__version__",
    "EXPORT_COLUMNS",
    "Classification",
    "CodeClassifier",
    "ControlKey",
    "DecodedItem",
    "DecoderRuntimeFault",
    "DuplicateSubLotError",
    "EmptyLocationError",
    "EncodingVariant",
    "ExportRow",
    "ExportSink",
    "Gs1Decoder",
    "InventoryLedger",
    "InventoryLine",
    "LineStore",
    "MemoryLineStore",
    "MessageLevel",
    "NoActiveLocationError",
    "NotDecodable",
    "ScanAssembler",
    "ScanEvent",
    "ScanKind",
    "ScanLedgerConfigError",
    "ScanLedgerError",
    "ScanOutcome",
    "ScanSession",
    "ScannerConfig",
    "ScannerInput",
    "SessionContext",
    "SessionSnapshot",
    "SessionState",
    "StoreInitError",
    "StoreOperationError",
    "UpsertAction",
    "UpsertResult",
    "decode",
    "export_rows",
    "make_line_key",
]
