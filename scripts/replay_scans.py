#!/usr/bin/env python3
"""Replay recorded scans through a session and export the result.

Each input line is one scan, exactly as the scanner produced it.  With
``--escapes`` backslash sequences such as ``\\x1d`` are decoded first,
so control-separated payloads can be kept in a plain text file.

Usage
-----
::

    python scripts/replay_scans.py scans.txt
    python scripts/replay_scans.py scans.txt --escapes --json --output inventory.json
    python scripts/replay_scans.py - --keystrokes < scans.txt

Options::

    --escapes          Decode backslash escapes in each line
    --keystrokes       Type each line through the keystroke assembler
                       (idle-timer framing) instead of handing it over whole
    --json             Output rows as JSON instead of CSV
    --output FILE      Write rows to FILE instead of stdout
    --quiet            Do not print session messages to stderr
    --verbose          Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from scanledger import (  # noqa: E402
    EXPORT_COLUMNS,
    ExportRow,
    MemoryLineStore,
    ScannerConfig,
    ScannerInput,
    ScanOutcome,
    ScanSession,
)

# ── helpers ──────────────────────────────────────────────────


def _decode_escapes(line: str) -> str:
    return line.encode("latin-1", "backslashreplace").decode("unicode_escape")


def _read_scans(source: TextIO, *, escapes: bool) -> list[str]:
    scans: list[str] = []
    for line in source:
        text = line.rstrip("\r\n")
        if not text:
            continue
        scans.append(_decode_escapes(text) if escapes else text)
    return scans


class _CollectingSink:
    """Export sink that keeps the rows for the caller to format."""

    def __init__(self) -> None:
        self.rows: list[ExportRow] = []

    def export_rows(self, rows: Sequence[ExportRow]) -> None:
        self.rows = list(rows)


def _write_csv(rows: list[ExportRow], out: TextIO) -> None:
    writer = csv.DictWriter(out, fieldnames=list(EXPORT_COLUMNS))
    writer.writeheader()
    for row in rows:
        writer.writerow(row.as_record())


def _write_json(rows: list[ExportRow], out: TextIO) -> None:
    json.dump([row.as_record() for row in rows], out, indent=2, ensure_ascii=False)
    out.write("\n")


def _print_outcome(outcome: ScanOutcome) -> None:
    print(f"[{outcome.level}] {outcome.message}", file=sys.stderr)


# ── main ─────────────────────────────────────────────────────


async def replay(scans: list[str], *, keystrokes: bool, quiet: bool) -> list[ExportRow]:
    config = ScannerConfig.from_env()
    sink = _CollectingSink()
    on_message = None if quiet else _print_outcome

    async with ScanSession(MemoryLineStore(), config=config, on_message=on_message) as session:
        if keystrokes:
            async with ScannerInput(session) as scanner:
                for scan in scans:
                    scanner.feed(scan)
                    # No terminator: let the state-dependent idle timer close the scan.
                    await asyncio.sleep(config.idle_timeout_for(session.state) * 2)
                    await scanner.drain()
        else:
            for scan in scans:
                await session.handle_scan(scan)
        await session.export(sink)
    return sink.rows


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay recorded scans and export the inventory.")
    parser.add_argument("input", help="File with one scan per line, or '-' for stdin")
    parser.add_argument("--escapes", action="store_true", help="Decode backslash escapes in each line")
    parser.add_argument("--keystrokes", action="store_true", help="Type scans through the keystroke assembler")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output JSON instead of CSV")
    parser.add_argument("--output", "-o", type=Path, help="Write output to FILE")
    parser.add_argument("--quiet", "-q", action="store_true", help="Do not print session messages")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable DEBUG logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.input == "-":
        scans = _read_scans(sys.stdin, escapes=args.escapes)
    else:
        with open(args.input, encoding="utf-8") as fh:
            scans = _read_scans(fh, escapes=args.escapes)

    rows = asyncio.run(replay(scans, keystrokes=args.keystrokes, quiet=args.quiet))

    writer = _write_json if args.json_mode else _write_csv
    if args.output:
        with open(args.output, "w", encoding="utf-8", newline="") as out:
            writer(rows, out)
        print(f"Wrote {len(rows)} rows to {args.output}", file=sys.stderr)
    else:
        writer(rows, sys.stdout)


if __name__ == "__main__":
    main()
