"""GS1-like payload decoding.

:class:`Gs1Decoder` normalizes a scan and runs the strategies from
:mod:`scanledger.decoding.strategies` in order.  The result is always a
:class:`~scanledger.models.item.DecodedItem` or a
:class:`~scanledger.models.item.NotDecodable`; a strategy that raises is
reported as :class:`~scanledger.exceptions.DecoderRuntimeFault`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from scanledger._constants import DEFAULT_SUB_LOT_WIDTH
from scanledger.decoding.normalize import normalize_payload, pad_sub_lot
from scanledger.decoding.strategies import (
    ConcatenatedStrategy,
    ControlSeparatedStrategy,
    DecodeStrategy,
    GlyphSeparatedStrategy,
    ParenthesizedStrategy,
    default_strategies,
)
from scanledger.exceptions import DecoderRuntimeFault
from scanledger.models.item import DecodeResult, NotDecodable

_logger = logging.getLogger(__name__)


class Gs1Decoder:
    """Ordered chain of decoding strategies."""

    def __init__(
        self,
        *,
        sub_lot_width: int = DEFAULT_SUB_LOT_WIDTH,
        strategies: Sequence[DecodeStrategy] | None = None,
    ) -> None:
        if strategies is None:
            strategies = default_strategies(sub_lot_width=sub_lot_width)
        self._strategies: tuple[DecodeStrategy, ...] = tuple(strategies)

    @property
    def strategies(self) -> tuple[DecodeStrategy, ...]:
        return self._strategies

    def decode(self, raw_input: str) -> DecodeResult:
        """Decode *raw_input*, or return :class:`NotDecodable`.

        Raises :class:`DecoderRuntimeFault` if a strategy fails with an
        unexpected exception.
        """
        text = normalize_payload(raw_input)
        if not text:
            return NotDecodable(raw_input=raw_input)

        for strategy in self._strategies:
            try:
                item = strategy.decode(text, raw_input)
            except Exception as exc:
                raise DecoderRuntimeFault(
                    f"{strategy.variant} decoder failed: {exc}",
                    strategy=str(strategy.variant),
                ) from exc
            if item is not None:
                _logger.debug("Decoded payload as %s ref=%s", strategy.variant, item.reference)
                return item

        _logger.debug("Payload not decodable: %r", raw_input)
        return NotDecodable(raw_input=raw_input)


_DEFAULT_DECODER = Gs1Decoder()


def decode(raw_input: str) -> DecodeResult:
    """Decode with the default strategy chain."""
    return _DEFAULT_DECODER.decode(raw_input)


__all__ = [
    "ConcatenatedStrategy",
    "ControlSeparatedStrategy",
    "DecodeStrategy",
    "GlyphSeparatedStrategy",
    "Gs1Decoder",
    "ParenthesizedStrategy",
    "decode",
    "default_strategies",
    "normalize_payload",
    "pad_sub_lot",
]
