"""Translation from wire records to normalized transaction records."""

import logging
from typing import Iterable, List, Optional

from .base import DataTransformer
from ..errors import ParseError
from ..models.core import ComprehensiveTransaction, IndividualMessageTransaction
from ..models.wire import RawPage, RawTransaction, RawTransactionResult


logger = logging.getLogger(__name__)


class TransactionTranslator:
    """Builds comprehensive and per-message records from raw pages.

    Translation is pure: no I/O, no shared state. Batch methods fail fast on
    the first bad record.
    """

    def __init__(self, transformer: Optional[DataTransformer] = None):
        self.transformer = transformer or DataTransformer()

    def build_comprehensive(self, tx: RawTransaction,
                            result: RawTransactionResult) -> ComprehensiveTransaction:
        """Combine a transaction body with its execution result

        Raises:
            GasParseError: gas_used is not a non-negative integer
            TimestampParseError: timestamp is not RFC-3339
        """
        gas_used = self.transformer.normalize_gas(result.gas_used)
        timestamp = self.transformer.normalize_timestamp(result.timestamp)
        height = self.transformer.normalize_height(result.height)

        return ComprehensiveTransaction(
            messages=list(tx.messages),
            height=height,
            txhash=result.txhash,
            gas_used=gas_used,
            gas_wanted=result.gas_wanted,
            timestamp=timestamp,
            data=result.data,
            signatures=list(tx.signatures),
            memo=tx.memo,
            timeout_height=tx.timeout_height,
            code=result.code,
        )

    def explode(self, tx: ComprehensiveTransaction) -> List[IndividualMessageTransaction]:
        """One record per message, in message order"""
        return [
            IndividualMessageTransaction(
                height=tx.height,
                txhash=tx.txhash,
                message_index=index,
                message=message,
                gas_used=tx.gas_used,
                gas_wanted=tx.gas_wanted,
                timestamp=tx.timestamp,
                memo=tx.memo,
                signatures=list(tx.signatures),
                timeout_height=tx.timeout_height,
                code=tx.code,
            )
            for index, message in enumerate(tx.messages)
        ]

    def translate_page(self, page: RawPage) -> List[ComprehensiveTransaction]:
        if len(page.txs) != len(page.tx_responses):
            raise ParseError(
                f"page: txs and tx_responses are not index-aligned "
                f"({len(page.txs)} vs {len(page.tx_responses)} entries)"
            )
        return [self.build_comprehensive(tx, result) for tx, result in page.pairs()]

    def translate_pages(self, pages: Iterable[RawPage]) -> List[ComprehensiveTransaction]:
        translated = []
        for page in pages:
            translated.extend(self.translate_page(page))
        logger.debug(f"Translated {len(translated)} transactions")
        return translated

    def explode_all(self, txs: Iterable[ComprehensiveTransaction]) -> List[IndividualMessageTransaction]:
        records = []
        for tx in txs:
            records.extend(self.explode(tx))
        return records


_default_translator = TransactionTranslator()


def build_comprehensive(tx: RawTransaction, result: RawTransactionResult) -> ComprehensiveTransaction:
    return _default_translator.build_comprehensive(tx, result)


def explode(tx: ComprehensiveTransaction) -> List[IndividualMessageTransaction]:
    return _default_translator.explode(tx)


def translate_pages(pages: Iterable[RawPage]) -> List[ComprehensiveTransaction]:
    return _default_translator.translate_pages(pages)


def explode_all(txs: Iterable[ComprehensiveTransaction]) -> List[IndividualMessageTransaction]:
    return _default_translator.explode_all(txs)
