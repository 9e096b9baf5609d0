"""Response parsers and record translators"""

from .base import ResponseParser, DataTransformer
from .page_parser import PageParser, SingleTransactionParser, parse_page, parse_single
from .translator import TransactionTranslator, build_comprehensive, explode, explode_all, translate_pages

__all__ = [
    'ResponseParser',
    'DataTransformer',
    'PageParser',
    'SingleTransactionParser',
    'parse_page',
    'parse_single',
    'TransactionTranslator',
    'build_comprehensive',
    'explode',
    'explode_all',
    'translate_pages',
]
