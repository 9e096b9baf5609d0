"""Command-line interface for the transaction dump tool."""

import sys
import click
from dataclasses import replace
from typing import Optional, Sequence
import logging

from .api.fetcher import PageFetcher, create_session
from .api.orchestrator import RangeOrchestrator, build_strategy
from .errors import TxDumpError
from .models.core import SortField, VALID_STRATEGIES
from .models.wire import MessageType
from .parsers.translator import TransactionTranslator
from .utils.config_manager import ConfigManager
from .utils.csv_writer import CSVWriter
from .utils.display import render_table
from .utils.error_handler import ErrorCategory, ErrorHandler, handle_pipeline_error
from .utils.query import filter_by_type, sort_by


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class TxDumpCLI:
    """Main CLI class wiring configuration, fetching, querying and export"""

    def __init__(self, config_path: Optional[str] = None, strategy: Optional[str] = None):
        """Initialize CLI with configuration"""
        self.config_manager = ConfigManager(config_path)
        self.config = self.config_manager.load_config()
        if strategy:
            self.config = replace(self.config, strategy=strategy)

        self.error_handler = ErrorHandler(log_directory=self.config.log_directory)
        self.translator = TransactionTranslator()
        self.fetcher = PageFetcher(self.config, session=create_session(self.config),
                                   translator=self.translator)
        self.orchestrator = RangeOrchestrator(self.fetcher, build_strategy(self.config))
        self.csv_writer = CSVWriter(self.config)

    def query_hash(self, txhash: str, simplified: bool = False) -> list:
        if simplified:
            return [self.fetcher.fetch_by_hash(txhash)]
        return self.fetcher.fetch_by_hash_comprehensive(txhash)

    def query_height(self, height: int, simplified: bool = False) -> list:
        if simplified:
            return self.fetcher.fetch_height(height)
        return self.fetcher.fetch_height_comprehensive(height)

    def query_range(self, start: int, end: int, simplified: bool = False) -> list:
        if simplified:
            return self.orchestrator.fetch_range(start, end)
        return self.orchestrator.fetch_range_comprehensive(start, end)

    def query_messages(self,
                       start: int,
                       end: Optional[int] = None,
                       message_type: Optional[MessageType] = None,
                       sort_field: Optional[SortField] = None,
                       ascending: bool = True) -> list:
        """Individual message records for a height or a height range"""
        if end is None:
            records = self.translator.explode_all(self.fetcher.fetch_height_comprehensive(start))
        else:
            records = self.orchestrator.fetch_range_individual(start, end)

        if message_type is not None:
            records = filter_by_type(records, message_type)
        if sort_field is not None:
            sort_by(records, sort_field, ascending)
        return records

    def export(self, records: Sequence, dump_csv: bool, kind: str,
               start: int, end: Optional[int] = None) -> Optional[str]:
        """Write the CSV dump when requested; returns the written path"""
        if not dump_csv:
            return None

        output_path = self.csv_writer.create_unique_filename(
            self.csv_writer.generate_output_path(kind, start, end)
        )
        if not self.csv_writer.write_records(records, output_path):
            self.error_handler.log_error(
                f"Failed to write CSV dump {output_path}",
                "OUTPUT_WRITE_ERROR",
                ErrorCategory.OUTPUT,
                context={'records': len(records)}
            )
            return None

        self.error_handler.log_info(f"Wrote {len(records)} records to {output_path}")
        return output_path


def _parse_message_type(ctx, param, value) -> Optional[MessageType]:
    if value is None:
        return None
    try:
        return MessageType.from_string(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


def _parse_sort_field(ctx, param, value) -> Optional[SortField]:
    if value is None:
        return None
    return SortField.from_string(value)


def _cli_instance(ctx, strategy: Optional[str] = None) -> TxDumpCLI:
    """Build the CLI facade on first use, or again when a strategy override is given"""
    if ctx.obj.get('cli') is None or strategy:
        ctx.obj['cli'] = TxDumpCLI(ctx.obj.get('config_path'), strategy=strategy)
    return ctx.obj['cli']


def _run(cli_instance: TxDumpCLI, action, title: str, dump_csv: bool, kind: str,
         start: int, end: Optional[int] = None):
    """Execute a query, print the table and the CSV location, exit 1 on failure"""

    try:
        records = action(cli_instance)
    except (TxDumpError, ValueError) as e:
        if isinstance(e, TxDumpError):
            handle_pipeline_error(cli_instance.error_handler, e)
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    if not records:
        cli_instance.error_handler.log_warning(f"No records found for {title}", "NO_RECORDS")

    click.echo(render_table(records, title=title))

    output_file = cli_instance.export(records, dump_csv, kind, start, end)
    if dump_csv:
        if output_file is None:
            click.echo("✗ Failed to write CSV dump", err=True)
            sys.exit(1)
        click.echo(f"✓ CSV written: {output_file}")


sort_options = [
    click.option('--sort-by', 'sort_field', type=click.Choice(['timestamp', 'gas-used', 'height']),
                 callback=_parse_sort_field, help='Sort messages by this field'),
    click.option('--descending', is_flag=True, help='Sort in descending order'),
    click.option('--filter-by-msgtype', 'message_type', callback=_parse_message_type,
                 help='Only keep messages of this type (send, delegate, transfer, other)'),
]


def with_sort_options(func):
    for option in reversed(sort_options):
        func = option(func)
    return func


# CLI Commands using Click
@click.group()
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Cosmos transaction dump - query, normalize and export chain transactions"""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['cli'] = None


@cli.command('query-tx-hash')
@click.argument('txhash')
@click.option('--simplified', '-s', is_flag=True, help='Show the raw page instead of translated records')
@click.pass_context
def query_tx_hash(ctx, txhash, simplified):
    """Query a single transaction by hash"""
    click.echo(f"Querying transaction with hash: {txhash}")
    _run(_cli_instance(ctx), lambda c: c.query_hash(txhash, simplified), f"tx {txhash}", False, 'tx', 0)


@cli.group('query-tx-at-height')
def query_tx_at_height():
    """Query transactions included at one height"""


@query_tx_at_height.command('tx-details')
@click.argument('height', type=click.IntRange(min=0))
@click.option('--simplified', '-s', is_flag=True, help='Show raw pages instead of translated records')
@click.option('--dump-csv', '-d', is_flag=True, help='Dump the records to CSV')
@click.pass_context
def tx_details_at_height(ctx, height, simplified, dump_csv):
    """Bundled transactions at HEIGHT"""
    _run(_cli_instance(ctx), lambda c: c.query_height(height, simplified), f"transactions at {height}",
         dump_csv, 'tx', height)


@query_tx_at_height.command('msg-details')
@click.argument('height', type=click.IntRange(min=0))
@click.option('--dump-csv', '-d', is_flag=True, help='Dump the records to CSV')
@with_sort_options
@click.pass_context
def msg_details_at_height(ctx, height, dump_csv, sort_field, descending, message_type):
    """Individual messages at HEIGHT"""
    _run(_cli_instance(ctx),
         lambda c: c.query_messages(height, None, message_type, sort_field, not descending),
         f"messages at {height}", dump_csv, 'msg', height)


@cli.group('query-tx-for-range-height')
def query_tx_for_range_height():
    """Query transactions over an inclusive height range"""


@query_tx_for_range_height.command('tx-details')
@click.argument('from_height', type=click.IntRange(min=0))
@click.argument('to_height', type=click.IntRange(min=0))
@click.option('--simplified', '-s', is_flag=True, help='Show raw pages instead of translated records')
@click.option('--dump-csv', '-d', is_flag=True, help='Dump the records to CSV')
@click.option('--strategy', type=click.Choice(VALID_STRATEGIES), help='Override the configured fetch strategy')
@click.pass_context
def tx_details_for_range(ctx, from_height, to_height, simplified, dump_csv, strategy):
    """Bundled transactions from FROM_HEIGHT to TO_HEIGHT"""
    _run(_cli_instance(ctx, strategy), lambda c: c.query_range(from_height, to_height, simplified),
         f"transactions {from_height}..{to_height}", dump_csv, 'tx', from_height, to_height)


@query_tx_for_range_height.command('msg-details')
@click.argument('from_height', type=click.IntRange(min=0))
@click.argument('to_height', type=click.IntRange(min=0))
@click.option('--dump-csv', '-d', is_flag=True, help='Dump the records to CSV')
@click.option('--strategy', type=click.Choice(VALID_STRATEGIES), help='Override the configured fetch strategy')
@with_sort_options
@click.pass_context
def msg_details_for_range(ctx, from_height, to_height, dump_csv, strategy, sort_field, descending, message_type):
    """Individual messages from FROM_HEIGHT to TO_HEIGHT"""
    _run(_cli_instance(ctx, strategy),
         lambda c: c.query_messages(from_height, to_height, message_type, sort_field, not descending),
         f"messages {from_height}..{to_height}", dump_csv, 'msg', from_height, to_height)


@cli.command('init-config')
@click.argument('output_path', default='txdump_config.json')
@click.option('--format', type=click.Choice(['json', 'yaml']), default='json', help='Configuration file format')
@click.pass_context
def init_config(ctx, output_path, format):
    """Generate configuration file template"""
    cli_instance = _cli_instance(ctx)

    if cli_instance.config_manager.generate_config_template(output_path, format):
        click.echo(f"✓ Configuration template generated: {output_path}")
    else:
        click.echo("✗ Failed to generate configuration template", err=True)
        sys.exit(1)


if __name__ == '__main__':
    cli()
