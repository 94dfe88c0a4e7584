"""Main CLI entry point for Kafka Topic Sync."""

import sys

import click

from kafka_topic_sync import __version__
from kafka_topic_sync.cli.sync_commands import export_cmd, import_cmd
from kafka_topic_sync.config import Config
from kafka_topic_sync.exceptions import TopicSyncError
from kafka_topic_sync.logging_config import setup_logging


@click.group(invoke_without_command=True)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.version_option(__version__, prog_name='kafka-topic-sync')
@click.pass_context
def cli(ctx, verbose):
    """Kafka Topic Sync - export topic definitions and re-create them elsewhere.

    \b
    Examples:
      kafka-topic-sync export --bootstrap broker:9092
      kafka-topic-sync import --bootstrap broker:9092 --in topics.json
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_usage(), err=True)
        click.echo("Commands: export, import", err=True)
        ctx.exit(1)

    try:
        config = Config.from_env()
    except TopicSyncError as e:
        click.echo(f"❌ Invalid configuration: {e}", err=True)
        ctx.exit(1)

    setup_logging(config.logging, verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj['config'] = config


cli.add_command(export_cmd, name='export')
cli.add_command(import_cmd, name='import')


def main():
    """Main entry point."""
    try:
        cli(prog_name='kafka-topic-sync')
    except KeyboardInterrupt:
        click.echo("\n👋 Operation cancelled by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
