"""CLI commands for exporting and importing topic snapshots."""

import click
from tabulate import tabulate

from kafka_topic_sync.clients.admin_session import ClientConfig
from kafka_topic_sync.config import Config
from kafka_topic_sync.exceptions import TopicSyncError
from kafka_topic_sync.services.exporter import TopicExporter
from kafka_topic_sync.services.importer import ImportAction, TopicImporter, TopicImportResult

DEFAULT_SNAPSHOT_PATH = 'topics.json'


def _get_config(ctx) -> Config:
    obj = ctx.find_object(dict)
    if obj and 'config' in obj:
        return obj['config']
    return Config.from_env()


def _echo_result(result: TopicImportResult) -> None:
    if result.action == ImportAction.CREATED:
        click.echo(f"✅ Created topic: {result.name}")
    else:
        click.echo(f"⚠️  Skipped existing topic: {result.name}")


@click.command('export')
@click.option('--bootstrap', required=True, help='Kafka bootstrap server (host:port)')
@click.option('--out', 'output_path', default=DEFAULT_SNAPSHOT_PATH, show_default=True,
              type=click.Path(dir_okay=False, writable=True), help='Output snapshot file')
@click.option('--exclude-internal', type=click.BOOL, default=True, show_default=True,
              help='Exclude internal topics (names starting with "__")')
@click.pass_context
def export_cmd(ctx, bootstrap, output_path, exclude_internal):
    """Export topic definitions to a snapshot file."""
    config = _get_config(ctx)
    client_config = ClientConfig.from_kafka_config(bootstrap, config.kafka)
    exporter = TopicExporter(client_config, indent=config.snapshot.indent)

    try:
        document = exporter.export(output_path, exclude_internal=exclude_internal)
    except TopicSyncError as e:
        click.echo(f"❌ Export failed: {e}", err=True)
        ctx.exit(1)

    click.echo(f"🎉 Exported {len(document.topics)} topics to {output_path}")


@click.command('import')
@click.option('--bootstrap', required=True, help='Kafka bootstrap server (host:port)')
@click.option('--in', 'input_path', default=DEFAULT_SNAPSHOT_PATH, show_default=True,
              type=click.Path(dir_okay=False), help='Snapshot file to import')
@click.option('--if-not-exists', 'skip_if_exists', type=click.BOOL, default=True, show_default=True,
              help='Skip topics that already exist instead of failing')
@click.pass_context
def import_cmd(ctx, bootstrap, input_path, skip_if_exists):
    """Create the topics of a snapshot file on a cluster."""
    config = _get_config(ctx)
    client_config = ClientConfig.from_kafka_config(bootstrap, config.kafka)
    importer = TopicImporter(client_config)

    try:
        report = importer.import_snapshot(
            input_path, skip_if_exists=skip_if_exists, on_result=_echo_result
        )
    except TopicSyncError as e:
        click.echo(f"❌ Import failed: {e}", err=True)
        ctx.exit(1)

    if report.results:
        rows = [
            [result.name, result.topic.partitions, result.topic.replication_factor, result.action.value]
            for result in report.results
        ]
        click.echo(tabulate(rows, headers=['Topic', 'Partitions', 'Replication Factor', 'Action'],
                            tablefmt='grid'))

    click.echo(
        f"🎉 Import complete: {len(report.created)} created, {len(report.skipped)} skipped"
    )
