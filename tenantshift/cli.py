"""tenantshift CLI tool."""

import asyncio
import logging
import sys

import click

from tenantshift import __version__
from tenantshift.core.client import S3ClientManager
from tenantshift.core.exceptions import TenantShiftError
from tenantshift.core.models import TenantContext
from tenantshift.core.settings import TenantShiftSettings
from tenantshift.core.store import S3DataStore
from tenantshift.migrations.base import Migration
from tenantshift.migrations.registry import get_strategy, load_strategies

SHARED_NAMESPACE = "_console"


@click.group()
@click.version_option(__version__, prog_name="tenantshift")
def cli():
    """tenantshift CLI - Migrate tenant data between releases."""
    pass


@cli.command()
def versions():
    """List release versions and the strategy that migrates to each."""
    for version, identifier in Migration.versions.items():
        click.echo(f"{version}\t{identifier}")


@cli.command()
@click.option("--tenant", "tenant_id", required=True, help="Tenant (project) ID to migrate")
@click.option("--version", "target_version", required=True, help="Release version to migrate to")
@click.option(
    "--strategies",
    required=True,
    type=click.Path(exists=True),
    help="Python file or directory with Migration subclasses",
)
@click.option("--bucket", required=True, help="S3 bucket name")
@click.option("--endpoint", help="S3 endpoint URL (for LocalStack)")
@click.option("--base-path", default="tenantshift-data/", help="S3 base path for data")
@click.option(
    "--collections",
    "collections_file",
    type=click.Path(exists=True),
    help="JSON file with the collection-schema registry",
)
@click.option("--page-limit", type=int, help="Records per page")
def migrate(tenant_id, target_version, strategies, bucket, endpoint, base_path, collections_file, page_limit):
    """Run the migration for one tenant."""
    overrides = {"aws_bucket_name": bucket, "base_path": base_path}
    if endpoint:
        overrides["aws_url"] = endpoint
    if collections_file:
        overrides["collections_file"] = collections_file
    if page_limit:
        overrides["page_limit"] = page_limit

    try:
        settings = TenantShiftSettings(**overrides)
        logging.basicConfig(
            level=settings.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        strategy_class = get_strategy(target_version, load_strategies(strategies))
        migration = strategy_class(settings=settings)
    except TenantShiftError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    async def _run():
        manager = S3ClientManager(settings)
        async with manager.get_async_client() as client:
            await manager.ensure_bucket_exists(client)
            tenant_store = S3DataStore(
                client,
                bucket,
                database=settings.db_schema,
                base_path=settings.base_path,
                authorization=False,
            )
            shared_store = S3DataStore(
                client,
                bucket,
                database=settings.db_schema,
                base_path=settings.base_path,
                authorization=False,
            )
            shared_store.set_namespace(SHARED_NAMESPACE)

            migration.bind(
                TenantContext(
                    tenant_id=tenant_id,
                    tenant_store=tenant_store,
                    shared_store=shared_store,
                )
            )
            await migration.execute()

    click.echo(f"Migrating tenant {tenant_id} to {target_version} with {strategy_class.__name__}")
    try:
        asyncio.run(_run())
    except TenantShiftError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo("Migration complete")


def main():
    cli()


if __name__ == "__main__":
    main()
