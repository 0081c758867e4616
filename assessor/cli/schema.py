"""Database schema migrations, driven by alembic."""

from __future__ import annotations

import alembic.command
import alembic.config
import alembic.util

import assessor.lib.cli as click
from assessor.core import di

AlembicConfig = di.Provide["storage.persistent.alembic_config"]


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, alembic_conf: alembic.config.Config = AlembicConfig):
    """Show the revision the database is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, alembic_conf: alembic.config.Config = AlembicConfig):
    """List revisions, marking the current one."""
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("message")
@click.option("--autogenerate/--empty", default=True, help="Diff the table definitions against the database")
@di.inject
def generate(message: str, autogenerate: bool, alembic_conf: alembic.config.Config = AlembicConfig):
    """Create a new revision script."""
    alembic.command.revision(alembic_conf, message, autogenerate=autogenerate)


@schema.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of running it")
@di.inject
def up(revision: str, sql: bool, alembic_conf: alembic.config.Config = AlembicConfig):
    """Upgrade to REVISION (default: head)."""
    alembic.command.upgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.argument("revision")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of running it")
@di.inject
def down(revision: str, sql: bool, alembic_conf: alembic.config.Config = AlembicConfig):
    """Downgrade to REVISION."""
    alembic.command.downgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.argument("revision")
@di.inject
def stamp(revision: str, alembic_conf: alembic.config.Config = AlembicConfig):
    """Record REVISION as current without running migrations."""
    alembic.command.stamp(alembic_conf, revision)


@schema.command()
@di.inject
def check(alembic_conf: alembic.config.Config = AlembicConfig):
    """Fail if the tables have drifted from the latest revision."""
    try:
        alembic.command.check(alembic_conf)
    except alembic.util.AutogenerateDiffsDetected as e:
        raise click.ClickException(str(e)) from e
    click.echo("schema is up to date")


command = schema
