from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
import sqlalchemy.pool
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import assessor.lib.json as json

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PersistentSettings, StorageSettings
from ..di import NotReady
from ..provider import LoggingProvider


def build_dsn(config: PersistentSettings, secrets: PostgresqlSecrets, root: Path | NotReady) -> DSN:
    if config.postgresql is not None:
        pg = config.postgresql
        return DSN.create(
            pg.driver,
            database=pg.database,
            username=secrets.username.get_secret_value() if secrets.username else None,
            password=secrets.password.get_secret_value() if secrets.password else None,
            port=pg.port,
            host=str(pg.host) if pg.host else None,
        )

    assert config.sqlite is not None
    path = config.sqlite.path
    if path is None:
        return DSN.create(config.sqlite.driver)
    if not path.is_absolute():
        if isinstance(root, NotReady):
            raise RuntimeError("root path is unavailable")
        path = root / path
    return DSN.create(config.sqlite.driver, database=str(path))


def provide_alembic_conf(
    migration_path: Path, config: PersistentSettings, secrets: PostgresqlSecrets, root: Path | NotReady
) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    dsn = build_dsn(config, secrets, root)
    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(
    config: PersistentSettings, secrets: PostgresqlSecrets, logging: LoggingProvider, root: Path | NotReady
) -> sqlalchemy.Engine:
    logger = logging.get_logger()
    dsn = build_dsn(config, secrets, root)

    if config.postgresql is not None:
        engine = sqlalchemy.create_engine(dsn, json_serializer=json.dumps, json_deserializer=json.loads)
        sqlalchemy.event.listen(engine, "connect", register_timezone)
        logger.info(
            "initialized SQLAlchemy engine",
            extra={
                "driver": config.postgresql.driver,
                "database": config.postgresql.database,
                "host": config.postgresql.host,
                "port": config.postgresql.port,
            },
        )
        return engine

    assert config.sqlite is not None
    kwargs: dict[str, t.Any] = {}
    if config.sqlite.path is None:
        # one shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = sqlalchemy.pool.StaticPool
    engine = sqlalchemy.create_engine(
        dsn,
        json_serializer=json.dumps,
        json_deserializer=json.loads,
        connect_args={"check_same_thread": False},
        **kwargs,
    )
    sqlalchemy.event.listen(engine, "connect", register_foreign_keys)
    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": config.sqlite.driver,
            "database": str(config.sqlite.path or ":memory:"),
        },
    )
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """Create a new session. Caller is responsible for closing it (via di.Manage)."""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    debug: Provider[bool] = Object()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=config.as_(PersistentSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=config.as_(PersistentSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        logging=logging,
        root=root,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config: Provider[StorageSettings] = Configuration(strict=True)
    secrets: Provider[StorageSettings] = Configuration(strict=True)
    debug: Provider[bool] = Object()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, debug=debug, logging=logging, root=root
    )


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC for consistent datetime handling.

    PostgreSQL TIMESTAMP WITH TIME ZONE stores timestamps in UTC but returns
    them converted to the connection's timezone.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()


def register_foreign_keys(dbapi_conn: t.Any, _: t.Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
