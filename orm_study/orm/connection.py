"""Connection settings for the study database.

`DBConnection` builds engines and sessions for application code, and drives
the CREATE/DROP DATABASE lifecycle through `orm_study.orm.util`.
"""

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from sqlalchemy import Engine, create_engine, func, select, text
from sqlalchemy.orm import Session, scoped_session, sessionmaker

from orm_study.exceptions import MissingDBNameError

logger = logging.getLogger("orm-study")


@dataclass
class DBConnection:
    """PostgreSQL server address, credentials and target database."""

    host: str
    port: int
    username: str
    password: str
    database: str | None = None

    @property
    def db_url(self) -> str:
        """`postgresql+psycopg://` URL, without a path when no database is set."""
        server = f"postgresql+psycopg://{self.username}:{self.password}@{self.host}:{self.port}"
        return server if self.database is None else f"{server}/{self.database}"

    def get_engine(self, echo: bool = False) -> Engine:
        return create_engine(self.db_url, echo=echo, pool_pre_ping=True)

    def get_session_factory(self) -> sessionmaker[Session]:
        return sessionmaker(bind=self.get_engine())

    def get_scoped_session_factory(self) -> scoped_session[Session]:
        """Thread-local sessions over one shared engine."""
        return scoped_session(self.get_session_factory())

    @contextmanager
    def _engine(self) -> Iterator[Engine]:
        engine = self.get_engine()
        try:
            yield engine
        finally:
            engine.dispose()

    def _require_database(self) -> str:
        if self.database is None:
            raise MissingDBNameError
        return self.database

    def _server_kwargs(self) -> dict[str, Any]:
        return {"host": self.host, "port": self.port, "user": self.username, "password": self.password}

    def create_schema(self) -> None:
        """Create the tables of the study schema that are missing."""
        from orm_study.orm.schema import Base

        with self._engine() as engine:
            Base.metadata.create_all(engine)
        logger.info(f"Schema created in database '{self.database}'.")

    def get_table_counts(self) -> dict[str, int]:
        """Row count per table, in foreign key dependency order."""
        from orm_study.orm.schema import Base

        with self._engine() as engine, engine.connect() as conn:
            return {
                table.name: conn.execute(select(func.count()).select_from(table)).scalar_one()
                for table in Base.metadata.sorted_tables
            }

    def create_database(self) -> None:
        """Create the configured database when missing, then its tables.

        Raises:
            MissingDBNameError: If no database name is configured.
        """
        from orm_study.orm.util import create_database

        create_database(database=self._require_database(), **self._server_kwargs())
        self.create_schema()

    def terminate_connections(self) -> None:
        """Disconnect every other session from the configured database.

        DROP DATABASE fails while other sessions are connected.
        """
        database = self._require_database()
        maintenance = replace(self, database="postgres")
        with maintenance._engine() as engine, engine.connect() as conn:
            conn.execute(
                text(
                    "SELECT pg_terminate_backend(pid) FROM pg_stat_activity "
                    "WHERE datname = :db AND pid <> pg_backend_pid()"
                ),
                {"db": database},
            )
            conn.commit()
        logger.info(f"Terminated all connections to database '{database}'.")

    def drop_database(self) -> None:
        from orm_study.orm.util import drop_database

        drop_database(database=self._require_database(), **self._server_kwargs())

    @classmethod
    def from_config(cls, config_path: Path | None = None) -> "DBConnection":
        """Read `db.yaml` from a config directory.

        `POSTGRES_PASSWORD` in the environment wins over the file's password.

        Args:
            config_path: Directory holding `db.yaml`. Defaults to the CLI's
                `--config-path`.

        Raises:
            FileNotFoundError: If `db.yaml` does not exist.
            ValueError: If no directory is known or no password is configured.
        """
        from omegaconf import DictConfig, OmegaConf

        from orm_study import cli

        config_dir = config_path or cli.CONFIG_PATH
        if config_dir is None:
            raise ValueError("Config path not provided and CONFIG_PATH is not set.")  # noqa: TRY003

        cfg = OmegaConf.load(config_dir / "db.yaml")
        if not isinstance(cfg, DictConfig):
            raise TypeError("db.yaml must be a YAML mapping.")  # noqa: TRY003

        password = os.environ.get("POSTGRES_PASSWORD", cfg.get("password"))
        if password is None:
            raise ValueError("No password in db.yaml or the POSTGRES_PASSWORD environment variable.")  # noqa: TRY003

        return cls(cfg.host, int(cfg.port), cfg.user, str(password), cfg.get("database"))

    @classmethod
    def from_env(cls) -> "DBConnection":
        """Read POSTGRES_HOST, POSTGRES_PORT, POSTGRES_USER, POSTGRES_PASSWORD and POSTGRES_DB."""
        env = os.environ
        if not env.get("POSTGRES_USER") or not env.get("POSTGRES_PASSWORD"):
            raise ValueError("POSTGRES_USER and POSTGRES_PASSWORD must be set.")  # noqa: TRY003

        return cls(
            host=env.get("POSTGRES_HOST", "localhost"),
            port=int(env.get("POSTGRES_PORT", "5432")),
            username=env["POSTGRES_USER"],
            password=env["POSTGRES_PASSWORD"],
            database=env.get("POSTGRES_DB"),
        )
