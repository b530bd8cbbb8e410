"""CREATE/DROP DATABASE helpers.

Neither statement may run inside a transaction block, so both go through an
autocommit psycopg connection to the `postgres` maintenance database.
"""

import logging

import psycopg
from psycopg import sql

logger = logging.getLogger("orm-study")


def _maintenance_connection(*, host: str, port: int, user: str, password: str) -> psycopg.Connection:
    return psycopg.connect(host=host, port=port, user=user, password=password, dbname="postgres", autocommit=True)


def _database_exists(conn: psycopg.Connection, database: str) -> bool:
    row = conn.execute("SELECT 1 FROM pg_database WHERE datname = %s", (database,)).fetchone()
    return row is not None


def create_database(*, database: str, encoding: str = "UTF8", **server) -> bool:
    """Create `database` from template0 unless it already exists.

    Args:
        database: Name of the database to create.
        encoding: Server-side encoding of the new database.
        **server: `host`, `port`, `user` and `password` of a role allowed to
            create databases.

    Returns:
        False when the database was already there.

    Raises:
        psycopg.Error: On connection or permission failures.
    """
    with _maintenance_connection(**server) as conn:
        if _database_exists(conn, database):
            logger.info(f"Database '{database}' already exists")
            return False
        conn.execute(
            sql.SQL("CREATE DATABASE {} ENCODING {} TEMPLATE template0").format(
                sql.Identifier(database), sql.Literal(encoding)
            )
        )
    logger.info(f"Database '{database}' created")
    return True


def drop_database(*, database: str, **server) -> bool:
    """Drop `database` if it exists. Returns False when there was nothing to drop.

    Fails while other sessions are connected, see
    `DBConnection.terminate_connections()`.
    """
    with _maintenance_connection(**server) as conn:
        if not _database_exists(conn, database):
            logger.info(f"Database '{database}' not found, nothing to drop")
            return False
        conn.execute(sql.SQL("DROP DATABASE {}").format(sql.Identifier(database)))
    logger.info(f"Database '{database}' dropped")
    return True
