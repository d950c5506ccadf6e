"""
==================================================
Database connectivity utilities for PostgreSQL.
==================================================

Provides reusable connection helpers, health checks, and database
availability verification used by setup and by the sample runner.

Key Features:
    - Explicit arguments override config only when they are not None
    - SQLAlchemy engine creation for the admin or keyspace database
    - Database availability checking with startup retries
    - Database existence verification

Example:
    >>> from utils.database_utils import (
    ...     create_sqlalchemy_engine,
    ...     wait_for_database,
    ... )
    >>>
    >>> wait_for_database(max_retries=5)
    >>> engine = create_sqlalchemy_engine(use_keyspace=True)
"""

import logging
import time
from typing import Optional, Tuple

import psycopg2
from psycopg2 import OperationalError
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from core.config import config
from sql.query_builder import check_database_exists_sql

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Exception raised when database connection fails."""
    pass


def _or_config(value, default):
    """Return value unless it is None; empty strings and 0 are kept as given."""
    return value if value is not None else default


def create_sqlalchemy_engine(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    use_keyspace: bool = False,
    echo: bool = False,
    isolation_level: Optional[str] = None
) -> Engine:
    """
    Create a SQLAlchemy engine for the admin or keyspace database.

    Pooling is left at the SQLAlchemy defaults.

    Args:
        host: Database hostname
        port: Database port
        user: Database user
        password: Database password
        database: Database name (overrides use_keyspace)
        use_keyspace: If True, connect to the keyspace database
        echo: Enable SQL statement logging
        isolation_level: Optional isolation level (e.g. 'AUTOCOMMIT' for DDL on databases)

    Returns:
        Configured SQLAlchemy Engine

    Example:
        >>> engine = create_sqlalchemy_engine(use_keyspace=True)
        >>> with engine.connect() as conn:
        ...     conn.execute(text("SELECT 1"))
    """
    connection_url = URL.create(
        drivername='postgresql+psycopg2',
        username=_or_config(user, config.db_user),
        password=_or_config(password, config.db_password),
        host=_or_config(host, config.db_host),
        port=_or_config(port, config.db_port),
        database=_or_config(
            database, config.keyspace_db_name if use_keyspace else config.db_name
        )
    )

    engine_kwargs = {'echo': echo, 'pool_pre_ping': True}
    if isolation_level:
        engine_kwargs['isolation_level'] = isolation_level

    return create_engine(connection_url, **engine_kwargs)


def check_database_available(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    timeout: int = 5
) -> bool:
    """
    Check if PostgreSQL database is available.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config.db_name)
        timeout: Connection timeout in seconds

    Returns:
        True if database is available, False otherwise
    """
    host = _or_config(host, config.db_host)
    port = _or_config(port, config.db_port)
    user = _or_config(user, config.db_user)
    password = _or_config(password, config.db_password)
    database = _or_config(database, config.db_name)

    try:
        conn = psycopg2.connect(
            host=host,
            port=port,
            user=user,
            password=password,
            dbname=database,
            connect_timeout=timeout
        )
        conn.close()
        return True
    except OperationalError as e:
        logger.debug(f"Database not available: {e}")
        return False


def wait_for_database(
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None,
    database: str = None,
    max_retries: int = 10,
    retry_delay: int = 2,
    timeout: int = 5
) -> bool:
    """
    Wait for PostgreSQL to become available, retrying at a fixed delay.

    Only used at startup. Data operations never retry.

    Args:
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)
        database: Database name (defaults to config.db_name)
        max_retries: Maximum number of attempts
        retry_delay: Delay between attempts in seconds
        timeout: Connection timeout per attempt in seconds

    Returns:
        True once the database is available

    Raises:
        DatabaseConnectionError: If database never becomes available
    """
    host = _or_config(host, config.db_host)
    port = _or_config(port, config.db_port)
    database = _or_config(database, config.db_name)

    logger.info(f"Waiting for PostgreSQL at {host}:{port}/{database}...")

    for attempt in range(1, max_retries + 1):
        if check_database_available(host, port, user, password, database, timeout):
            logger.info(f"✅ PostgreSQL is available (attempt {attempt}/{max_retries})")
            return True

        if attempt < max_retries:
            logger.warning(
                f"⏳ PostgreSQL not available yet (attempt {attempt}/{max_retries}), "
                f"retrying in {retry_delay}s..."
            )
            time.sleep(retry_delay)

    error_msg = (
        f"PostgreSQL at {host}:{port}/{database} did not become available "
        f"after {max_retries} attempts"
    )
    logger.error(f"❌ {error_msg}")
    raise DatabaseConnectionError(error_msg)


def verify_database_exists(
    database_name: str,
    host: str = None,
    port: int = None,
    user: str = None,
    password: str = None
) -> bool:
    """
    Verify if a specific database exists in PostgreSQL.

    Args:
        database_name: Name of database to check
        host: Database hostname (defaults to config)
        port: Database port (defaults to config)
        user: Database user (defaults to config)
        password: Database password (defaults to config)

    Returns:
        True if database exists, False otherwise (including on connection errors)
    """
    engine = None
    try:
        engine = create_sqlalchemy_engine(
            host=host,
            port=port,
            user=user,
            password=password,
            database=config.db_name
        )

        with engine.connect() as conn:
            result = conn.execute(
                text(check_database_exists_sql()),
                {"db_name": database_name}
            )
            return result.fetchone() is not None

    except SQLAlchemyError as e:
        logger.error(f"Failed to verify database existence: {e}")
        return False
    finally:
        if engine is not None:
            engine.dispose()


def get_database_connection_info() -> dict:
    """
    Get current database connection configuration (password excluded).

    Returns:
        Dictionary with host, port, user, admin_database, keyspace_database
    """
    return {
        'host': config.db_host,
        'port': config.db_port,
        'user': config.db_user,
        'admin_database': config.db_name,
        'keyspace_database': config.keyspace_db_name
    }


def verify_connection() -> Tuple[bool, Optional[str]]:
    """
    Verify database connection and return status with details.

    Returns:
        Tuple of (success, message)

    Example:
        >>> success, message = verify_connection()
        >>> if not success:
        ...     print(f"❌ {message}")
    """
    if not check_database_available():
        return False, "PostgreSQL server not available"

    if verify_database_exists(config.keyspace_db_name):
        message = (
            f"Connected to PostgreSQL at {config.db_host}:{config.db_port}. "
            f"Keyspace database '{config.keyspace_db_name}' exists."
        )
    else:
        message = (
            f"Connected to PostgreSQL at {config.db_host}:{config.db_port}. "
            f"Keyspace database '{config.keyspace_db_name}' does not exist yet."
        )

    return True, message
