"""
==================================================
Keyspace database creation for the collections sample.
==================================================

Creates and drops the database that plays the role of the keyspace. All
statements run against the admin database (typically 'postgres'), because
PostgreSQL cannot create or drop the database a session is connected to.

Key Features:
    - Database existence checking
    - Database creation with configurable template and encoding
    - Connection termination before dropping
    - SQL generated by sql.ddl and sql.query_builder

Example:
    >>> from setup.create_database import DatabaseCreator
    >>>
    >>> creator = DatabaseCreator(
    ...     host='localhost',
    ...     port=5432,
    ...     user='postgres',
    ...     password='password',
    ...     admin_db='postgres',
    ...     target_db='killrvideo'
    ... )
    >>> if not creator.check_database_exists():
    ...     creator.create_database()
"""

import logging
from typing import Optional

import psycopg2
from psycopg2.extensions import ISOLATION_LEVEL_AUTOCOMMIT
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError

from sql.ddl import create_database_sql, drop_database_sql, terminate_connections_sql
from sql.query_builder import check_database_exists_sql, count_database_connections_sql
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class DatabaseCreationError(Exception):
    """Exception raised when creating, dropping or inspecting the keyspace database fails."""
    pass


class DatabaseCreator:
    """Create and drop the keyspace database.

    Attributes:
        host: PostgreSQL server hostname
        port: PostgreSQL server port
        user: Database username with CREATE DATABASE privileges
        password: Database password
        admin_db: Admin database name (typically 'postgres')
        target_db: Name of database to create/drop
        db_config: Template and encoding used by CREATE DATABASE
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        admin_db: str,
        target_db: str,
        template: str = 'template0',
        encoding: str = 'UTF8'
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.admin_db = admin_db
        self.target_db = target_db

        self.db_config = {
            'template': template,
            'encoding': encoding
        }

        self._admin_engine: Optional[Engine] = None

    def _get_admin_engine(self) -> Engine:
        """Get AUTOCOMMIT engine connected to the admin database."""
        if self._admin_engine is None:
            self._admin_engine = create_sqlalchemy_engine(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.admin_db,
                isolation_level='AUTOCOMMIT'
            )
        return self._admin_engine

    def _execute_raw(self, statement: str) -> None:
        """Run a statement on the raw psycopg2 connection outside any transaction block."""
        engine = self._get_admin_engine()
        with engine.connect() as conn:
            raw_conn = conn.connection.driver_connection
            raw_conn.set_isolation_level(ISOLATION_LEVEL_AUTOCOMMIT)

            with raw_conn.cursor() as cursor:
                cursor.execute(statement)

    def check_database_exists(self) -> bool:
        """
        Check if target database exists.

        Returns:
            True if database exists, False otherwise

        Raises:
            DatabaseCreationError: If the catalog query fails
        """
        try:
            engine = self._get_admin_engine()
            with engine.connect() as conn:
                result = conn.execute(
                    text(check_database_exists_sql()),
                    {'db_name': self.target_db}
                )
                return result.fetchone() is not None

        except SQLAlchemyError as e:
            logger.error(f"Error checking database existence: {e}")
            raise DatabaseCreationError(f"Failed to check database existence: {e}")

    def terminate_connections(self) -> int:
        """
        Terminate all other connections to the target database.

        Returns:
            Number of connections terminated
        """
        if not self.check_database_exists():
            logger.info(f"Database {self.target_db} does not exist")
            return 0

        try:
            engine = self._get_admin_engine()
            with engine.connect() as conn:
                params = {'db_name': self.target_db}
                connection_count = conn.execute(
                    text(count_database_connections_sql()), params
                ).scalar()

                if not connection_count:
                    logger.info(f"No active connections to {self.target_db}")
                    return 0

                logger.info(f"Terminating {connection_count} connections to {self.target_db}")
                conn.execute(text(terminate_connections_sql()), params)

                return connection_count

        except SQLAlchemyError as e:
            logger.error(f"Error terminating connections: {e}")
            raise DatabaseCreationError(f"Failed to terminate connections: {e}")

    def drop_database(self, force: bool = True) -> bool:
        """
        Drop target database if it exists.

        Args:
            force: Use WITH (FORCE) for PostgreSQL 13+

        Returns:
            True if database was dropped, False if it didn't exist
        """
        if not self.check_database_exists():
            logger.info(f"Database {self.target_db} does not exist")
            return False

        try:
            self.terminate_connections()

            logger.info(f"Dropping database {self.target_db}")
            self._execute_raw(drop_database_sql(
                database_name=self.target_db,
                if_exists=True,
                force=force
            ))

            logger.info(f"Successfully dropped database {self.target_db}")
            return True

        except (SQLAlchemyError, psycopg2.Error) as e:
            logger.error(f"Error dropping database: {e}")
            raise DatabaseCreationError(f"Failed to drop database: {e}")

    def create_database(self) -> None:
        """
        Create target database with configured settings.

        Raises:
            DatabaseCreationError: If creation fails
        """
        try:
            logger.info(f"Creating database {self.target_db}")
            self._execute_raw(create_database_sql(
                database_name=self.target_db,
                template=self.db_config['template'],
                encoding=self.db_config['encoding']
            ))

            logger.info(f"Successfully created database {self.target_db}")

        except (SQLAlchemyError, psycopg2.Error) as e:
            logger.error(f"Error creating database: {e}")
            raise DatabaseCreationError(f"Failed to create database: {e}")

    def close_connections(self) -> None:
        """Dispose of the admin engine."""
        if self._admin_engine:
            self._admin_engine.dispose()
            self._admin_engine = None
