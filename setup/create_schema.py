"""
==================================================
Type and table creation for the collections sample.
==================================================

Creates the ``video_format`` composite type and the ``videos`` table inside
the keyspace database, and provides the truncate/drop helpers used to reset
state between sample runs.

Key Features:
    - Idempotent creation (existing objects are left untouched)
    - video_format DDL from sql.ddl, videos table from the ORM metadata
    - Catalog checks from sql.query_builder

Prerequisites:
    - Keyspace database exists (see setup.create_database)

Example:
    >>> from setup.create_schema import SchemaCreator
    >>>
    >>> creator = SchemaCreator(
    ...     host='localhost',
    ...     user='postgres',
    ...     password='password',
    ...     database='killrvideo'
    ... )
    >>> creator.create_all()
    {'video_format': True, 'videos': True}
    >>> creator.truncate_videos_table()
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from models.video_models import (
    UDT_VIDEO_FORMAT_NAME,
    VIDEO_FORMAT_FIELDS,
    VIDEO_TABLENAME,
    Base,
    Video,
)
from sql.ddl import create_type_sql, drop_table_sql, drop_type_sql, truncate_table_sql
from sql.query_builder import check_table_exists_sql, check_type_exists_sql, get_column_info_sql
from utils.database_utils import create_sqlalchemy_engine

logger = logging.getLogger(__name__)


class SchemaCreationError(Exception):
    """Exception raised when creating, inspecting or dropping the type or table fails."""
    pass


class SchemaCreator:
    """Create the video_format type and videos table in the keyspace database.

    Attributes:
        host: PostgreSQL server hostname
        port: PostgreSQL server port
        user: Database username with CREATE privileges
        password: Database password (None uses POSTGRES_PASSWORD)
        database: Keyspace database name
    """

    def __init__(
        self,
        host: str = 'localhost',
        port: int = 5432,
        user: str = 'postgres',
        password: Optional[str] = None,
        database: str = 'killrvideo'
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database

        self._engine: Optional[Engine] = None

    def _get_engine(self) -> Engine:
        """Get SQLAlchemy engine connected to the keyspace database."""
        if self._engine is None:
            self._engine = create_sqlalchemy_engine(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database
            )
        return self._engine

    def _exists(self, sql: str, params: dict) -> bool:
        engine = self._get_engine()
        with engine.connect() as conn:
            return conn.execute(text(sql), params).fetchone() is not None

    def check_type_exists(self, type_name: str = UDT_VIDEO_FORMAT_NAME) -> bool:
        """
        Check if a composite type exists.

        Raises:
            SchemaCreationError: If the catalog query fails
        """
        try:
            return self._exists(check_type_exists_sql(), {'type_name': type_name})
        except SQLAlchemyError as e:
            logger.error(f"Error checking type existence: {e}")
            raise SchemaCreationError(f"Failed to check type '{type_name}': {e}")

    def check_table_exists(self, table_name: str = VIDEO_TABLENAME) -> bool:
        """
        Check if a table exists.

        Raises:
            SchemaCreationError: If the catalog query fails
        """
        try:
            return self._exists(check_table_exists_sql(), {'table_name': table_name})
        except SQLAlchemyError as e:
            logger.error(f"Error checking table existence: {e}")
            raise SchemaCreationError(f"Failed to check table '{table_name}': {e}")

    def create_video_format_type(self) -> bool:
        """
        Create the video_format composite type.

        Returns:
            True if the type was created, False if it already existed
        """
        if self.check_type_exists(UDT_VIDEO_FORMAT_NAME):
            logger.info(f"Type '{UDT_VIDEO_FORMAT_NAME}' already exists, skipping creation")
            return False

        try:
            with self._get_engine().begin() as conn:
                conn.execute(text(create_type_sql(UDT_VIDEO_FORMAT_NAME, VIDEO_FORMAT_FIELDS)))

            logger.info(f"Created type '{UDT_VIDEO_FORMAT_NAME}'")
            return True

        except SQLAlchemyError as e:
            logger.error(f"Error creating type '{UDT_VIDEO_FORMAT_NAME}': {e}")
            raise SchemaCreationError(f"Failed to create type '{UDT_VIDEO_FORMAT_NAME}': {e}")

    def create_videos_table(self) -> bool:
        """
        Create the videos table from the ORM metadata.

        Returns:
            True if the table was created, False if it already existed
        """
        if self.check_table_exists(VIDEO_TABLENAME):
            logger.info(f"Table '{VIDEO_TABLENAME}' already exists, skipping creation")
            return False

        try:
            Base.metadata.create_all(self._get_engine(), tables=[Video.__table__], checkfirst=True)
            logger.info(f"Created table '{VIDEO_TABLENAME}'")
            return True

        except SQLAlchemyError as e:
            logger.error(f"Error creating table '{VIDEO_TABLENAME}': {e}")
            raise SchemaCreationError(f"Failed to create table '{VIDEO_TABLENAME}': {e}")

    def create_all(self) -> Dict[str, bool]:
        """
        Create the type, then the table that uses it.

        Returns:
            Dictionary mapping object names to creation status (True=created, False=existed)
        """
        logger.info("🚀 Creating video_format type and videos table...")

        results = {
            UDT_VIDEO_FORMAT_NAME: self.create_video_format_type(),
            VIDEO_TABLENAME: self.create_videos_table(),
        }

        logger.info("✅ Schema objects ready")
        return results

    def get_table_columns(self, table_name: str = VIDEO_TABLENAME) -> List[Dict[str, str]]:
        """
        List columns of a table as dicts (column_name, data_type, udt_name, is_nullable).
        """
        try:
            with self._get_engine().connect() as conn:
                result = conn.execute(text(get_column_info_sql()), {'table_name': table_name})
                return [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error(f"Error reading columns of '{table_name}': {e}")
            raise SchemaCreationError(f"Failed to read columns of '{table_name}': {e}")

    def verify_videos_table(self) -> bool:
        """Check that every column of the Video model exists in the database."""
        existing = {col['column_name'] for col in self.get_table_columns(VIDEO_TABLENAME)}
        missing = [col.name for col in Video.__table__.columns if col.name not in existing]

        if missing:
            logger.warning(f"⚠️ Table '{VIDEO_TABLENAME}' is missing columns: {', '.join(missing)}")
            return False
        return True

    def truncate_videos_table(self) -> None:
        """Remove every row of the videos table."""
        try:
            with self._get_engine().begin() as conn:
                conn.execute(text(truncate_table_sql(VIDEO_TABLENAME)))
            logger.info(f"Truncated table '{VIDEO_TABLENAME}'")
        except SQLAlchemyError as e:
            logger.error(f"Error truncating table '{VIDEO_TABLENAME}': {e}")
            raise SchemaCreationError(f"Failed to truncate table '{VIDEO_TABLENAME}': {e}")

    def drop_videos_table(self) -> None:
        try:
            with self._get_engine().begin() as conn:
                conn.execute(text(drop_table_sql(VIDEO_TABLENAME, if_exists=True)))
            logger.info(f"🗑️ Dropped table '{VIDEO_TABLENAME}'")
        except SQLAlchemyError as e:
            logger.error(f"Error dropping table '{VIDEO_TABLENAME}': {e}")
            raise SchemaCreationError(f"Failed to drop table '{VIDEO_TABLENAME}': {e}")

    def drop_video_format_type(self) -> None:
        """Drop the video_format type; put-format updates fail until it is recreated."""
        try:
            with self._get_engine().begin() as conn:
                conn.execute(text(drop_type_sql(UDT_VIDEO_FORMAT_NAME, if_exists=True)))
            logger.info(f"🗑️ Dropped type '{UDT_VIDEO_FORMAT_NAME}'")
        except SQLAlchemyError as e:
            logger.error(f"Error dropping type '{UDT_VIDEO_FORMAT_NAME}': {e}")
            raise SchemaCreationError(f"Failed to drop type '{UDT_VIDEO_FORMAT_NAME}': {e}")

    def close_connections(self) -> None:
        """Dispose of the keyspace engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None
