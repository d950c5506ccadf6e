"""
=====================================================
Setup orchestrator for the collections sample.
=====================================================

Coordinates the setup steps the sample needs before it can run:

    1. create_database: keyspace database (setup.create_database)
    2. create_schema: video_format type and videos table (setup.create_schema)
    3. truncate: empty the videos table (optional)

Each step is tracked with its status and duration, and the whole run
returns a ``{step: bool}`` dictionary.

Example:
    >>> from setup.setup_orchestrator import SetupOrchestrator
    >>>
    >>> orchestrator = SetupOrchestrator()
    >>> results = orchestrator.run_complete_setup(truncate=True)
    >>> if all(results.values()):
    ...     print("Setup completed successfully")
    >>>
    >>> orchestrator.rollback_setup(keep_database=True)
"""

import time
from typing import Any, Dict, List, Optional

from core.config import config
from core.logger import get_logger
from setup.create_database import DatabaseCreator
from setup.create_schema import SchemaCreator

logger = get_logger(__name__)


class SetupError(Exception):
    """Exception raised when a setup step fails or configuration is incomplete."""
    pass


class SetupOrchestrator:
    """Orchestrate keyspace database, type and table setup.

    Attributes:
        host: Database server hostname
        port: Database server port
        user: Database username
        password: Database password
        admin_db: Admin database name (typically 'postgres')
        target_db: Keyspace database name
        db_creator: DatabaseCreator instance (created lazily)
        schema_creator: SchemaCreator instance (created lazily)
        setup_steps: Tracked steps with status and duration
    """

    def __init__(self):
        """Load connection settings from config.

        Raises:
            SetupError: If required configuration is missing
        """
        self._validate_config()

        self.host = config.db_host
        self.port = config.db_port
        self.user = config.db_user
        self.password = config.db_password
        self.admin_db = config.db_name
        self.target_db = config.keyspace_db_name

        self.db_creator: Optional[DatabaseCreator] = None
        self.schema_creator: Optional[SchemaCreator] = None

        self.setup_steps: List[Dict[str, Any]] = []

        logger.info(f"Initialized SetupOrchestrator for database: {self.target_db}")

    def _validate_config(self) -> None:
        """Check that every connection setting except the password is present.

        Raises:
            SetupError: Listing the missing settings
        """
        required_configs = [
            ('db_host', 'Database host'),
            ('db_port', 'Database port'),
            ('db_user', 'Database user'),
            ('db_name', 'Admin database name'),
            ('keyspace_db_name', 'Keyspace database name')
        ]

        missing = [
            description for attr, description in required_configs
            if not getattr(config, attr, None)
        ]

        if missing:
            raise SetupError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

    def _initialize_components(self) -> None:
        logger.debug("Initializing setup components...")

        self.db_creator = DatabaseCreator(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            admin_db=self.admin_db,
            target_db=self.target_db
        )

        self.schema_creator = SchemaCreator(
            host=self.host,
            port=self.port,
            user=self.user,
            password=self.password,
            database=self.target_db
        )

    def _start_setup_step(self, step_name: str, step_description: str) -> Dict[str, Any]:
        step = {
            'step_name': step_name,
            'description': step_description,
            'start_time': time.time(),
            'status': 'RUNNING'
        }
        self.setup_steps.append(step)
        logger.info(f"Starting: {step_description}")
        return step

    def _end_setup_step(self, step: Dict[str, Any], status: str, error_message: str = None) -> None:
        step['status'] = status
        step['end_time'] = time.time()
        step['duration'] = step['end_time'] - step['start_time']
        if error_message:
            step['error_message'] = error_message

        if status == 'SUCCESS':
            logger.info(f"Step '{step['step_name']}' completed in {step['duration']:.2f}s")
        else:
            logger.error(f"Step '{step['step_name']}' failed: {error_message}")

    def create_database(self, force_recreate: bool = False) -> bool:
        """Create the keyspace database if it does not exist.

        Args:
            force_recreate: Drop an existing database first (destroys all data)

        Returns:
            True when the database exists after the step

        Raises:
            SetupError: If database creation fails
        """
        step = self._start_setup_step("create_database", f"Create database {self.target_db}")

        try:
            if self.db_creator is None:
                self._initialize_components()

            if force_recreate:
                logger.warning(f"⚠️ Force recreate: dropping database {self.target_db}")
                self.db_creator.drop_database()
            elif self.db_creator.check_database_exists():
                logger.info(f"Database {self.target_db} already exists")
                self._end_setup_step(step, 'SUCCESS')
                return True

            self.db_creator.create_database()
            self._end_setup_step(step, 'SUCCESS')
            return True

        except Exception as e:
            error_msg = f"Database creation failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg) from e

    def create_schema(self) -> bool:
        """Create the video_format type and videos table, then verify the columns.

        Returns:
            True if the table matches the Video model

        Raises:
            SetupError: If type or table creation fails
        """
        step = self._start_setup_step("create_schema", "Create video_format type and videos table")

        try:
            if self.schema_creator is None:
                self._initialize_components()

            self.schema_creator.create_all()

            if not self.schema_creator.verify_videos_table():
                self._end_setup_step(step, 'FAILED', 'videos table does not match the model')
                return False

            self._end_setup_step(step, 'SUCCESS')
            return True

        except Exception as e:
            error_msg = f"Schema creation failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg) from e

    def truncate_table(self) -> bool:
        """Empty the videos table.

        Raises:
            SetupError: If truncation fails
        """
        step = self._start_setup_step("truncate", "Empty videos table")

        try:
            if self.schema_creator is None:
                self._initialize_components()

            self.schema_creator.truncate_videos_table()
            self._end_setup_step(step, 'SUCCESS')
            return True

        except Exception as e:
            error_msg = f"Truncate failed: {e}"
            self._end_setup_step(step, 'FAILED', error_msg)
            raise SetupError(error_msg) from e

    def run_complete_setup(self, truncate: bool = True, force_recreate: bool = False) -> Dict[str, bool]:
        """Run every setup step in dependency order.

        Args:
            truncate: Empty the videos table after creating it
            force_recreate: Drop and recreate the keyspace database

        Returns:
            Dictionary mapping step names to success status

        Raises:
            SetupError: If any step fails
        """
        logger.info("=" * 60)
        logger.info("🚀 Starting collections sample setup")
        logger.info("=" * 60)

        results = {'database': self.create_database(force_recreate=force_recreate)}
        results['schema'] = self.create_schema()

        if truncate:
            results['truncate'] = self.truncate_table()

        total = sum(step.get('duration', 0.0) for step in self.setup_steps)
        logger.info(f"✅ Setup finished in {total:.2f}s: {results}")
        return results

    def rollback_setup(self, keep_database: bool = True) -> bool:
        """Undo setup: drop table and type, or the whole database.

        Args:
            keep_database: If False, drop the keyspace database instead

        Returns:
            True if rollback succeeded, False otherwise
        """
        logger.warning("⚠️ Rolling back setup...")

        try:
            if self.db_creator is None or self.schema_creator is None:
                self._initialize_components()

            if keep_database:
                self.schema_creator.drop_videos_table()
                self.schema_creator.drop_video_format_type()
            else:
                self.schema_creator.close_connections()
                self.db_creator.drop_database()

            logger.info("✅ Rollback completed")
            return True

        except Exception as e:
            logger.error(f"❌ Rollback failed: {e}")
            return False

    def get_setup_summary(self) -> Dict[str, Any]:
        """Summarize tracked steps (counts, durations, failures)."""
        failed = [step['step_name'] for step in self.setup_steps if step['status'] == 'FAILED']
        return {
            'target_database': self.target_db,
            'total_steps': len(self.setup_steps),
            'failed_steps': failed,
            'total_duration': sum(step.get('duration', 0.0) for step in self.setup_steps),
            'steps': list(self.setup_steps)
        }

    def close_connections(self) -> None:
        """Dispose of every engine opened by the setup components."""
        if self.schema_creator:
            self.schema_creator.close_connections()
        if self.db_creator:
            self.db_creator.close_connections()
