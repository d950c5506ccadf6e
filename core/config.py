"""
=================================================
Configuration management for the collections sample.
=================================================

Loads all configuration from environment variables (.env file) and provides
a centralized Config singleton for application-wide access.

The configuration system ensures:
- Single source of truth for connection and logging settings
- Type conversion for numeric values
- A separate admin database and keyspace database

Example:
    >>> from core.config import config
    >>>
    >>> # Access individual settings
    >>> print(f"Host: {config.db_host}, Keyspace: {config.keyspace_db_name}")
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=env_path)


@dataclass
class DatabaseConfig:
    """Database configuration settings.

    Attributes:
        host: PostgreSQL server hostname or IP address
        port: PostgreSQL server port number
        user: Database username
        password: Database password
        database: Default/admin database name
        keyspace_db: Database holding the videos table and video_format type
    """

    host: str
    port: int
    user: str
    password: str
    database: str
    keyspace_db: str


@dataclass
class LoggingConfig:
    """Logging configuration settings.

    Attributes:
        level: Root log level name (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_file: Optional log file name, written under logs_dir
        logs_dir: Directory for log files
    """

    level: str
    log_file: Optional[str]
    logs_dir: Path


class Config:
    """Centralized configuration manager.

    Attributes:
        db: DatabaseConfig instance with database connection settings
        logging: LoggingConfig instance with log level and file settings
        project_root: Absolute path to project root directory

    Example:
        >>> config = Config()
        >>> print(config.keyspace_db_name)
    """

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.db = DatabaseConfig(
            host=os.getenv('POSTGRES_HOST', 'localhost'),
            port=int(os.getenv('POSTGRES_PORT', '5432')),
            user=os.getenv('POSTGRES_USER', 'postgres'),
            password=os.getenv('POSTGRES_PASSWORD', ''),
            database=os.getenv('POSTGRES_DB', 'postgres'),
            keyspace_db=os.getenv('KEYSPACE_DB', 'killrvideo')
        )

        self.project_root = Path(__file__).parent.parent
        self.logging = LoggingConfig(
            level=os.getenv('LOG_LEVEL', 'INFO'),
            log_file=os.getenv('LOG_FILE') or None,
            logs_dir=self.project_root / 'logs'
        )

    @property
    def db_host(self) -> str:
        """Get database server hostname."""
        return self.db.host

    @property
    def db_port(self) -> int:
        """Get database server port number."""
        return self.db.port

    @property
    def db_user(self) -> str:
        """Get database username."""
        return self.db.user

    @property
    def db_password(self) -> str:
        """Get database password."""
        return self.db.password

    @property
    def db_name(self) -> str:
        """Get default/admin database name."""
        return self.db.database

    @property
    def keyspace_db_name(self) -> str:
        """Get keyspace database name."""
        return self.db.keyspace_db

    @property
    def log_level(self) -> str:
        return self.logging.level


# Global configuration instance
config = Config()
