"""
==========================
Utility Functions Package.
==========================

Database connectivity helpers shared by setup and the sample runner.

Modules:
    database_utils: PostgreSQL connectivity and health checks
"""

__version__ = "1.0.0"
__all__ = [
    'DatabaseConnectionError',
    'wait_for_database',
    'check_database_available',
    'verify_database_exists',
    'get_database_connection_info',
    'create_sqlalchemy_engine',
    'verify_connection'
]

from .database_utils import (
    DatabaseConnectionError,
    check_database_available,
    create_sqlalchemy_engine,
    get_database_connection_info,
    verify_connection,
    verify_database_exists,
    wait_for_database,
)
