"""
========================================================
Setup package for the video collections sample.
========================================================

Prepares the keyspace database before the sample runs.

Modules:
    create_database: Keyspace database creation and dropping
    create_schema: video_format composite type and videos table
    setup_orchestrator: Coordinated setup process

Example:
    >>> from setup import SetupOrchestrator
    >>>
    >>> orchestrator = SetupOrchestrator()
    >>> results = orchestrator.run_complete_setup(truncate=True)
"""

__version__ = "0.1.0"
__all__ = [
    'SetupOrchestrator',
    'SetupError',
    'DatabaseCreator',
    'SchemaCreator'
]

from .create_database import DatabaseCreator
from .create_schema import SchemaCreator
from .setup_orchestrator import SetupError, SetupOrchestrator
