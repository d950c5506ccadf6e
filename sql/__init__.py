"""
====================================================
SQL utilities package for the collections sample.
====================================================

Statement construction organized by SQL operation type:
    - ddl.py: Database, composite type and table DDL as SQL strings
    - dml.py: SQLAlchemy Core statements for the videos collection operations
    - query_builder.py: Catalog queries with named bind parameters

All functions are pure: they build statements and never execute them.

Example:
    >>> from sql.ddl import create_type_sql
    >>> from sql.dml import add_tag_statement
    >>> from sql.query_builder import check_type_exists_sql
"""

__version__ = "1.0.0"
__all__ = [
    # DDL functions
    'create_database_sql', 'drop_database_sql', 'terminate_connections_sql',
    'create_type_sql', 'drop_type_sql', 'truncate_table_sql', 'drop_table_sql',
    # DML functions
    'insert_video_statement', 'select_collections_statement',
    'add_tag_statement', 'remove_tag_statement',
    'replace_frames_statement', 'append_frame_statement', 'set_frame_statement',
    'put_format_statement', 'remove_format_statement',
]

from .ddl import (
    create_database_sql,
    create_type_sql,
    drop_database_sql,
    drop_table_sql,
    drop_type_sql,
    terminate_connections_sql,
    truncate_table_sql,
)
from .dml import (
    add_tag_statement,
    append_frame_statement,
    insert_video_statement,
    put_format_statement,
    remove_format_statement,
    remove_tag_statement,
    replace_frames_statement,
    select_collections_statement,
    set_frame_statement,
)
