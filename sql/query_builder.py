"""
============================
Metadata Query Builders.
============================

Catalog queries used by setup and connectivity checks. Every function returns
a SQL string with named bind parameters (``:name``) so the caller passes
values through ``text()`` instead of formatting them into the SQL.

Functions:
- check_database_exists_sql: Check if a database exists (:db_name)
- count_database_connections_sql: Count other connections to a database (:db_name)
- check_type_exists_sql: Check if a composite type exists (:type_name)
- check_table_exists_sql: Check if a table exists (:table_name)
- get_column_info_sql: List columns of a table (:table_name)

Usage:
    from sqlalchemy import text
    from sql.query_builder import check_type_exists_sql

    row = conn.execute(
        text(check_type_exists_sql()), {'type_name': 'video_format'}
    ).fetchone()
"""


def check_database_exists_sql() -> str:
    """SQL returning one row when database ``:db_name`` exists."""
    return "SELECT 1 FROM pg_database WHERE datname = :db_name"


def count_database_connections_sql() -> str:
    """SQL counting connections to ``:db_name`` other than the current one."""
    return """SELECT COUNT(*)
FROM pg_stat_activity
WHERE datname = :db_name
  AND pid <> pg_backend_pid()"""


def check_type_exists_sql(schema_name: str = 'public') -> str:
    """
    Generate SQL to check if a composite type exists.

    Args:
        schema_name: Schema holding the type

    Returns:
        SQL returning one row when type ``:type_name`` exists in the schema
    """
    return f"""SELECT 1
FROM pg_type t
JOIN pg_namespace n ON n.oid = t.typnamespace
WHERE t.typname = :type_name
  AND t.typtype = 'c'
  AND n.nspname = '{schema_name}'"""


def check_table_exists_sql(schema_name: str = 'public') -> str:
    """
    Generate SQL to check if a table exists.

    Args:
        schema_name: Schema holding the table

    Returns:
        SQL returning one row when table ``:table_name`` exists in the schema
    """
    return f"""SELECT 1
FROM information_schema.tables
WHERE table_schema = '{schema_name}'
  AND table_name = :table_name"""


def get_column_info_sql(schema_name: str = 'public') -> str:
    """
    Generate SQL to get column names and types of table ``:table_name``.

    Array columns report ``ARRAY`` as data_type and the element type in
    udt_name (``_text``, ``_int4``).
    """
    return f"""SELECT
    column_name,
    data_type,
    udt_name,
    is_nullable
FROM information_schema.columns
WHERE table_schema = '{schema_name}'
  AND table_name = :table_name
ORDER BY ordinal_position"""
