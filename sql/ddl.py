"""
=======================================================================
Data Definition Language (DDL) utilities for the keyspace database.
=======================================================================

Generates the PostgreSQL DDL the sample needs besides the ORM-managed
``videos`` table: the keyspace database itself, the ``video_format``
composite type, and the truncate/drop statements used to reset state.

Functions:
    create_database_sql: Generate CREATE DATABASE statement
    drop_database_sql: Generate DROP DATABASE statement
    terminate_connections_sql: Terminate connections to a database
    create_type_sql: Generate CREATE TYPE ... AS (...) for a composite type
    drop_type_sql: Generate DROP TYPE statement
    truncate_table_sql: Generate TRUNCATE TABLE statement
    drop_table_sql: Generate DROP TABLE statement

Example:
    >>> from sql.ddl import create_type_sql
    >>>
    >>> print(create_type_sql('video_format', [
    ...     {'name': 'width', 'type': 'INTEGER'},
    ...     {'name': 'height', 'type': 'INTEGER'},
    ... ]))
    CREATE TYPE "video_format" AS (
        "width" INTEGER,
        "height" INTEGER
    );
"""

from typing import Dict, List, Optional


def create_database_sql(
    database_name: str,
    template: str = 'template0',
    encoding: str = 'UTF8',
    lc_collate: Optional[str] = None,
    lc_ctype: Optional[str] = None,
    owner: Optional[str] = None
) -> str:
    """
    Generate CREATE DATABASE statement.

    Note: Database creation requires an AUTOCOMMIT connection to the admin
    database, which the caller provides.

    Args:
        database_name: Name of the database to create
        template: Template database to use
        encoding: Character encoding
        lc_collate: Optional collation order (server default when None)
        lc_ctype: Optional character classification (server default when None)
        owner: Optional database owner

    Returns:
        SQL CREATE DATABASE statement
    """
    sql = f"""CREATE DATABASE "{database_name}"
    WITH TEMPLATE = '{template}'
         ENCODING = '{encoding}'"""

    if lc_collate:
        sql += f"\n         LC_COLLATE = '{lc_collate}'"
    if lc_ctype:
        sql += f"\n         LC_CTYPE = '{lc_ctype}'"
    if owner:
        sql += f"\n         OWNER = {owner}"

    return sql + ";"


def drop_database_sql(
    database_name: str,
    if_exists: bool = True,
    force: bool = True
) -> str:
    """
    Generate DROP DATABASE statement.

    Args:
        database_name: Name of the database to drop
        if_exists: Add IF EXISTS clause
        force: Add WITH (FORCE) clause (PostgreSQL 13+)

    Returns:
        SQL DROP DATABASE statement
    """
    sql_parts = ["DROP DATABASE"]

    if if_exists:
        sql_parts.append("IF EXISTS")

    sql_parts.append(f'"{database_name}"')

    if force:
        sql_parts.append("WITH (FORCE)")

    return " ".join(sql_parts) + ";"


def terminate_connections_sql() -> str:
    """SQL terminating every other connection to database ``:db_name``."""
    return """SELECT pg_terminate_backend(pid)
FROM pg_stat_activity
WHERE datname = :db_name
  AND pid <> pg_backend_pid()"""


def create_type_sql(type_name: str, fields: List[Dict[str, str]]) -> str:
    """
    Generate CREATE TYPE for a composite (structured) type.

    PostgreSQL has no IF NOT EXISTS for CREATE TYPE; check with
    sql.query_builder.check_type_exists_sql first.

    Args:
        type_name: Name of the composite type
        fields: Ordered field definitions with 'name' and 'type' keys

    Returns:
        SQL CREATE TYPE statement

    Raises:
        ValueError: If fields is empty
    """
    if not fields:
        raise ValueError(f"Composite type '{type_name}' needs at least one field")

    field_defs = ",\n".join(f'    "{field["name"]}" {field["type"]}' for field in fields)
    return f'CREATE TYPE "{type_name}" AS (\n{field_defs}\n);'


def drop_type_sql(type_name: str, if_exists: bool = True, cascade: bool = False) -> str:
    """Generate DROP TYPE statement."""
    sql_parts = ["DROP TYPE"]
    if if_exists:
        sql_parts.append("IF EXISTS")
    sql_parts.append(f'"{type_name}"')
    if cascade:
        sql_parts.append("CASCADE")
    return " ".join(sql_parts) + ";"


def truncate_table_sql(table_name: str) -> str:
    """Generate TRUNCATE TABLE statement."""
    return f'TRUNCATE TABLE "{table_name}";'


def drop_table_sql(table_name: str, if_exists: bool = True, cascade: bool = False) -> str:
    """Generate DROP TABLE statement."""
    sql_parts = ["DROP TABLE"]
    if if_exists:
        sql_parts.append("IF EXISTS")
    sql_parts.append(f'"{table_name}"')
    if cascade:
        sql_parts.append("CASCADE")
    return " ".join(sql_parts) + ";"
