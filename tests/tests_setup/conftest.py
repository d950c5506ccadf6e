"""
Shared fixtures and mocking helpers for setup tests.

Key fixtures:
- patch_db_engine: patches create_sqlalchemy_engine used by create_database.
- patch_schema_engine: patches create_sqlalchemy_engine used by create_schema.
- db_creator_factory: returns a DatabaseCreator instance wired to the patched engine.
- schema_creator_factory: returns a SchemaCreator instance wired to the patched engine.
"""

from unittest.mock import patch

import pytest


@pytest.fixture
def patch_db_engine():
    """
    Patch create_sqlalchemy_engine in setup.create_database.
    Tests set return_value to a fake engine.
    """
    with patch("setup.create_database.create_sqlalchemy_engine") as mock_create_engine:
        yield mock_create_engine


@pytest.fixture
def patch_schema_engine():
    """
    Patch create_sqlalchemy_engine in setup.create_schema.
    Tests set return_value to a fake engine.
    """
    with patch("setup.create_schema.create_sqlalchemy_engine") as mock_create_engine:
        yield mock_create_engine


@pytest.fixture
def db_creator_factory():
    """
    Factory that creates a DatabaseCreator with default params. Tests patch the engine separately.
    """
    from setup.create_database import DatabaseCreator

    def factory(**overrides):
        params = dict(
            host="localhost",
            port=5432,
            user="postgres",
            password="secret",
            admin_db="postgres",
            target_db="killrvideo",
        )
        params.update(overrides)
        return DatabaseCreator(**params)

    return factory


@pytest.fixture
def schema_creator_factory():
    """
    Factory that creates a SchemaCreator with default params. Tests patch the engine separately.
    """
    from setup.create_schema import SchemaCreator

    def factory(**overrides):
        params = dict(
            host="localhost",
            port=5432,
            user="postgres",
            password="secret",
            database="killrvideo",
        )
        params.update(overrides)
        return SchemaCreator(**params)

    return factory
