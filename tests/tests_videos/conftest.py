"""
Shared fixtures for video collection tests.

Key fixtures:
- mock_engine: MagicMock engine whose begin()/connect() yield separate connections
- repository: VideoCollectionsRepository on mock_engine, statements prepared
- make_row: builds a result row with tags, frames and formats attributes
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from videos.video_collections import VideoCollectionsRepository


@pytest.fixture
def mock_engine():
    """
    MagicMock engine.

    write_conn is yielded by engine.begin() and reports rowcount 1;
    read_conn is yielded by engine.connect() and returns no row until a test sets one.
    """
    engine = MagicMock()
    write_conn = engine.begin.return_value.__enter__.return_value
    write_conn.execute.return_value.rowcount = 1
    read_conn = engine.connect.return_value.__enter__.return_value
    read_conn.execute.return_value.first.return_value = None
    engine.write_conn = write_conn
    engine.read_conn = read_conn
    return engine


@pytest.fixture
def repository(mock_engine):
    repo = VideoCollectionsRepository(engine=mock_engine)
    repo.prepare_statements()
    return repo


@pytest.fixture
def make_row():
    def factory(tags=None, frames=None, formats=None):
        return SimpleNamespace(tags=tags, frames=frames, formats=formats)
    return factory
