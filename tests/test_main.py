"""
===============================================
Comprehensive pytest suite for main.py
===============================================

Sections:
---------
1. Unit tests - Individual method testing
2. Integration tests - Walkthrough against an in-memory repository
3. CLI tests - Command-line interface testing
4. Edge case tests - Failures and interruptions

Available markers:
------------------
unit, integration, edge_case, smoke

Test Coverage:
--------------
CollectionsSampleOrchestrator:
- Prerequisite verification (availability wait, connection check)
- Setup orchestration (run_setup, error wrapping, connection cleanup)
- Walkthrough order and final row state
- run_sample repository cleanup

main() CLI:
- Argument parsing (--setup, --sample, --keep-data, --force-recreate, --verbose, --log-file)
- Exit code handling (success=0, error=1, interrupt=130)

How to Execute:
---------------
All tests:          python -m pytest tests/test_main.py -v
By category:        python -m pytest tests/test_main.py -m unit
Specific test:      python -m pytest tests/test_main.py::test_walkthrough_final_state
With coverage:      python -m pytest tests/test_main.py --cov=main

Note: Use 'python -m pytest' (not just 'pytest') to ensure correct Python path resolution.
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from main import CollectionsSampleOrchestrator, OrchestratorError, main
from models.video_models import VideoFormat
from setup.setup_orchestrator import SetupError
from utils.database_utils import DatabaseConnectionError

# ====================
# Mock Helper Classes
# ====================

class InMemoryRepository:
    """
    Repository double holding rows in a dict and recording every call.

    Mirrors the collection semantics: tags are a set, frames a list,
    formats a dict of VideoFormat.
    """
    def __init__(self):
        self.rows = {}
        self.calls = []
        self.closed = False

    def prepare_statements(self):
        self.calls.append('prepare_statements')

    def create_video(self, dto):
        self.calls.append('create_video')
        self.rows[dto.videoid] = {
            'tags': set(dto.tags),
            'frames': list(dto.frames),
            'formats': dict(dto.formats),
        }

    def add_tag(self, videoid, tag):
        self.calls.append('add_tag')
        self.rows[videoid]['tags'].add(tag)

    def remove_tag(self, videoid, tag):
        self.calls.append('remove_tag')
        self.rows[videoid]['tags'].discard(tag)

    def update_all_frames(self, videoid, frames):
        self.calls.append('update_all_frames')
        self.rows[videoid]['frames'] = list(frames)

    def append_frame(self, videoid, frame):
        self.calls.append('append_frame')
        self.rows[videoid]['frames'].append(frame)

    def update_frame(self, videoid, index, frame):
        self.calls.append('update_frame')
        self.rows[videoid]['frames'][index] = frame

    def add_format(self, videoid, key, video_format):
        self.calls.append('add_format')
        self.rows[videoid]['formats'][key] = video_format

    def remove_format(self, videoid, key):
        self.calls.append('remove_format')
        self.rows[videoid]['formats'].pop(key, None)

    def list_tags(self, videoid):
        return set(self.rows[videoid]['tags'])

    def list_frames(self, videoid):
        return list(self.rows[videoid]['frames'])

    def list_formats(self, videoid):
        return dict(self.rows[videoid]['formats'])

    def list_formats_with_codec(self, videoid):
        return dict(self.rows[videoid]['formats'])

    def close(self):
        self.closed = True


# ====================
# Fixtures
# ====================

@pytest.fixture
def orchestrator():
    return CollectionsSampleOrchestrator(max_retries=1, retry_delay=0)


@pytest.fixture
def mock_database_utils():
    """Patch the connectivity helpers used by verify_prerequisites."""
    with patch('main.wait_for_database', return_value=True) as wait, \
         patch('main.verify_connection', return_value=(True, "Connected to PostgreSQL")) as verify, \
         patch('main.get_database_connection_info', return_value={
             'host': 'localhost',
             'port': 5432,
             'user': 'postgres',
             'admin_database': 'postgres',
             'keyspace_database': 'killrvideo',
         }):
        yield {'wait': wait, 'verify': verify}


@pytest.fixture
def mock_setup_orchestrator():
    """Patch SetupOrchestrator with a MagicMock returning a successful run."""
    with patch('main.SetupOrchestrator') as mock_cls:
        mock_cls.return_value.run_complete_setup.return_value = {
            'database': True, 'schema': True, 'truncate': True
        }
        yield mock_cls


@pytest.fixture
def cli(monkeypatch):
    """Run main() with the given arguments, logging setup patched out."""
    def run(*args):
        monkeypatch.setattr(sys, 'argv', ['main.py', *args])
        return main()

    with patch('main.setup_logging') as mock_setup_logging, \
         patch('main.CollectionsSampleOrchestrator') as mock_cls:
        run.setup_logging = mock_setup_logging
        run.orchestrator = mock_cls.return_value
        run.orchestrator.run_setup.return_value = {'database': True, 'schema': True, 'truncate': True}
        yield run


# ===============
# 1. UNIT TESTS
# ===============

@pytest.mark.unit
def test_orchestrator_init(orchestrator):
    assert orchestrator.max_retries == 1
    assert orchestrator.retry_delay == 0
    assert orchestrator.setup_orchestrator is None


@pytest.mark.unit
def test_verify_prerequisites_success(orchestrator, mock_database_utils):
    """
    Test prerequisites pass when the server answers.
    """
    assert orchestrator.verify_prerequisites() is True
    mock_database_utils['wait'].assert_called_once_with(max_retries=1, retry_delay=0)


@pytest.mark.unit
def test_verify_prerequisites_wait_timeout(orchestrator, mock_database_utils):
    """
    Test a server that never comes up raises OrchestratorError.
    """
    mock_database_utils['wait'].side_effect = DatabaseConnectionError('gave up')

    with pytest.raises(OrchestratorError, match='gave up'):
        orchestrator.verify_prerequisites()


@pytest.mark.unit
def test_verify_prerequisites_connection_failure(orchestrator, mock_database_utils):
    mock_database_utils['verify'].return_value = (False, 'PostgreSQL server not available')

    with pytest.raises(OrchestratorError, match='not available'):
        orchestrator.verify_prerequisites()


@pytest.mark.unit
def test_run_setup_passes_flags(orchestrator, mock_setup_orchestrator):
    """
    Test run_setup forwards flags and closes setup connections.
    """
    results = orchestrator.run_setup(truncate=False, force_recreate=True)

    assert results['schema'] is True
    instance = mock_setup_orchestrator.return_value
    instance.run_complete_setup.assert_called_once_with(truncate=False, force_recreate=True)
    instance.close_connections.assert_called_once()


@pytest.mark.unit
def test_run_setup_wraps_setup_error(orchestrator, mock_setup_orchestrator):
    """
    Test SetupError becomes OrchestratorError and connections are still closed.
    """
    instance = mock_setup_orchestrator.return_value
    instance.run_complete_setup.side_effect = SetupError('type failed')

    with pytest.raises(OrchestratorError, match='Setup failed: type failed'):
        orchestrator.run_setup()

    instance.close_connections.assert_called_once()


# =======================
# 2. INTEGRATION TESTS
# =======================

@pytest.mark.integration
def test_walkthrough_final_state(orchestrator):
    """
    Test the walkthrough leaves the row in its documented final state.
    """
    repo = InMemoryRepository()
    state = orchestrator.run_walkthrough(repo)

    assert state['tags'] == {'cassandra', 'OK'}
    assert state['frames'] == [1, 128, 3, 4]
    assert state['formats'] == {'mp4': VideoFormat(640, 480), 'hd': VideoFormat(1920, 1080)}
    assert state['videoid'] in repo.rows


@pytest.mark.integration
def test_walkthrough_operation_order(orchestrator):
    """
    Test set, then map, then list operations run in order.
    """
    repo = InMemoryRepository()
    orchestrator.run_walkthrough(repo)

    assert repo.calls == [
        'prepare_statements',
        'create_video',
        'add_tag', 'remove_tag',
        'add_format', 'remove_format',
        'update_all_frames', 'append_frame', 'update_frame',
    ]


@pytest.mark.integration
def test_run_sample_closes_repository(orchestrator, mock_database_utils, mock_setup_orchestrator):
    repo = InMemoryRepository()
    with patch('main.VideoCollectionsRepository', return_value=repo):
        state = orchestrator.run_sample()

    assert state['frames'] == [1, 128, 3, 4]
    assert repo.closed is True


# ================
# 3. CLI TESTS
# ================

@pytest.mark.smoke
def test_cli_default_runs_sample(cli):
    assert cli() == 0
    cli.orchestrator.run_sample.assert_called_once_with(truncate=True, force_recreate=False)


@pytest.mark.unit
def test_cli_setup_only(cli):
    assert cli('--setup') == 0
    cli.orchestrator.verify_prerequisites.assert_called_once()
    cli.orchestrator.run_setup.assert_called_once_with(truncate=True, force_recreate=False)
    cli.orchestrator.run_sample.assert_not_called()


@pytest.mark.unit
def test_cli_setup_with_failed_step(cli):
    cli.orchestrator.run_setup.return_value = {'database': True, 'schema': False}
    assert cli('--setup') == 1


@pytest.mark.unit
def test_cli_keep_data_and_force_recreate(cli):
    assert cli('--keep-data', '--force-recreate') == 0
    cli.orchestrator.run_sample.assert_called_once_with(truncate=False, force_recreate=True)


@pytest.mark.unit
def test_cli_setup_and_sample_runs_sample(cli):
    """
    Test --setup together with --sample runs the full sample.
    """
    assert cli('--setup', '--sample') == 0
    cli.orchestrator.run_sample.assert_called_once()


@pytest.mark.unit
def test_cli_verbose_and_log_file(cli):
    cli('--verbose', '--log-file', 'sample.log')
    cli.setup_logging.assert_called_once_with(log_level='DEBUG', log_file='sample.log')


# ===================
# 4. EDGE CASE TESTS
# ===================

@pytest.mark.edge_case
def test_cli_orchestrator_error(cli):
    cli.orchestrator.run_sample.side_effect = OrchestratorError('no server')
    assert cli() == 1


@pytest.mark.edge_case
def test_cli_keyboard_interrupt(cli):
    cli.orchestrator.run_sample.side_effect = KeyboardInterrupt
    assert cli() == 130


@pytest.mark.edge_case
def test_cli_unexpected_error(cli):
    cli.orchestrator.run_sample.side_effect = RuntimeError('bug')
    assert cli() == 1


@pytest.mark.edge_case
def test_run_sample_closes_repository_on_failure(orchestrator, mock_database_utils, mock_setup_orchestrator):
    """
    Test the repository is closed even when an operation fails.
    """
    repo = MagicMock()
    repo.create_video.side_effect = RuntimeError('insert failed')
    with patch('main.VideoCollectionsRepository', return_value=repo):
        with pytest.raises(RuntimeError):
            orchestrator.run_sample()

    repo.close.assert_called_once()
