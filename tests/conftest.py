"""
Shared pytest configuration and fixtures for all tests.
"""

import logging
import sys
from pathlib import Path

import pytest

# Add project root to sys.path to enable importing project modules
# This allows tests to import from 'setup', 'core', 'sql', etc. without installation
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests - isolated function-level tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interactions")
    config.addinivalue_line("markers", "smoke: Smoke tests - basic functionality checks")
    config.addinivalue_line("markers", "edge_case: Edge case tests - boundary conditions")


def _project_handlers(handlers):
    """Handlers not installed by pytest's own log capturing."""
    return [h for h in handlers if not type(h).__module__.startswith('_pytest')]


@pytest.fixture
def restore_root_logger():
    """Restore root logger handlers and level after a test reconfigures logging."""
    root = logging.getLogger()
    handlers = _project_handlers(root.handlers)
    level = root.level
    yield root
    current = _project_handlers(root.handlers)
    for handler in current:
        if handler not in handlers:
            handler.close()
    pytest_handlers = [h for h in root.handlers if h not in current]
    root.handlers[:] = pytest_handlers + handlers
    root.setLevel(level)
