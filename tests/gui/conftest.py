"""
Pytest configuration and fixtures for Qt tests.

Provides a shared QApplication on the offscreen platform so worker signals
can be delivered through a real event loop.
"""
import os
import sys
import pytest

# Ensure offscreen rendering for GUI tests by default
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

# Import Qt before any application code to set platform
from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication


@pytest.fixture(scope='session')
def qapp():
    """
    Session-wide QApplication instance.

    Creates a single QApplication for all GUI tests to share,
    preventing "QApplication already exists" errors.
    """
    app = QCoreApplication.instance()
    if app is None:
        app = QApplication(sys.argv)

    yield app

    # Note: We don't call app.quit() because pytest-qt manages the lifecycle


@pytest.fixture(scope='function')
def qtbot(qapp, request):
    """Function-scoped qtbot sharing the session QApplication."""
    from pytestqt.qtbot import QtBot

    bot = QtBot(request)
    yield bot

    # Let queued cross-thread signals and deleteLater calls drain
    qapp.processEvents()


def pytest_collection_modifyitems(config, items):
    """Mark everything under tests/gui so it can be deselected with -m 'not gui'."""
    for item in items:
        if "tests/gui" in str(item.fspath) and not item.get_closest_marker("gui"):
            item.add_marker(pytest.mark.gui)
