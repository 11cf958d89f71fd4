"""Pytest configuration and fixtures."""

import io

import pytest
from rich.console import Console

from CFWatcher.reporters import Tty
from tests.helpers import FakeEventSource


@pytest.fixture
def console():
    """Non-interactive console capturing output."""
    return Console(file=io.StringIO(), force_terminal=False, color_system=None, width=100, highlight=False)


@pytest.fixture
def live_console():
    """Interactive console capturing output."""
    return Console(file=io.StringIO(), force_terminal=True, color_system=None, width=100, height=24, highlight=False)


@pytest.fixture
def tty(console):
    return Tty(console=console)


@pytest.fixture
def live_tty(live_console):
    tty = Tty(console=live_console)
    yield tty
    tty.done(True)


@pytest.fixture
def source():
    return FakeEventSource()
