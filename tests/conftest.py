"""Pytest configuration - consistent CWD, headless Qt, shared fixtures.

Qt is forced onto the offscreen platform before anything imports it, so the
surface and scheduler tests run without a display.
"""
from __future__ import annotations

import os
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5.QtWidgets import QApplication

from fiberwalk.fibers.rng import XorShift32
from fiberwalk.fibers.scheduler import FrameScheduler
from tests.helpers.recording_surface import RecordingSurface

ROOT = Path(__file__).resolve().parents[1]


def pytest_sessionstart(session):
    os.chdir(ROOT)


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One QApplication for the whole session (QTimer, QImage painting, widgets)."""
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def surface():
    """Fake surface that records draw calls."""
    return RecordingSurface(200, 200)


@pytest.fixture
def rng():
    """Deterministic random source."""
    return XorShift32(12345)


@pytest.fixture
def scheduler():
    """Immediate-mode scheduler (no event loop needed)."""
    return FrameScheduler(mode="immediate")
