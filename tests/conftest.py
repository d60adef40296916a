# Minimal conftest providing a fallback 'qtbot' fixture if pytest-qt is not installed,
# plus the deterministic clock and motion fixtures the chart engine tests share.

import contextlib
import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from donation_charts.charting.animation import ManualClock  # noqa: E402
from donation_charts.design import reduced_motion  # noqa: E402

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except Exception:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except Exception:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv)  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        yield Bot()
        for w in widgets:
            w.close()
        app.processEvents()


@pytest.fixture(autouse=True)
def _full_motion():
    """Run every test with animations on unless it opts into reduced motion."""
    with reduced_motion.temporarily_reduced_motion(False):
        yield


@pytest.fixture
def clock():
    return ManualClock()
