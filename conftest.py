# Make `import core.*` work for the test modules that live beside the code.
import os
import sys

import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)


class RecordingLogger:
    """RequestLogger that keeps every call for assertions."""

    def __init__(self):
        self.routes = []
        self.redirects = []
        self.errors = []

    def log_route(self, route, method, path, *, shape=None):
        self.routes.append((route, method, path, shape))

    def log_redirect(self, source, location, *, followed):
        self.redirects.append((source, location, followed))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


@pytest.fixture
def recording_logger():
    """Provide a fresh RecordingLogger."""
    return RecordingLogger()
