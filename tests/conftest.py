import os
import tempfile

import pytest

os.environ.setdefault('AUDIT_LOG_FILE', os.path.join(tempfile.gettempdir(), 'tvsaude-tests-audit.log'))

from tvsaude import create_app, db  # noqa: E402
from tests.fakes import ManualTimers  # noqa: E402


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def timers():
    return ManualTimers()
