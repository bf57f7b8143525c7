import ezdxf
import pytest

from cutquote import create_app


@pytest.fixture(scope='session')
def app():
    app = create_app({'TESTING': True})
    return app


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture
def dxf_doc():
    """A fresh in-memory DXF document; add entities to its modelspace."""
    return ezdxf.new()
