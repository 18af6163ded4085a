"""Shared test fixtures for typedqs."""
import io

import pytest


def make_environ(query_string="", path="/", method="GET", host="localhost",
                 port=80, scheme="http"):
    """Create a minimal WSGI environ dict carrying ``query_string``."""
    if isinstance(query_string, bytes):
        query_string = query_string.decode("latin-1")
    return {
        "REQUEST_METHOD": method,
        "PATH_INFO": path,
        "QUERY_STRING": query_string,
        "SERVER_NAME": host,
        "SERVER_PORT": str(port),
        "HTTP_HOST": f"{host}:{port}" if port != 80 else host,
        "wsgi.version": (1, 0),
        "wsgi.url_scheme": scheme,
        "wsgi.input": io.BytesIO(b""),
        "wsgi.errors": io.BytesIO(),
        "wsgi.multithread": False,
        "wsgi.multiprocess": False,
        "wsgi.run_once": False,
        "SCRIPT_NAME": "",
    }


@pytest.fixture(name="make_environ")
def make_environ_fixture():
    return make_environ
