"""Pytest configuration and shared fixtures for integration and acceptance tests."""

import socket
import threading
import time

import pytest
import requests
from stubs.stub_mockserver import MockServerStub
from stubs.stub_mockserver_app import create_app

from mockserver_bdd.client import MockServerClient


@pytest.fixture(scope="session")
def mockserver_stub() -> MockServerStub:
    return MockServerStub()


@pytest.fixture(scope="session")
def mockserver_url(mockserver_stub: MockServerStub) -> str:
    """Start the MockServer stub app in a separate thread and return its URL.

    This fixture is used by tests that need to make real HTTP requests, both
    MockServer control calls and calls from the "system under test".
    """
    # Use port 0 to let the OS assign a free port
    sock = socket.socket()
    sock.bind(("", 0))
    port = sock.getsockname()[1]
    sock.close()

    app = create_app(mockserver_stub)

    def run_app() -> None:
        app.run(host="127.0.0.1", port=port, debug=False, use_reloader=False)

    # Daemon threads automatically terminate when the test process exits,
    # so no explicit cleanup is needed
    thread = threading.Thread(target=run_app, daemon=True)
    thread.start()

    url = f"http://127.0.0.1:{port}"
    max_retries = 20
    retry_delay = 0.1  # 100ms between retries

    for _ in range(max_retries):
        try:
            response = requests.put(f"{url}/mockserver/reset", timeout=1)
            if response.status_code == 200:
                break
        except requests.exceptions.RequestException:
            # Server not ready yet, wait and retry
            time.sleep(retry_delay)
    else:
        raise RuntimeError(f"MockServer stub failed to start on {url}")

    return url


@pytest.fixture
def mockserver_client(
    mockserver_url: str, mockserver_stub: MockServerStub
) -> MockServerClient:
    """A real HTTP client for the stub app, starting from a clean stub."""
    mockserver_stub.reset()
    return MockServerClient(mockserver_url, timeout=2)
