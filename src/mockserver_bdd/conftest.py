"""Pytest configuration and shared fixtures for unit tests."""

from pathlib import Path

import pytest
from stubs.stub_mockserver import MockServerStub

from mockserver_bdd.client import MockServerClient
from mockserver_bdd.context import MockServerContext


@pytest.fixture
def stub() -> MockServerStub:
    return MockServerStub()


@pytest.fixture
def client(stub: MockServerStub) -> MockServerClient:
    """
    Create a MockServerClient whose HTTP calls are routed into the stub.

    :param stub: Stub backend fixture.
    :return: MockServerClient configured with the stub.
    """
    client = MockServerClient(base_url="http://mockserver.test:1080/")
    client.put_method = stub.put
    return client


@pytest.fixture
def mockserver(stub: MockServerStub, tmp_path: Path) -> MockServerContext:
    """
    Create a scenario context backed directly by the stub, as a scenario would
    see it right after the ``before_scenario`` hook ran.

    The feature file is placed in ``tmp_path`` so fixture files can be written
    next to it.
    """
    context = MockServerContext(stub)
    context.before_scenario()
    context.store_feature_file(tmp_path / "users.feature")
    return context
