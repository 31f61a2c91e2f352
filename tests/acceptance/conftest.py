"""Fixtures shared by the acceptance scenarios."""

from collections.abc import Iterator
from dataclasses import dataclass

import pytest
import requests

from mockserver_bdd.client import MockServerClient
from mockserver_bdd.context import MockServerContext


@dataclass
class ResponseContext:
    """Holds the last response received by the application under test."""

    response: requests.Response | None = None


@pytest.fixture
def response_context() -> ResponseContext:
    return ResponseContext()


@pytest.fixture
def mockserver(mockserver_client: MockServerClient) -> Iterator[MockServerContext]:
    """
    Scenario context wrapped in the before/after scenario lifecycle.

    The after-scenario check runs on teardown, so a scenario that leaves an
    expectation unsent errors out.
    """
    context = MockServerContext(mockserver_client)
    context.before_scenario()
    yield context
    context.after_scenario()
