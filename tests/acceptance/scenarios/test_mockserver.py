"""
Provides the scenario bindings for the MockServer expectations feature file.
"""

from pytest_bdd import scenario

from tests.acceptance.steps.mockserver_steps import *  # noqa: F403 - Required to import all MockServer steps.


@scenario("mockserver.feature", "Mocked json is returned and the call is verified")
def test_mocked_json_is_verified() -> None:
    # No body required here as this method simply provides a binding to the BDD step
    pass


@scenario("mockserver.feature", "Request headers and payload are part of the expectation")
def test_headers_and_payload_are_matched() -> None:
    # No body required here as this method simply provides a binding to the BDD step
    pass


@scenario("mockserver.feature", "Requests without an expectation are not mocked")
def test_unmocked_request() -> None:
    # No body required here as this method simply provides a binding to the BDD step
    pass
