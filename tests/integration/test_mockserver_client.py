"""Integration tests for the MockServer client against the stub app over HTTP."""

from __future__ import annotations

import pytest
import requests
from stubs.stub_mockserver import MockServerStub

from mockserver_bdd.client import MockServerClient, MockServerError, VerificationError
from mockserver_bdd.context import MockServerContext
from mockserver_bdd.expectation import ExpectationBuilder, build_verification


@pytest.fixture
def mockserver(mockserver_client: MockServerClient) -> MockServerContext:
    context = MockServerContext(mockserver_client)
    context.before_scenario()
    return context


class TestMockServerClientIntegration:
    """Integration tests for expectation, verification and reset over HTTP."""

    def test_expectation_is_served_to_the_system_under_test(
        self, mockserver_client: MockServerClient, mockserver_url: str
    ) -> None:
        """
        Test that a registered expectation answers matching requests.

        :param mockserver_client: HTTP client fixture.
        :param mockserver_url: Base URL of the running stub.
        """
        builder = ExpectationBuilder()
        builder.expected_request().method("GET").url("/users?user.id=5")
        builder.mocked_response().body_json([{"id": 5, "name": "Zidane"}])

        mockserver_client.expectation(builder.to_dict())

        response = requests.get(
            f"{mockserver_url}/users", params={"user.id": "5"}, timeout=2
        )
        assert response.status_code == 200
        assert response.json() == [{"id": 5, "name": "Zidane"}]

    def test_underscored_key_does_not_match_dotted_expectation(
        self, mockserver_client: MockServerClient, mockserver_url: str
    ) -> None:
        builder = ExpectationBuilder()
        builder.expected_request().method("GET").url("/users?user.id=5")

        mockserver_client.expectation(builder.to_dict())

        response = requests.get(f"{mockserver_url}/users?user_id=5", timeout=2)
        assert response.status_code == 404

    def test_verify_counts_received_requests(
        self, mockserver_client: MockServerClient, mockserver_url: str
    ) -> None:
        requests.put(f"{mockserver_url}/sso/users/1", json={}, timeout=2)

        mockserver_client.verify(build_verification("PUT", "/sso/users/1", 1))

        with pytest.raises(VerificationError, match="exactly 2 times"):
            mockserver_client.verify(build_verification("PUT", "/sso/users/1", 2))

    def test_reset_forgets_expectations_and_requests(
        self,
        mockserver_client: MockServerClient,
        mockserver_stub: MockServerStub,
        mockserver_url: str,
    ) -> None:
        builder = ExpectationBuilder()
        builder.expected_request().method("GET").path("/health")
        mockserver_client.expectation(builder.to_dict())
        requests.get(f"{mockserver_url}/health", timeout=2)

        mockserver_client.reset()

        assert mockserver_stub.expectations == []
        mockserver_client.verify(build_verification("GET", "/health", 0))

    def test_invalid_expectation_is_rejected(
        self, mockserver_client: MockServerClient
    ) -> None:
        with pytest.raises(MockServerError, match="400"):
            mockserver_client.expectation({"httpResponse": {"statusCode": 200}})

    def test_unreachable_server_raises_mockserver_error(self) -> None:
        client = MockServerClient("http://127.0.0.1:9", timeout=1)

        with pytest.raises(MockServerError):
            client.reset()


class TestScenarioContextIntegration:
    """A scenario's worth of step operations against the stub app."""

    def test_mock_call_and_verify(
        self, mockserver: MockServerContext, mockserver_url: str
    ) -> None:
        mockserver.will_receive_header("Content-Type", "application/json")
        mockserver.will_receive_json_payload('{"name": "Zidane edited"}')
        mockserver.request_will_return_json(
            "PATCH", "/users/1", '{"id": 1, "name": "Zidane edited"}'
        )

        response = requests.patch(
            f"{mockserver_url}/users/1", json={"name": "Zidane edited"}, timeout=2
        )

        assert response.status_code == 200
        assert response.json() == {"id": 1, "name": "Zidane edited"}
        mockserver.request_should_have_been_called("PATCH", "/users/1", 1)

        mockserver.after_scenario()

        assert requests.patch(
            f"{mockserver_url}/users/1", json={"name": "Zidane edited"}, timeout=2
        ).status_code == 404

    def test_list_query_parameters_are_mocked_and_verified(
        self, mockserver: MockServerContext, mockserver_url: str
    ) -> None:
        mockserver.request_will_return_json(
            "GET", "/users?ids[]=1&ids[]=2", '[{"id": 1}, {"id": 2}]'
        )

        response = requests.get(f"{mockserver_url}/users?ids[]=1&ids[]=2", timeout=2)

        assert response.status_code == 200
        assert response.json() == [{"id": 1}, {"id": 2}]
        mockserver.request_should_have_been_called("GET", "/users?ids[]=1&ids[]=2", 1)

    def test_indexed_query_parameters_are_mocked_and_verified(
        self, mockserver: MockServerContext, mockserver_url: str
    ) -> None:
        mockserver.request_will_return_json("GET", "/search?a.b[0]=x&a.b[1]=y", "[]")

        response = requests.get(
            f"{mockserver_url}/search?a.b[0]=x&a.b[1]=y", timeout=2
        )

        assert response.status_code == 200
        mockserver.request_should_have_been_called(
            "GET", "/search?a.b[0]=x&a.b[1]=y", 1
        )
