"""
Module: mockserver_bdd.client

Client for the MockServer REST API.

Only the three endpoints the scenario context needs are covered:

    - ``PUT /mockserver/reset``        clear expectations and recorded requests
    - ``PUT /mockserver/expectation``  register an expectation
    - ``PUT /mockserver/verify``       assert how often a request was received

MockServer answers a failed verification with ``406 Not Acceptable`` and a
plain text explanation, which is surfaced as :class:`VerificationError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any, Protocol

import requests
from requests import Response

from mockserver_bdd.common.common import JsonDict

logger = logging.getLogger(__name__)

PutCallable = Callable[..., Response]


class MockServerError(Exception):
    """
    Raised when a MockServer request fails.

    Wraps requests exceptions so callers are not coupled to requests exception types.
    """


class VerificationError(MockServerError):
    """
    Raised when MockServer did not receive a request the expected number of times.
    """


class MockServerClientProtocol(Protocol):
    """
    Operations the scenario context needs from a MockServer client.

    Custom clients configured through ``{"class": ..., "arguments": [...]}``
    must provide these three methods.
    """

    def reset(self) -> None: ...

    def expectation(self, payload: JsonDict | list[JsonDict]) -> None: ...

    def verify(self, payload: JsonDict) -> None: ...


class MockServerClient:
    """
    Simple client for the MockServer REST API.

    Usage:

        client = MockServerClient("http://127.0.0.1:1080")
        client.reset()
        client.expectation(
            {
                "httpRequest": {"method": "GET", "path": "/users"},
                "httpResponse": {"statusCode": 200, "body": "[]"},
            }
        )
        client.verify(
            {
                "httpRequest": {"method": "GET", "path": "/users"},
                "times": {"atLeast": 1, "atMost": 1},
            }
        )
    """

    def __init__(self, base_url: str, timeout: int = 10) -> None:
        """
        :param base_url: Base URL of the MockServer instance. Trailing slashes are
            stripped.
        :param timeout: Timeout in seconds for HTTP calls.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # Swapped for a stub's put() in tests.
        self.put_method: PutCallable = requests.put

    def reset(self) -> None:
        """Clear all expectations and recorded requests."""
        logger.info("Resetting MockServer at %s", self.base_url)
        self._raise_for_status(self._put("reset"), "reset")

    def expectation(self, payload: JsonDict | list[JsonDict]) -> None:
        """
        Register one expectation, or a list of them.

        :param payload: Expectation JSON object(s) with ``httpRequest`` and
            ``httpResponse``.
        :raises MockServerError: If MockServer rejects the expectation.
        """
        logger.debug("Sending expectation: %s", payload)
        self._raise_for_status(self._put("expectation", payload), "expectation")

    def verify(self, payload: JsonDict) -> None:
        """
        Verify that a request was received a number of times.

        :param payload: Verification JSON object with ``httpRequest`` and ``times``.
        :raises VerificationError: If the request count is outside ``times``.
        :raises MockServerError: If the verification call itself fails.
        """
        logger.debug("Sending verification: %s", payload)
        response = self._put("verify", payload)

        if response.status_code == HTTPStatus.NOT_ACCEPTABLE:
            raise VerificationError(response.text)

        self._raise_for_status(response, "verify")

    def _put(self, endpoint: str, payload: Any = None) -> Response:
        url = f"{self.base_url}/mockserver/{endpoint}"

        try:
            return self.put_method(url, json=payload, timeout=self.timeout)
        except requests.RequestException as err:
            raise MockServerError(
                f"MockServer {endpoint} request failed: {err}"
            ) from err

    @staticmethod
    def _raise_for_status(response: Response, endpoint: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as err:
            raise MockServerError(
                f"MockServer {endpoint} request failed: {err.response.status_code} "
                f"{err.response.reason} {err.response.text}"
            ) from err
