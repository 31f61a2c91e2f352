"""
In-memory MockServer stub.

The stub does **not** implement the full MockServer API surface, nor its full
request matching. It covers what the scenario context uses:

* ``PUT /mockserver/reset`` clears expectations and recorded requests
* ``PUT /mockserver/expectation`` registers expectations (201 Created)
* ``PUT /mockserver/verify`` answers 202 Accepted when the recorded request count
  is within ``times``, else 406 Not Acceptable with an explanation

Matching covers ``method``, ``path``, ``queryStringParameters`` and ``headers``
(expected values must be present, extra values are allowed) and ``body``
(``JSON`` bodies compare as decoded JSON, ``STRING`` bodies compare as text).

See:
    https://app.swaggerhub.com/apis/jamesdbloom/mock-server-openapi/5.15.x
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from http.client import responses as http_responses
from typing import Any
from urllib.parse import parse_qs, urlsplit

from requests import Response
from requests.structures import CaseInsensitiveDict

from mockserver_bdd.client import MockServerError, VerificationError


def _create_response(
    status_code: int,
    headers: dict[str, str] | None = None,
    content: bytes = b"",
) -> Response:
    """
    Create a :class:`requests.Response` object for the stub.

    :param status_code: HTTP status code.
    :param headers: Response headers dictionary.
    :param content: Response body as bytes.
    :return: A :class:`requests.Response` instance.
    """
    response = Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = content  # noqa: SLF001
    response.encoding = "utf-8"
    response.reason = http_responses.get(status_code, "Unknown")
    return response


@dataclass
class RecordedRequest:
    """
    A request received by the stub on a mocked (non ``/mockserver``) path.

    :param method: HTTP method, upper case.
    :param path: Request path without query string.
    :param query: Query string parameters, as decoded by ``parse_qs``.
    :param headers: Request headers; each header may carry several values.
    :param body: Raw request body.
    """

    method: str
    path: str
    query: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "path": self.path,
            "queryStringParameters": self.query,
            "headers": self.headers,
            "body": self.body,
        }


def _multi_values(value: Any) -> dict[str, list[str]]:
    """
    Normalise MockServer key/multi-value data.

    Both the object form ``{"name": ["v1", "v2"]}`` and the array form
    ``[{"name": "name", "values": ["v1", "v2"]}]`` are accepted.
    """
    if isinstance(value, list):
        return {item["name"]: list(item.get("values", [])) for item in value}
    return {
        name: list(values) if isinstance(values, list) else [values]
        for name, values in (value or {}).items()
    }


def _contains(
    expected: dict[str, list[str]],
    actual: dict[str, list[str]],
    case_insensitive: bool = False,
) -> bool:
    if case_insensitive:
        actual = {name.lower(): values for name, values in actual.items()}

    for name, values in expected.items():
        key = name.lower() if case_insensitive else name
        if not set(values) <= set(actual.get(key, [])):
            return False
    return True


def _body_matches(expected: Any, actual: str) -> bool:
    if isinstance(expected, dict) and expected.get("type") == "STRING":
        return bool(expected.get("string") == actual)

    if isinstance(expected, str):
        return expected == actual

    wanted = expected
    if isinstance(expected, dict) and "json" in expected:
        wanted = expected["json"]

    try:
        if isinstance(wanted, str):
            wanted = json.loads(wanted)
        return bool(json.loads(actual) == wanted)
    except json.JSONDecodeError:
        return False


def matches(matcher: dict[str, Any], request: RecordedRequest) -> bool:
    """
    Check a recorded request against an ``httpRequest`` matcher.

    :param matcher: The ``httpRequest`` part of an expectation or verification.
    :param request: The recorded request.
    :return: ``True`` if every part present in ``matcher`` matches.
    """
    if "method" in matcher and matcher["method"].upper() != request.method:
        return False

    if "path" in matcher and matcher["path"] != request.path:
        return False

    if "queryStringParameters" in matcher and not _contains(
        _multi_values(matcher["queryStringParameters"]), request.query
    ):
        return False

    if "headers" in matcher and not _contains(
        _multi_values(matcher["headers"]), request.headers, case_insensitive=True
    ):
        return False

    return "body" not in matcher or _body_matches(matcher["body"], request.body)


def _render_body(body: Any) -> tuple[bytes, str | None]:
    """Return the response body bytes and a default content type."""
    if body is None:
        return b"", None
    if isinstance(body, str):
        return body.encode("utf-8"), "text/plain; charset=utf-8"
    if isinstance(body, dict) and body.get("type") == "STRING":
        return str(body.get("string", "")).encode("utf-8"), "text/plain; charset=utf-8"
    if isinstance(body, dict) and body.get("type") == "JSON":
        body = body.get("json")
        if isinstance(body, str):
            return body.encode("utf-8"), "application/json"
    return json.dumps(body).encode("utf-8"), "application/json"


class MockServerStub:
    """
    Minimal in-memory stub for MockServer.

    It satisfies :class:`mockserver_bdd.client.MockServerClientProtocol`, so it can
    be handed straight to :class:`mockserver_bdd.context.MockServerContext`
    (directly, or as ``{"class": "stubs.stub_mockserver.MockServerStub"}``), and it
    also offers :meth:`put`, matching the ``requests.put`` signature, for use as
    :attr:`mockserver_bdd.client.MockServerClient.put_method`.

    Requests to mocked paths are simulated with :meth:`handle`.
    """

    def __init__(self, base_url: str | None = None) -> None:
        """
        Create a new stub instance.

        :param base_url: Accepted for configuration compatibility with
            :class:`mockserver_bdd.client.MockServerClient`, ignored otherwise.
        """
        self.base_url = base_url
        self.expectations: list[dict[str, Any]] = []
        self.requests: list[RecordedRequest] = []
        self.reset_count = 0

    # ---------------------------
    # MockServerClientProtocol
    # ---------------------------

    def reset(self) -> None:
        self.expectations.clear()
        self.requests.clear()
        self.reset_count += 1

    def expectation(self, payload: dict[str, Any] | list[dict[str, Any]]) -> None:
        """
        Register expectations.

        :param payload: One expectation or a list of them.
        :raises MockServerError: If an expectation has no ``httpRequest``.
        """
        expectations = payload if isinstance(payload, list) else [payload]
        for expectation in expectations:
            if not isinstance(expectation, dict) or "httpRequest" not in expectation:
                raise MockServerError(f"incorrect expectation json format: {expectation}")
            self.expectations.append(expectation)

    def verify(self, payload: dict[str, Any]) -> None:
        """
        Check the number of recorded requests matching ``payload["httpRequest"]``.

        :param payload: Verification with ``httpRequest`` and ``times``.
        :raises VerificationError: If the count is outside ``times``.
        """
        matcher = payload.get("httpRequest", {})
        times = payload.get("times", {})
        count = self.count(matcher)

        at_least = times.get("atLeast")
        at_most = times.get("atMost")
        if (at_least is not None and count < at_least) or (
            at_most is not None and count > at_most
        ):
            raise VerificationError(
                f"Request not found {self._describe_times(at_least, at_most)}, "
                f"expected:<{json.dumps(matcher)}> but was:<"
                f"{json.dumps([request.to_dict() for request in self.requests])}>"
            )

    # ---------------------------
    # Public API for tests
    # ---------------------------

    def count(self, matcher: dict[str, Any]) -> int:
        return sum(1 for request in self.requests if matches(matcher, request))

    def handle(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | dict[str, list[str]] | None = None,
        body: str = "",
    ) -> Response:
        """
        Simulate a request from the system under test.

        The request is recorded, then answered by the first expectation that
        matches it, or with 404 when none does.

        :param method: HTTP method.
        :param url: Request path, optionally with a query string.
        :param headers: Request headers.
        :param body: Raw request body.
        :return: A :class:`requests.Response`.
        """
        parts = urlsplit(url)
        request = RecordedRequest(
            method=method.upper(),
            path=parts.path,
            query=parse_qs(parts.query, keep_blank_values=True),
            headers=_multi_values(headers),
            body=body,
        )
        return self.respond(request)

    def respond(self, request: RecordedRequest) -> Response:
        self.requests.append(request)

        for expectation in self.expectations:
            if matches(expectation["httpRequest"], request):
                return self._mocked_response(expectation.get("httpResponse", {}))

        return _create_response(status_code=404)

    def put(
        self,
        url: str,
        json: Any = None,  # noqa: A002 (mirrors the requests.put keyword)
        timeout: int | None = None,  # noqa: ARG002 (unused in stub)
    ) -> Response:
        """
        Convenience method matching requests.put signature for easy monkeypatching.

        Routes ``/mockserver/reset``, ``/mockserver/expectation`` and
        ``/mockserver/verify`` to the stub, answering with MockServer's status
        codes.

        :param url: Request URL.
        :param json: JSON request body.
        :param timeout: Timeout value.
        :return: A :class:`requests.Response`.
        """
        status_code, text = self.admin(urlsplit(url).path, json)
        return _create_response(
            status_code=status_code,
            headers={"Content-Type": "text/plain; charset=utf-8"},
            content=text.encode("utf-8"),
        )

    def admin(self, path: str, payload: Any) -> tuple[int, str]:
        """
        Run a ``/mockserver/...`` control request.

        :param path: Request path, e.g. ``/mockserver/verify``.
        :param payload: Decoded JSON body.
        :return: Status code and plain text body.
        """
        endpoint = path.rstrip("/").rsplit("/", 1)[-1]

        if endpoint == "reset":
            self.reset()
            return 200, ""

        if endpoint == "expectation":
            try:
                self.expectation(payload)
            except MockServerError as err:
                return 400, str(err)
            return 201, ""

        if endpoint == "verify":
            try:
                self.verify(payload or {})
            except VerificationError as err:
                return 406, str(err)
            return 202, ""

        return 404, f"unknown MockServer endpoint {path}"

    # ---------------------------
    # Internal helpers
    # ---------------------------

    @staticmethod
    def _mocked_response(http_response: dict[str, Any]) -> Response:
        content, content_type = _render_body(http_response.get("body"))

        headers = {
            name: values[0]
            for name, values in _multi_values(http_response.get("headers")).items()
            if values
        }
        if content_type and not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = content_type

        return _create_response(
            status_code=int(http_response.get("statusCode", 200)),
            headers=headers,
            content=content,
        )

    @staticmethod
    def _describe_times(at_least: int | None, at_most: int | None) -> str:
        if at_least is not None and at_least == at_most:
            return f"exactly {at_least} times"
        if at_most is None:
            return f"at least {at_least} times"
        if at_least is None:
            return f"at most {at_most} times"
        return f"between {at_least} and {at_most} times"
