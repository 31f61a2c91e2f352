"""
Builders for MockServer expectation and verification payloads.

The payloads follow the MockServer REST API JSON format:

* ``httpRequest`` - request matcher (method, path, query string parameters,
  headers, body)
* ``httpResponse`` - canned response (status code, headers, body)
* ``times`` - bounds used by ``PUT /mockserver/verify``

See:
    https://app.swaggerhub.com/apis/jamesdbloom/mock-server-openapi/5.15.x
"""

from __future__ import annotations

from typing import Any
from urllib.parse import parse_qsl, urlsplit

from mockserver_bdd.common.common import JsonDict
from mockserver_bdd.common.query import QueryValue, parse_query_string


def _json_body(data: Any) -> JsonDict:
    return {"type": "JSON", "json": data}


def _string_body(text: str) -> JsonDict:
    return {"type": "STRING", "string": text}


def _bracket_prefixes(query: str) -> set[str]:
    """
    Collect every ``...]``-terminated prefix of the decoded keys in ``query``.

    ``a[][x]=1`` gives ``{"a[]", "a[][x]"}``.
    """
    prefixes: set[str] = set()
    for key, _ in parse_qsl(query, keep_blank_values=True):
        key = key.lstrip(" ")
        close = key.find("]")
        while close != -1:
            prefixes.add(key[: close + 1])
            close = key.find("]", close + 1)
    return prefixes


def _flatten_parameter(
    name: str, value: QueryValue, raw_keys: set[str]
) -> list[tuple[str, list[str]]]:
    """
    Turn one parsed query entry back into MockServer ``name -> values`` pairs.

    Names are rebuilt with brackets as they appear on the wire: mapping keys
    become ``name[key]``, list items ``name[]`` when the query appended them
    and ``name[index]`` otherwise. ``raw_keys`` holds the bracketed key
    prefixes of the raw query, see :func:`_bracket_prefixes`.
    """
    if isinstance(value, str):
        return [(name, [value])]

    if isinstance(value, dict):
        pairs: list[tuple[str, list[str]]] = []
        for key, item in value.items():
            pairs.extend(_flatten_parameter(f"{name}[{key}]", item, raw_keys))
        return pairs

    pairs = []
    for index, item in enumerate(value):
        child = f"{name}[]" if f"{name}[]" in raw_keys else f"{name}[{index}]"
        pairs.extend(_flatten_parameter(child, item, raw_keys))
    return pairs


class ExpectedRequest:
    """
    Request matcher sent as the ``httpRequest`` part of an expectation.

    All setters return ``self`` so calls can be chained::

        ExpectedRequest().method("GET").path("/users").add_header("Accept", "*/*")
    """

    def __init__(self) -> None:
        self._method: str | None = None
        self._path: str | None = None
        self._query_string_parameters: dict[str, list[str]] = {}
        self._headers: dict[str, list[str]] = {}
        self._body: JsonDict | None = None

    def method(self, method: str) -> ExpectedRequest:
        self._method = method.upper()
        return self

    def path(self, path: str) -> ExpectedRequest:
        self._path = path
        return self

    def add_header(self, name: str, value: str) -> ExpectedRequest:
        self._headers.setdefault(name, []).append(value)
        return self

    def add_query_string_parameter(
        self, name: str, values: list[str]
    ) -> ExpectedRequest:
        self._query_string_parameters.setdefault(name, []).extend(values)
        return self

    def add_query_string_parameters_from_string(self, query: str) -> ExpectedRequest:
        """
        Add every parameter of a raw query string.

        Key names are kept verbatim, so ``user.id=5`` expects a ``user.id``
        parameter rather than ``user_id``, and ``ids[]=1&ids[]=2`` expects two
        ``ids[]`` values.

        :param query: Raw query string, without the leading ``?``.
        :returns: ``self``.
        """
        raw_keys = _bracket_prefixes(query)
        for name, value in parse_query_string(query).items():
            for flat_name, values in _flatten_parameter(name, value, raw_keys):
                self.add_query_string_parameter(flat_name, values)
        return self

    def url(self, url: str) -> ExpectedRequest:
        """
        Set the path, and query string parameters if any, from a URL or path.

        :param url: Path such as ``/users?page=2``; scheme and host are ignored.
        :returns: ``self``.
        """
        parts = urlsplit(url)
        self.path(parts.path)
        if parts.query:
            self.add_query_string_parameters_from_string(parts.query)
        return self

    def body_json(self, data: Any) -> ExpectedRequest:
        self._body = _json_body(data)
        return self

    def body_raw(self, raw: str) -> ExpectedRequest:
        self._body = _string_body(raw)
        return self

    def to_dict(self) -> JsonDict:
        """
        Render the matcher, leaving out anything that was never set.

        :returns: The ``httpRequest`` JSON object.
        """
        request: JsonDict = {}
        if self._method is not None:
            request["method"] = self._method
        if self._path is not None:
            request["path"] = self._path
        if self._query_string_parameters:
            request["queryStringParameters"] = {
                name: list(values)
                for name, values in self._query_string_parameters.items()
            }
        if self._headers:
            request["headers"] = {
                name: list(values) for name, values in self._headers.items()
            }
        if self._body is not None:
            request["body"] = self._body
        return request


class MockedResponse:
    """Canned response sent as the ``httpResponse`` part of an expectation."""

    def __init__(self) -> None:
        self._status_code = 200
        self._headers: dict[str, list[str]] = {}
        self._body: JsonDict | None = None

    def status_code(self, status_code: int) -> MockedResponse:
        self._status_code = status_code
        return self

    def add_header(self, name: str, value: str) -> MockedResponse:
        self._headers.setdefault(name, []).append(value)
        return self

    def body_json(self, data: Any) -> MockedResponse:
        self._body = _json_body(data)
        return self

    def body_string(self, text: str) -> MockedResponse:
        self._body = _string_body(text)
        return self

    def to_dict(self) -> JsonDict:
        response: JsonDict = {"statusCode": self._status_code}
        if self._headers:
            response["headers"] = {
                name: list(values) for name, values in self._headers.items()
            }
        if self._body is not None:
            response["body"] = self._body
        return response


class ExpectationBuilder:
    """
    Accumulates one expectation across several scenario steps.

    Steps such as "I will receive the header ..." add to the request matcher
    before the step that sends the expectation completes it with a path and a
    response.
    """

    def __init__(self) -> None:
        self._request: ExpectedRequest | None = None
        self._response: MockedResponse | None = None

    def expected_request(self) -> ExpectedRequest:
        if self._request is None:
            self._request = ExpectedRequest()
        return self._request

    def mocked_response(self) -> MockedResponse:
        if self._response is None:
            self._response = MockedResponse()
        return self._response

    def to_dict(self) -> JsonDict:
        return {
            "httpRequest": self.expected_request().to_dict(),
            "httpResponse": self.mocked_response().to_dict(),
        }


def build_verification(method: str, url: str, times: int) -> JsonDict:
    """
    Build a ``PUT /mockserver/verify`` payload asserting an exact call count.

    :param method: HTTP method of the request to count.
    :param url: Path of the request, optionally with a query string.
    :param times: Exact number of times the request must have been received.
    :returns: The verification JSON object.
    """
    request = ExpectedRequest().method(method).url(url)

    return {
        "httpRequest": request.to_dict(),
        "times": {"atLeast": times, "atMost": times},
    }
