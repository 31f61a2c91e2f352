"""
Scenario-level state and step operations for MockServer-backed scenarios.

:class:`MockServerContext` is framework-neutral: the behave bindings in
:mod:`mockserver_bdd.steps` and :mod:`mockserver_bdd.hooks` call into it, and
pytest-bdd step definitions can do the same.
"""

from __future__ import annotations

import importlib
import logging
import warnings
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from mockserver_bdd.client import MockServerClient, MockServerClientProtocol
from mockserver_bdd.common.common import (
    JsonDict,
    ScenarioError,
    load_json,
    read_fixture,
)
from mockserver_bdd.config import DEFAULT_TIMEOUT
from mockserver_bdd.expectation import ExpectationBuilder, build_verification

logger = logging.getLogger(__name__)


def _import_client_class(dotted_path: str) -> type[Any]:
    module_name, _, class_name = dotted_path.rpartition(".")
    if not module_name:
        raise TypeError(f"Expected a dotted path to a client class, got {dotted_path!r}")

    module = importlib.import_module(module_name)
    return cast("type[Any]", getattr(module, class_name))


class MockServerContext:
    """
    Per-scenario MockServer state.

    MockServer is reset lazily: only scenarios that register an expectation
    reset it, once before their first call and once after they finish. Scenarios
    that never touch MockServer leave it alone.

    :param mock_server: One of:

        * the MockServer base URL, e.g. ``"http://127.0.0.1:1080"``
        * a mapping ``{"class": "package.module.Client", "arguments": [...]}``
          naming a client class to instantiate
        * a client instance implementing
          :class:`~mockserver_bdd.client.MockServerClientProtocol`
    :param timeout: HTTP timeout used when ``mock_server`` is a URL.
    :raises TypeError: If ``mock_server`` is none of the above.
    """

    def __init__(
        self,
        mock_server: str | Mapping[str, Any] | MockServerClientProtocol,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        if isinstance(mock_server, str):
            self.client: MockServerClientProtocol = MockServerClient(
                mock_server, timeout=timeout
            )
        elif isinstance(mock_server, Mapping) and "class" in mock_server:
            client_class = _import_client_class(mock_server["class"])
            arguments = mock_server.get("arguments") or []
            self.client = client_class(*arguments)
        elif all(
            callable(getattr(mock_server, name, None))
            for name in ("reset", "expectation", "verify")
        ):
            self.client = cast("MockServerClientProtocol", mock_server)
        else:
            raise TypeError(
                "Expected mock_server to be a URL string, a mapping with "
                "class/arguments, or an object implementing MockServerClientProtocol"
            )

        self.feature_path: Path = Path.cwd()
        self.should_reset_before = True
        self.should_reset_after = False
        self._current_expectation: ExpectationBuilder | None = None

    # ---------------------------
    # Expectation under construction
    # ---------------------------

    @property
    def current_expectation(self) -> ExpectationBuilder:
        if self._current_expectation is None:
            self._current_expectation = ExpectationBuilder()
        return self._current_expectation

    @property
    def is_building_expectation(self) -> bool:
        return self._current_expectation is not None

    def reset_current_expectation(self) -> None:
        self._current_expectation = None

    def dump_current_expectation(self) -> JsonDict:
        """
        Render the expectation being built and start a fresh one.

        :returns: The expectation JSON object.
        """
        payload = self.current_expectation.to_dict()
        self._current_expectation = None
        return payload

    # ---------------------------
    # Lifecycle
    # ---------------------------

    def before_scenario(self) -> None:
        self.should_reset_before = True
        self.should_reset_after = False
        self._current_expectation = None

    def after_scenario(self) -> None:
        """
        Finish a scenario, resetting MockServer if the scenario used it.

        :raises ScenarioError: If an expectation was started but never sent.
        """
        if self._current_expectation is not None:
            raise ScenarioError(
                "An expectation is currently building and has not been sent"
            )

        if self.should_reset_after:
            logger.debug("Clearing mocks left by the scenario")
            self.client.reset()
            self.should_reset_after = False

    def store_feature_file(self, feature_filename: str | Path) -> None:
        """
        Remember the running feature's directory, used to resolve fixture files.

        :param feature_filename: Path of the ``.feature`` file.
        """
        self.feature_path = Path(feature_filename).resolve().parent
        logger.debug("Fixture files are read from %s", self.feature_path)

    def reset_before_first_api_call(self) -> None:
        """
        Reset MockServer before the first call of a scenario.

        Custom steps that send expectations should call this first so that mocks
        left by a previous scenario are cleared, and so that the mocks of this
        scenario are cleared once it ends.
        """
        self.should_reset_after = True

        if self.should_reset_before:
            self.client.reset()
            self.should_reset_before = False

    def flag_mockserver_expectation(self) -> None:
        warnings.warn(
            "flag_mockserver_expectation() is deprecated, use "
            "reset_before_first_api_call() instead",
            DeprecationWarning,
            stacklevel=2,
        )
        self.reset_before_first_api_call()

    # ---------------------------
    # Step operations
    # ---------------------------

    def reset_mocks(self) -> None:
        """Clear mocks now; no further reset happens before the first call."""
        self.client.reset()
        self.should_reset_before = False

    def will_receive_header(self, name: str, value: str) -> None:
        self.current_expectation.expected_request().add_header(name, value)

    def will_receive_raw_body(self, raw: str) -> None:
        self.current_expectation.expected_request().body_raw(raw)

    def will_receive_json_payload(self, text: str) -> None:
        self.current_expectation.expected_request().body_json(load_json(text))

    def expect_request(self, text: str) -> None:
        """
        Send a hand-written expectation.

        :param text: Expectation JSON in the MockServer format, with
            ``httpRequest`` and ``httpResponse``.
        """
        self.reset_before_first_api_call()

        self.client.expectation(load_json(text))

    def request_will_return_body(self, method: str, url: str, body: Any) -> None:
        """
        Complete the expectation being built with a JSON response and send it.

        :param method: HTTP method to match.
        :param url: Path to match, optionally with a query string.
        :param body: JSON-compatible response body.
        """
        self.reset_before_first_api_call()

        self.current_expectation.expected_request().method(method).url(url)
        self.current_expectation.mocked_response().body_json(body)

        self.client.expectation(self.dump_current_expectation())

    def request_will_return_json(self, method: str, url: str, text: str) -> None:
        self.request_will_return_body(method, url, load_json(text))

    def request_will_return_json_from_file(
        self, method: str, url: str, filename: str
    ) -> None:
        content = read_fixture(self.feature_path, filename)
        body = load_json(content, source=f'file "{self.feature_path / filename}"')

        self.request_will_return_body(method, url, body)

    def request_will_return_body_from_file(
        self, method: str, url: str, filename: str
    ) -> None:
        """
        Complete the expectation being built with a file's raw contents.

        :param method: HTTP method to match.
        :param url: Path to match, optionally with a query string.
        :param filename: Fixture path relative to the feature file.
        """
        content = read_fixture(self.feature_path, filename)

        self.reset_before_first_api_call()

        self.current_expectation.expected_request().method(method).url(url)
        self.current_expectation.mocked_response().body_string(content)

        self.client.expectation(self.dump_current_expectation())

    def request_should_have_been_called(self, method: str, url: str, times: int) -> None:
        """
        Assert that MockServer received a request exactly ``times`` times.

        :raises VerificationError: If the count differs.
        """
        self.client.verify(build_verification(method, url, times))
