"""
Resolve which MockServer a test run talks to.

Settings are read from behave userdata first (``behave -D mockserver=...`` or the
``[behave.userdata]`` section of ``behave.ini``), then from the environment:

=====================  =====================  ==============================
userdata key           environment variable   meaning
=====================  =====================  ==============================
``mockserver``         ``MOCKSERVER_URL``     Base URL of MockServer
``mockserver_class``   ``MOCKSERVER_CLASS``   Dotted path of a custom client
``mockserver_timeout`` ``MOCKSERVER_TIMEOUT`` HTTP timeout in seconds
=====================  =====================  ==============================
"""

import os
from collections.abc import Mapping
from typing import Any

DEFAULT_TIMEOUT = 10


def _setting(userdata: Mapping[str, str], key: str, env_var: str) -> str | None:
    value = userdata.get(key)
    if value:
        return value
    return os.getenv(env_var) or None


def get_mockserver_timeout(userdata: Mapping[str, str] | None = None) -> int:
    """
    Get the HTTP timeout used for MockServer calls.

    :param userdata: Behave userdata, if running under behave.
    :returns: Timeout in seconds.
    :raises RuntimeError: If the configured value is not an integer.
    """
    timeout = _setting(userdata or {}, "mockserver_timeout", "MOCKSERVER_TIMEOUT")
    if timeout is None:
        return DEFAULT_TIMEOUT

    try:
        return int(timeout)
    except ValueError as err:
        raise RuntimeError(
            f"MockServer timeout must be an integer number of seconds, got {timeout!r}"
        ) from err


def get_mockserver_setting(
    userdata: Mapping[str, str] | None = None,
) -> str | dict[str, Any]:
    """
    Build the ``mock_server`` argument for
    :class:`~mockserver_bdd.context.MockServerContext`.

    :param userdata: Behave userdata, if running under behave.
    :returns: The MockServer base URL, or a ``{"class", "arguments"}`` mapping when
        a custom client class is configured. The URL, when set, is passed to the
        custom class as its only argument.
    :raises RuntimeError: If neither a URL nor a client class is configured.
    """
    userdata = userdata or {}
    url = _setting(userdata, "mockserver", "MOCKSERVER_URL")
    client_class = _setting(userdata, "mockserver_class", "MOCKSERVER_CLASS")

    if client_class is not None:
        return {"class": client_class, "arguments": [url] if url else []}

    if url is None:
        raise RuntimeError(
            "MockServer is not configured. Set MOCKSERVER_URL or pass "
            "-D mockserver=<url> to behave."
        )

    return url
