"""Unit tests for :mod:`mockserver_bdd.config`."""

import pytest

from mockserver_bdd.config import (
    DEFAULT_TIMEOUT,
    get_mockserver_setting,
    get_mockserver_timeout,
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("MOCKSERVER_URL", "MOCKSERVER_CLASS", "MOCKSERVER_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


class TestGetMockserverSetting:
    def test_returns_url_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKSERVER_URL", "http://127.0.0.1:1080")

        assert get_mockserver_setting() == "http://127.0.0.1:1080"

    def test_userdata_takes_precedence(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKSERVER_URL", "http://from-env:1080")

        actual = get_mockserver_setting({"mockserver": "http://from-userdata:1080"})

        assert actual == "http://from-userdata:1080"

    def test_client_class_gets_url_as_argument(self) -> None:
        actual = get_mockserver_setting(
            {"mockserver": "http://stub", "mockserver_class": "pkg.Client"}
        )

        assert actual == {"class": "pkg.Client", "arguments": ["http://stub"]}

    def test_client_class_without_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKSERVER_CLASS", "pkg.Client")

        assert get_mockserver_setting({}) == {"class": "pkg.Client", "arguments": []}

    def test_raises_runtime_error_if_not_configured(self) -> None:
        with pytest.raises(RuntimeError, match="MOCKSERVER_URL"):
            get_mockserver_setting({})

    def test_empty_values_count_as_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKSERVER_URL", "")

        with pytest.raises(RuntimeError):
            get_mockserver_setting({"mockserver": ""})


class TestGetMockserverTimeout:
    def test_defaults(self) -> None:
        assert get_mockserver_timeout() == DEFAULT_TIMEOUT

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MOCKSERVER_TIMEOUT", "3")

        assert get_mockserver_timeout() == 3

    def test_reads_userdata(self) -> None:
        assert get_mockserver_timeout({"mockserver_timeout": "7"}) == 7

    def test_raises_runtime_error_if_not_an_integer(self) -> None:
        with pytest.raises(RuntimeError, match="integer"):
            get_mockserver_timeout({"mockserver_timeout": "soon"})
