"""
Shared lightweight types and helpers used across the MockServer integration.
"""

import json
from pathlib import Path
from typing import Any, TypeAlias

# Expectation and verification payloads are JSON objects sent as request bodies.
# The alias is used to make intent clearer in function signatures.
json_str: TypeAlias = str
JsonDict: TypeAlias = dict[str, Any]


class ScenarioError(Exception):
    """
    Raised when a scenario step cannot be turned into a MockServer call.

    Covers invalid JSON in doc strings and fixture files, missing fixture files,
    and expectations left half-built at the end of a scenario.
    """


def load_json(text: json_str, source: str = "doc string") -> Any:
    """
    Decode JSON text written in a feature file or fixture.

    :param text: The JSON text.
    :param source: Human-readable origin of the text, used in error messages.
    :returns: The decoded value.
    :raises ScenarioError: If the text is not valid JSON, or decodes to ``null``.
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as err:
        raise ScenarioError(f"Error while parsing json from {source}: {err}") from err

    if value is None:
        raise ScenarioError(f"Error while parsing json from {source}: got null")

    return value


def read_fixture(directory: Path | str, filename: str) -> str:
    """
    Read a fixture file located relative to a feature file's directory.

    :param directory: Directory of the running feature file.
    :param filename: Path of the fixture, relative to ``directory``.
    :returns: The file contents.
    :raises ScenarioError: If the file does not exist.
    """
    path = Path(directory) / filename
    if not path.is_file():
        raise ScenarioError(f'File "{path}" not found.')

    return path.read_text(encoding="utf-8")
