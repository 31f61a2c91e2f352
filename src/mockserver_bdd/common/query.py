"""
Query string decoding for expectation building.

Two decoders live here:

* :func:`decode_form` is a structured form decoder in the classic server-side
  style: bracket suffixes build nested containers (``a[b]=1``, ``a[]=x``) and
  the base name of each key is sanitised to identifier syntax, so ``user.id``
  becomes ``user_id``.
* :func:`parse_query_string` keeps the grouping but not the sanitisation. Key
  names are hex-encoded before decoding and hex-decoded afterwards, so
  :func:`decode_form` never sees a dot or a space in a base name.
"""

import re
from typing import TypeAlias
from urllib.parse import parse_qsl, unquote_to_bytes

QueryValue: TypeAlias = str | list["QueryValue"] | dict[str, "QueryValue"]
QueryDict: TypeAlias = dict[str, QueryValue]

# Intermediate container; keys are int for integer-looking indexes.
_Node: TypeAlias = dict[int | str, "_Node | str"]

# A key segment runs from the start of the string, or from just after an "&",
# up to the first "=" or "[".
_KEY_SEGMENT = re.compile(r"(?:^|(?<=&))[^=\[&]+")
_INTEGER_INDEX = re.compile(r"-?[1-9][0-9]*|0")


def parse_query_string(query: str) -> QueryDict:
    """
    Parse a query string, preserving key names verbatim.

    Behaves like :func:`decode_form` except that ``.`` and spaces in key names
    are left alone::

        >>> parse_query_string("user.id=5&a.b[0]=x&a.b[1]=y")
        {'user.id': '5', 'a.b': ['x', 'y']}

    :param query: Raw query string, without the leading ``?``.
    :returns: Mapping of key to a string, or to a nested list/dict when the key
        carried bracket notation.
    """
    protected = _KEY_SEGMENT.sub(_protect_key, query)

    return {_restore_key(key): value for key, value in decode_form(protected).items()}


def _protect_key(match: re.Match[str]) -> str:
    return unquote_to_bytes(match.group(0).replace("+", " ")).hex()


def _restore_key(key: str) -> str:
    try:
        return bytes.fromhex(key).decode("utf-8", errors="replace")
    except ValueError:
        # An unterminated "[" folds into the key as "_", which is not hex.
        return key


def decode_form(query: str) -> QueryDict:
    """
    Decode an ``application/x-www-form-urlencoded`` string into nested data.

    Rules, in order of application:

    - Segments are split on ``&``; empty segments are skipped and a segment
      without ``=`` has an empty value.
    - Keys and values are percent-decoded (``+`` is a space). Invalid escapes
      stay literal and invalid UTF-8 is replaced.
    - Leading spaces are stripped from the key and empty keys are dropped.
    - In the base name (before the first ``[``) ``.`` and spaces become ``_``.
    - Each ``[index]`` group nests one level deeper; ``[]`` appends.
    - The last assignment to a plain key wins.

    :param query: Raw query string, without the leading ``?``.
    :returns: The decoded mapping. Containers indexed ``0..n-1`` are lists.
    """
    root: _Node = {}

    for raw_key, value in parse_qsl(query, keep_blank_values=True):
        path = _split_key(raw_key)
        if path is None:
            continue
        _assign(root, path, value)

    return {str(key): _finalise(value) for key, value in root.items()}


def _split_key(raw_key: str) -> list[str | None] | None:
    """
    Split a decoded key into its base name and bracket indexes.

    ``None`` in the returned path stands for an empty ``[]`` (append).
    Returns ``None`` when the key is empty and the segment must be ignored.
    """
    key = raw_key.lstrip(" ")
    if not key:
        return None

    bracket = key.find("[")
    if bracket == -1:
        return [_sanitise(key)]

    base = key[:bracket]
    if not base:
        return None

    if key.find("]", bracket) == -1:
        # No closing bracket: the "[" is not an index opener.
        return [_sanitise(base) + "_" + key[bracket + 1 :]]

    path: list[str | None] = [_sanitise(base)]
    position = bracket
    while position < len(key) and key[position] == "[":
        close = key.find("]", position)
        if close == -1:
            break
        index = key[position + 1 : close]
        path.append(index if index else None)
        position = close + 1

    return path


def _sanitise(name: str) -> str:
    return name.replace(".", "_").replace(" ", "_")


def _assign(node: _Node, path: list[str | None], value: str) -> None:
    *parents, leaf = path

    for index in parents:
        key = _node_key(node, index)
        child = node.get(key)
        if not isinstance(child, dict):
            child = {}
            node[key] = child
        node = child

    node[_node_key(node, leaf)] = value


def _node_key(node: _Node, index: str | None) -> int | str:
    if index is None:
        integer_keys = [key for key in node if isinstance(key, int)]
        return max(integer_keys) + 1 if integer_keys else 0

    if _INTEGER_INDEX.fullmatch(index):
        return int(index)

    return index


def _finalise(value: "_Node | str") -> QueryValue:
    if isinstance(value, str):
        return value

    if list(value) == list(range(len(value))):
        return [_finalise(item) for item in value.values()]

    return {str(key): _finalise(item) for key, item in value.items()}
