"""
Query-string parsing for executed blocks

The parameter string handed to every executed block has the form
"key=value&key2=value2". Keys and values are decoded independently: '='
ends a key and '&' ends a value.

Percent sequences are read as two DECIMAL digits, not hexadecimal:
"%41" decodes to the byte 41 (')'), not 0x41 ('A'). Executed programs
receive the same format, so this module doubles as the language-support
helper for Python blocks:

    from csprender.lib.query import parse_query
    params = parse_query(sys.argv[1])

A '%' with fewer than two characters left ends decoding without error.
"""

from typing import Dict, Tuple, Union

PERCENT = ord("%")
ZERO = ord("0")

# Bytes that must be escaped for parse_query(query_serialize(m)) == m
_SPECIAL = {ord("%"), ord("&"), ord("=")}


def _as_bytes(query: Union[str, bytes]) -> bytes:
    if isinstance(query, str):
        return query.encode("utf-8", errors="surrogateescape")
    return query


def _as_str(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


def parse_qstring(query: Union[str, bytes], delim: str, start: int = 0) -> Tuple[str, int]:
    """
    Decode one key or value run

    Args:
        query: Complete query string
        delim: Character that ends this run ('=' for keys, '&' for values)
        start: Offset where the run begins

    Returns:
        (decoded run, offset after the run and its delimiter)

    Example:
        >>> parse_qstring("a=1&b=2", "=")
        ('a', 2)
        >>> parse_qstring("k=%41", "&", 2)
        (')', 5)
    """
    data = _as_bytes(query)
    stop = ord(delim)
    result = bytearray()
    pos = start

    while pos < len(data) and data[pos] != stop:
        if data[pos] == PERCENT:
            pos += 1
            if pos >= len(data):
                break
            value = (data[pos] - ZERO) * 10
            pos += 1
            if pos >= len(data):
                break
            value += data[pos] - ZERO
            pos += 1
            result.append(value & 0xFF)
        else:
            result.append(data[pos])
            pos += 1

    if pos < len(data) and data[pos] == stop:
        pos += 1

    return _as_str(bytes(result)), pos


def parse_query(query: Union[str, bytes]) -> Dict[str, str]:
    """
    Decode a complete query string into an ordered parameter map

    A repeated key keeps its first position and takes the last value.

    Example:
        >>> parse_query("a=1&b=2")
        {'a': '1', 'b': '2'}
    """
    data = _as_bytes(query)
    result: Dict[str, str] = {}
    pos = 0

    while pos < len(data):
        key, pos = parse_qstring(data, "=", pos)
        value, pos = parse_qstring(data, "&", pos)
        result[key] = value

    return result


def _escape(text: str) -> str:
    out = bytearray()
    for byte in _as_bytes(text):
        if byte in _SPECIAL:
            out += b"%%%02d" % byte
        else:
            out.append(byte)
    return _as_str(bytes(out))


def query_serialize(params: Dict[str, str]) -> str:
    """
    Encode a parameter map into a query string

    Only '%', '&' and '=' are escaped, as %37, %38 and %61.

    Example:
        >>> query_serialize({"a": "1", "eq": "x=y"})
        'a=1&eq=x%61y'
    """
    return "&".join(f"{_escape(key)}={_escape(value)}" for key, value in params.items())
