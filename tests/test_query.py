"""
Query-string tests

Pins the decimal percent-decoding that executed blocks rely on, including
the early stop on a truncated '%' sequence.
"""

import pytest

from csprender.lib.query import parse_qstring, parse_query, query_serialize


class TestParseQuery:
    """Test decoding complete query strings"""

    def test_two_pairs(self):
        """Plain pairs decode in order"""
        result = parse_query("a=1&b=2")
        assert result == {"a": "1", "b": "2"}
        assert list(result) == ["a", "b"]

    def test_percent_is_decimal(self):
        """%41 is byte 41 (')'), not 0x41 ('A')"""
        result = parse_query("k=%41")
        assert result["k"] == chr(41)
        assert result["k"] != "A"

    def test_percent_in_key(self):
        """Keys are decoded too"""
        assert parse_query("%65%66=x") == {"AB": "x"}

    def test_empty_query(self):
        """Empty string gives an empty map"""
        assert parse_query("") == {}

    def test_key_without_value(self):
        """Missing '=' yields an empty value"""
        assert parse_query("flag") == {"flag": ""}

    def test_duplicate_key_last_wins(self):
        """Repeated key keeps first position, takes last value"""
        result = parse_query("a=1&b=2&a=3")
        assert result == {"a": "3", "b": "2"}
        assert list(result) == ["a", "b"]

    def test_bytes_input(self):
        """Bytes are accepted as well as str"""
        assert parse_query(b"x=%49") == {"x": "1"}


class TestTruncatedPercent:
    """Test '%' sequences cut short by end of input"""

    def test_lone_percent_at_end(self):
        """'%' at the very end stops decoding"""
        assert parse_query("a=%") == {"a": ""}

    def test_one_digit_at_end(self):
        """'%4' at the end drops the partial byte"""
        assert parse_query("a=x%4") == {"a": "x"}

    def test_truncated_key(self):
        """Truncation inside a key still records the key"""
        assert parse_query("ab%") == {"ab": ""}


class TestParseQstring:
    """Test decoding a single run"""

    def test_returns_offset_after_delimiter(self):
        """Offset points past the delimiter"""
        assert parse_qstring("a=1&b=2", "=") == ("a", 2)
        assert parse_qstring("a=1&b=2", "&", 2) == ("1", 4)

    def test_run_to_end(self):
        """A run without its delimiter ends at end of input"""
        assert parse_qstring("k=%41", "&", 2) == (")", 5)


class TestSerialize:
    """Test encoding a map back to a query string"""

    def test_plain(self):
        """Plain values are joined unchanged"""
        assert query_serialize({"hello": "world", "foo": "bar"}) == "hello=world&foo=bar"

    def test_delimiters_escaped(self):
        """'%', '&' and '=' are escaped as decimal sequences"""
        assert query_serialize({"eq": "x=y&z%"}) == "eq=x%61y%38z%37"

    def test_parse_inverts_serialize(self):
        """Parsing a serialized map gives the same map"""
        params = {"a&b": "c=d", "pct": "100%", "utf": "naïve"}
        assert parse_query(query_serialize(params)) == params
