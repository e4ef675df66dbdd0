"""Tests for supaedge.http.headers — inbound Headers and outbound MutableHeaders."""

import pytest

from supaedge.http.headers import Headers, MutableHeaders


def _h(*pairs: tuple[str, str]) -> Headers:
    """Shorthand: build Headers from string pairs."""
    raw = tuple((k.encode("latin-1"), v.encode("latin-1")) for k, v in pairs)
    return Headers(raw)


class TestHeaders:
    def test_getitem_case_insensitive(self) -> None:
        h = _h(("Content-Type", "text/html"))
        assert h["content-type"] == "text/html"
        assert h["CONTENT-TYPE"] == "text/html"

    def test_missing_key_raises(self) -> None:
        with pytest.raises(KeyError):
            _h(("Accept", "*/*"))["X-Missing"]

    def test_contains(self) -> None:
        h = _h(("Accept", "*/*"))
        assert "accept" in h
        assert "x-missing" not in h
        assert 42 not in h  # type: ignore[operator]

    def test_len_deduplicates(self) -> None:
        h = _h(("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"), ("Accept", "*/*"))
        assert len(h) == 2

    def test_iter_yields_unique_lowercase_keys(self) -> None:
        h = _h(("Accept", "*/*"), ("Content-Type", "text/html"), ("Accept", "text/xml"))
        assert list(h) == ["accept", "content-type"]

    def test_get_list(self) -> None:
        h = _h(("Set-Cookie", "a=1"), ("Set-Cookie", "b=2"))
        assert h.get_list("set-cookie") == ["a=1", "b=2"]
        assert h.get_list("x-none") == []

    def test_get_default(self) -> None:
        assert _h().get("x-none", "fallback") == "fallback"

    def test_from_mapping(self) -> None:
        h = Headers.from_mapping({"Authorization": "Bearer t"})
        assert h["authorization"] == "Bearer t"
        assert h.raw == ((b"authorization", b"Bearer t"),)

    def test_from_empty_mapping(self) -> None:
        assert len(Headers.from_mapping(None)) == 0


class TestMutableHeaders:
    def test_set_and_get(self) -> None:
        h = MutableHeaders()
        h.set("X-Custom", "1")
        assert h["x-custom"] == "1"
        assert h.get("X-CUSTOM") == "1"

    def test_set_replaces_all_values(self) -> None:
        h = MutableHeaders([("Vary", "Origin"), ("X-A", "1"), ("vary", "Accept")])
        h.set("Vary", "Cookie")
        assert h.multi_items() == [("Vary", "Cookie"), ("X-A", "1")]

    def test_append_keeps_existing(self) -> None:
        h = MutableHeaders()
        h.append("Vary", "Origin")
        h.append("Vary", "Accept")
        assert h.get_list("vary") == ["Origin", "Accept"]
        assert h["vary"] == "Origin"

    def test_item_assignment_is_set(self) -> None:
        h = MutableHeaders({"X-A": "1"})
        h["x-a"] = "2"
        assert h.get_list("X-A") == ["2"]

    def test_delete(self) -> None:
        h = MutableHeaders([("X-A", "1"), ("X-A", "2"), ("X-B", "3")])
        del h["x-a"]
        assert "x-a" not in h
        assert h.multi_items() == [("X-B", "3")]

    def test_delete_missing_raises(self) -> None:
        with pytest.raises(KeyError):
            del MutableHeaders()["x-missing"]

    def test_len_counts_names(self) -> None:
        h = MutableHeaders([("Vary", "a"), ("vary", "b"), ("X-A", "1")])
        assert len(h) == 2

    def test_copy_is_independent(self) -> None:
        h = MutableHeaders({"X-A": "1"})
        c = h.copy()
        c.set("X-B", "2")
        assert "x-b" not in h
        assert c["x-a"] == "1"
