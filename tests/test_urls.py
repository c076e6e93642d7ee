import pytest

from wirestream.urls import parse_url


def test_secure_url_uses_default_port():
    info, endpoint, secure = parse_url("wss://stream.binance.com/ws")
    assert info.host == "stream.binance.com"
    assert info.port == 443
    assert endpoint == "/ws"
    assert secure is True


def test_plain_url_with_port_and_query():
    info, endpoint, secure = parse_url("ws://localhost:9001/stream?streams=btcusdt@trade")
    assert info.host == "localhost"
    assert info.port == 9001
    assert endpoint == "/stream?streams=btcusdt@trade"
    assert secure is False


def test_plain_url_default_port():
    info, _, _ = parse_url("ws://example.com/feed")
    assert info.port == 80
    assert str(info) == "example.com:80"


def test_missing_path_becomes_root():
    _, endpoint, _ = parse_url("wss://example.com")
    assert endpoint == "/"


def test_unknown_scheme_is_rejected():
    with pytest.raises(ValueError, match="unrecognised url scheme: http"):
        parse_url("http://example.com/ws")


def test_relative_url_is_rejected():
    with pytest.raises(ValueError):
        parse_url("/just/a/path")


def test_url_without_host_is_rejected():
    with pytest.raises(ValueError, match="host not present"):
        parse_url("ws:///path")