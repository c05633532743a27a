from __future__ import annotations

import json

import pytest

from lob_core.types import PriceLevel
from lob_sync.codec import (
    FrameKind,
    FrameParseError,
    build_pong,
    build_subscribe,
    classify_frame,
    parse_delta_frame,
    parse_snapshot,
)


def _delta(ts=1700000000100, prev=1700000000000, bids=None, asks=None, **extra) -> str:
    data = {
        "s": "PERP_ETH_USDT",
        "prevTs": prev,
        "bids": bids if bids is not None else [["2000.5", "1.25"]],
        "asks": asks if asks is not None else [["2001.0", "0"]],
    }
    frame = {"topic": "orderbookupdate@PERP_ETH_USDT@50", "ts": ts, "data": data}
    frame.update(extra)
    return json.dumps(frame)


def test_classify_control_frames():
    assert classify_frame('{"cmd":"PING","ts":1700000000000}') is FrameKind.PING
    assert classify_frame('{"id":"client_id_x","cmd":"SUBSCRIBE","success":true}') is FrameKind.ACK
    assert classify_frame(_delta()) is FrameKind.DATA


def test_subscribe_and_pong_payloads():
    sub = json.loads(build_subscribe("client_id_x", "orderbookupdate@PERP_ETH_USDT@50"))
    assert sub == {
        "id": "client_id_x",
        "cmd": "SUBSCRIBE",
        "params": ["orderbookupdate@PERP_ETH_USDT@50"],
    }
    assert json.loads(build_pong(1700000000123)) == {"cmd": "PONG", "ts": 1700000000123}


def test_parse_delta_frame():
    ev = parse_delta_frame(_delta())

    assert ev is not None
    assert ev.sequence == 1700000000100
    assert ev.prev_sequence == 1700000000000
    assert ev.symbol == "PERP_ETH_USDT"
    assert ev.bids == [PriceLevel(2000.5, 1.25)]
    assert ev.asks == [PriceLevel(2001.0, 0.0)]


def test_frame_without_ts_or_data_is_ignored():
    assert parse_delta_frame(json.dumps({"data": {"prevTs": 1, "bids": [], "asks": []}})) is None
    assert parse_delta_frame(json.dumps({"ts": 5})) is None
    assert parse_delta_frame(json.dumps({"ts": 5, "data": None})) is None


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2, 3]",
        _delta(bids=[["abc", "1"]]),
        _delta(asks=[["2001.0"]]),
        _delta(asks=[{"price": "1", "quantity": "1"}]),
        json.dumps({"ts": 5, "data": {"bids": [], "asks": []}}),
        json.dumps({"ts": 5, "data": {"prevTs": "x", "bids": [], "asks": []}}),
        json.dumps({"ts": 5, "data": {"prevTs": 4, "bids": None, "asks": []}}),
    ],
)
def test_malformed_delta_frames_raise(text):
    with pytest.raises(FrameParseError):
        parse_delta_frame(text)


def test_one_bad_quote_fails_whole_delta():
    with pytest.raises(FrameParseError):
        parse_delta_frame(_delta(bids=[["100", "1"], ["101", "oops"]]))


def test_parse_snapshot():
    payload = {
        "success": True,
        "timestamp": 1700000000000,
        "data": {
            "bids": [{"price": "2000.5", "quantity": "3.5"}, {"price": "2000.0", "quantity": "1"}],
            "asks": [{"price": "2001.0", "quantity": "0.75"}],
        },
    }

    snap = parse_snapshot(payload)

    assert snap.sequence == 1700000000000
    assert snap.bids == [PriceLevel(2000.5, 3.5), PriceLevel(2000.0, 1.0)]
    assert snap.asks == [PriceLevel(2001.0, 0.75)]


@pytest.mark.parametrize(
    "payload",
    [
        None,
        {"data": {"bids": [], "asks": []}},
        {"timestamp": 1, "data": []},
        {"timestamp": 1, "data": {"bids": [{"price": "x", "quantity": "1"}], "asks": []}},
        {"timestamp": 1, "data": {"bids": [["1", "1"]], "asks": []}},
        {"timestamp": "soon", "data": {"bids": [], "asks": []}},
    ],
)
def test_bad_snapshot_raises(payload):
    with pytest.raises(FrameParseError):
        parse_snapshot(payload)


@pytest.mark.parametrize(
    "quote",
    [["100", "-1"], ["99", "nan"], ["99", "inf"], ["nan", "1"], ["-inf", "1"]],
)
def test_delta_with_non_finite_or_negative_values_is_rejected(quote):
    text = json.dumps({"ts": 2, "data": {"prevTs": 1, "bids": [["101", "1"], quote], "asks": []}})

    with pytest.raises(FrameParseError):
        parse_delta_frame(text)


@pytest.mark.parametrize(
    "quote",
    [
        {"price": "100", "quantity": "-0.5"},
        {"price": "100", "quantity": "NaN"},
        {"price": "Infinity", "quantity": "1"},
    ],
)
def test_snapshot_with_non_finite_or_negative_values_is_rejected(quote):
    payload = {"timestamp": 1, "data": {"bids": [quote], "asks": []}}

    with pytest.raises(FrameParseError):
        parse_snapshot(payload)
