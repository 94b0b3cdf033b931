"""Peer format and token amount conversions."""

import pytest

from eth_oft.layerzero.address import format_token_amount, parse_token_amount, peer_format_hex, to_peer_format, validate_address
from eth_oft.layerzero.exceptions import InvalidAddress, InvalidRequest


@pytest.mark.parametrize(
    "address",
    [
        "0x6EDCE65403992e310A62460808c4b910D972f10f",
        "0x0000000000000000000000000000000000000001",
        "0xffffffffffffffffffffffffffffffffffffffff",
    ],
)
def test_to_peer_format_right_aligns(address):
    """32 bytes, 12 zero bytes, then the address."""
    peer = to_peer_format(address)
    assert len(peer) == 32
    assert peer[:12] == b"\x00" * 12
    assert peer[12:] == bytes.fromhex(address[2:])


def test_to_peer_format_raw_bytes():
    raw = bytes(range(20))
    assert to_peer_format(raw) == b"\x00" * 12 + raw


def test_to_peer_format_case_insensitive():
    address = "0x6EDCE65403992e310A62460808c4b910D972f10f"
    assert to_peer_format(address.lower()) == to_peer_format(address)


def test_peer_format_hex():
    assert peer_format_hex("0x6EDCE65403992e310A62460808c4b910D972f10f") == "0x0000000000000000000000006edce65403992e310a62460808c4b910d972f10f"


@pytest.mark.parametrize("bad", ["", "0x", "0x1234", "6EDCE65403992e310A62460808c4b910D972f10f00", "0xzzDCE65403992e310A62460808c4b910D972f10f", b"\x01" * 19, None])
def test_to_peer_format_rejects_malformed(bad):
    with pytest.raises(InvalidAddress):
        to_peer_format(bad)


def test_validate_address_checksums():
    assert validate_address("0x6edce65403992e310a62460808c4b910d972f10f") == "0x6EDCE65403992e310A62460808c4b910D972f10f"


@pytest.mark.parametrize(
    "amount, decimals, expected",
    [
        ("50", 18, 50 * 10**18),
        ("0.5", 18, 5 * 10**17),
        ("1000000", 0, 1_000_000),
        (" 7 ", 0, 7),
        ("0", 18, 0),
        ("007.50", 2, 750),
        (str(2**256 - 1), 0, 2**256 - 1),
        ("0.000000000000000001", 18, 1),
        ("115792089237316195423570985008687907853269984665640564039457", 18, 115792089237316195423570985008687907853269984665640564039457 * 10**18),
    ],
)
def test_parse_token_amount(amount, decimals, expected):
    assert parse_token_amount(amount, decimals) == expected


@pytest.mark.parametrize(
    "amount, decimals",
    [
        ("1.5", 0),
        ("0.0000000000000000001", 18),
        ("-1", 18),
        ("+1", 0),
        ("abc", 18),
        ("NaN", 18),
        ("Infinity", 0),
        ("", 0),
        ("1e3", 0),
        ("1e5000000", 0),
        (str(2**256), 0),
        ("1" + "0" * 60, 18),
        ("1" + "0" * 5000, 0),
    ],
)
def test_parse_token_amount_rejects(amount, decimals):
    with pytest.raises(InvalidRequest):
        parse_token_amount(amount, decimals)


def test_format_token_amount():
    assert format_token_amount(123_000_000_000_000) == "0.000123"
    assert format_token_amount(10**18) == "1.0"
    assert format_token_amount(0) == "0.0"
    assert format_token_amount(1_500_000, decimals=6) == "1.5"
