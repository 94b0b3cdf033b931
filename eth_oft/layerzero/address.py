"""Address and token amount conversions for LayerZero calls.

LayerZero stores peers and OFT recipients as ``bytes32`` so that non-EVM
chains fit in the same field. EVM addresses are left-padded with zeroes.
"""

import re
from decimal import Decimal, localcontext

from eth_typing import ChecksumAddress
from eth_utils import is_hex_address, to_canonical_address, to_checksum_address

from eth_oft.layerzero.exceptions import InvalidAddress, InvalidRequest

#: Length of a LayerZero peer / recipient field
PEER_BYTES_LENGTH = 32

#: Decimal precision for formatting amounts, enough for any uint256
_AMOUNT_PRECISION = 100

#: Largest raw amount an ERC-20 / OFT call accepts
UINT256_MAX = 2**256 - 1

_UINT256_DIGITS = len(str(UINT256_MAX))

#: Digits with an optional fraction, as accepted by ethers parseUnits()
_AMOUNT_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)?$")


def validate_address(address: str) -> ChecksumAddress:
    """Check that a string is a 20-byte hex address and checksum it.

    :raise InvalidAddress:
        Not a ``0x`` prefixed 40 hex character string.
    """
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidAddress(f"Not a valid EVM address: {address!r}")
    return to_checksum_address(address)


def to_peer_format(address: str | bytes) -> bytes:
    """Left-pad a 20-byte address to the 32-byte LayerZero peer format.

    Example:

    .. code-block:: python

        peer = to_peer_format("0x6EDCE65403992e310A62460808c4b910D972f10f")
        assert len(peer) == 32
        assert peer[:12] == b"\\x00" * 12

    :param address:
        Hex address or 20 raw bytes.

    :return:
        32 bytes, the address right-aligned.

    :raise InvalidAddress:
        Input is not a 20-byte address.
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != 20:
            raise InvalidAddress(f"Expected 20 address bytes, got {len(address)}")
        raw = bytes(address)
    else:
        raw = to_canonical_address(validate_address(address))
    return raw.rjust(PEER_BYTES_LENGTH, b"\x00")


def peer_format_hex(address: str | bytes) -> str:
    """Same as :py:func:`to_peer_format`, as ``0x`` hex for logs and reports."""
    return "0x" + to_peer_format(address).hex()


def parse_token_amount(amount: str, decimals: int) -> int:
    """Convert a human readable amount to raw integer units.

    Follows ethers ``parseUnits()``: plain digits with an optional fraction,
    no sign or exponent. More fractional digits than ``decimals`` is an
    error, not a rounding.

    :param amount:
        Decimal string, e.g. ``"50"`` or ``"0.25"``.

    :param decimals:
        Token decimals. ``0`` accepts whole numbers only.

    :raise InvalidRequest:
        Amount is malformed, has too many decimal places or does not fit uint256.
    """
    text = str(amount).strip()
    if not _AMOUNT_PATTERN.match(text):
        raise InvalidRequest(f"Not a valid amount: {amount!r}")

    whole, _, fraction = text.partition(".")
    whole = whole.lstrip("0")
    fraction = fraction.rstrip("0")

    if len(fraction) > decimals:
        raise InvalidRequest(f"Amount {amount} has more than {decimals} decimal places")

    # Longer than any uint256 even before scaling
    if len(whole) > _UINT256_DIGITS:
        raise InvalidRequest(f"Amount {text[:20]}... does not fit uint256")

    raw = int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    if raw > UINT256_MAX:
        raise InvalidRequest(f"Amount {amount} is too large, raw value does not fit uint256")
    return raw


def format_token_amount(raw: int, decimals: int = 18) -> str:
    """Convert raw integer units to a human readable string, e.g. ``"0.0012"``.

    Whole numbers keep one decimal place (``"1.0"``), like ethers ``formatUnits()``.
    """
    with localcontext() as ctx:
        ctx.prec = _AMOUNT_PRECISION
        text = format(Decimal(raw).scaleb(-decimals).normalize(), "f")
    if "." not in text:
        text += ".0"
    return text
