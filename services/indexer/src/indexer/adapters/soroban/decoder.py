"""Decoding of Soroban SCVal values into native Python types."""

from stellar_sdk import scval
from stellar_sdk import xdr as stellar_xdr

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class DecodeError(Exception):
    """Raised when a value does not have the shape the caller expects."""

    def __init__(self, expected: str, detail: str):
        self.expected = expected
        super().__init__(f"Expected {expected}: {detail}")


def parse_scval(encoded: str) -> stellar_xdr.SCVal:
    """Parse a base64 XDR string into an SCVal."""
    try:
        return stellar_xdr.SCVal.from_xdr(encoded)
    except Exception as e:
        raise DecodeError("base64 SCVal XDR", str(e)) from e


def decode_symbol(value: stellar_xdr.SCVal) -> str:
    try:
        return scval.from_symbol(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError("symbol", str(e)) from e


def decode_address(value: stellar_xdr.SCVal) -> str:
    """Decode an address SCVal to its strkey form (G... account, C... contract)."""
    try:
        return scval.from_address(value).address
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError("address", str(e)) from e


def decode_int128(value: stellar_xdr.SCVal) -> int:
    try:
        return scval.from_int128(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError("i128", str(e)) from e


def decode_int128_pair(value: stellar_xdr.SCVal) -> tuple[int, int]:
    """Decode a two-element vector of i128 values."""
    try:
        items = scval.from_vec(value)
    except (ValueError, TypeError, AttributeError) as e:
        raise DecodeError("(i128, i128)", str(e)) from e
    if len(items) != 2:
        raise DecodeError("(i128, i128)", f"vector has {len(items)} elements")
    return decode_int128(items[0]), decode_int128(items[1])


def truncate_to_int64(value: int) -> int:
    """Wrap a signed integer into the signed 64-bit range (two's complement)."""
    return ((value - INT64_MIN) % 2**64) + INT64_MIN
