"""
XML-RPC encoding and decoding for the rTorrent dialect.

Single calls and system.multicall batches are encoded through separate
entry points so that the batch struct naming never leaks into a plain call.
Decoded values are checked against the primitive types the caller expects
and never coerced.
"""

from __future__ import annotations

import xmlrpc.client
from typing import Any, NamedTuple
from xml.parsers.expat import ExpatError

from .errors import DecodeError, EncodeError, RemoteFault

MULTICALL = "system.multicall"

I4_MIN, I4_MAX = -(2**31), 2**31 - 1
I8_MIN, I8_MAX = -(2**63), 2**63 - 1

XML_HEADER = "<?xml version='1.0'?>\n"


class Call(NamedTuple):
    """A single remote call: method name plus positional arguments."""

    method: str
    args: list[str | int]


class _Marshaller(xmlrpc.client.Marshaller):
    """Marshaller that writes 64-bit integers as <i8> instead of refusing them."""

    dispatch = dict(xmlrpc.client.Marshaller.dispatch)

    def dump_long(self, value: int, write: Any) -> None:
        if I4_MIN <= value <= I4_MAX:
            tag = "int"
        elif I8_MIN <= value <= I8_MAX:
            tag = "i8"
        else:
            raise OverflowError("int exceeds 64-bit range")
        write(f"<value><{tag}>")
        write(str(int(value)))
        write(f"</{tag}></value>\n")

    dispatch[int] = dump_long


def _check_args(method: str, args: list[Any]) -> None:
    """Reject anything but strings and 64-bit integers."""
    if not method:
        raise EncodeError("Method name must not be empty")
    for position, arg in enumerate(args):
        if isinstance(arg, bool) or not isinstance(arg, (str, int)):
            raise EncodeError(f"{method}: unsupported argument type {type(arg).__name__} at position {position}")
        if isinstance(arg, int) and not I8_MIN <= arg <= I8_MAX:
            raise EncodeError(f"{method}: integer argument {arg} exceeds 64-bit range")


def _marshal(method: str, params: tuple[Any, ...]) -> bytes:
    """Serialize a methodCall document."""
    try:
        data = _Marshaller("utf-8").dumps(params)
    except (TypeError, OverflowError) as e:
        raise EncodeError(f"{method}: {e}") from e
    document = (
        XML_HEADER,
        "<methodCall>\n<methodName>",
        xmlrpc.client.escape(method),
        "</methodName>\n",
        data,
        "</methodCall>\n",
    )
    return "".join(document).encode("utf-8")


def encode_call(method: str, args: list[str | int]) -> bytes:
    """
    Encode a single remote call.

    Args:
        method: Dot-namespaced method name, e.g. "d.multicall2"
        args: Positional arguments (str or int)

    Returns:
        XML-RPC request payload
    """
    _check_args(method, list(args))
    return _marshal(method, tuple(args))


def encode_batch(calls: list[Call]) -> bytes:
    """
    Encode several calls as one system.multicall request.

    Each inner call is a struct with "methodName" and "params" members,
    the member names the daemon's batch verb looks up.

    Args:
        calls: Calls to issue, in order

    Returns:
        XML-RPC request payload
    """
    if not calls:
        raise EncodeError("A batch needs at least one call")
    entries = []
    for call in calls:
        _check_args(call.method, list(call.args))
        entries.append({"methodName": call.method, "params": list(call.args)})
    return _marshal(MULTICALL, (entries,))


def decode_response(payload: bytes) -> Any:
    """
    Decode a methodResponse into its single return value.

    Args:
        payload: Raw response body

    Returns:
        The decoded value (nested lists, dicts, str and int)
    """
    try:
        params, _ = xmlrpc.client.loads(payload)
    except xmlrpc.client.Fault as e:
        raise RemoteFault(e.faultCode, e.faultString) from e
    except (ExpatError, xmlrpc.client.ResponseError, ValueError, TypeError, IndexError, KeyError) as e:
        # well-formed but misshapen documents surface as lookup errors
        raise DecodeError(f"Malformed XML-RPC response: {e}") from e

    if len(params) != 1:
        raise DecodeError(f"Expected exactly one return value, got {len(params)}")
    return params[0]


def decode_batch(payload: bytes, expected: int) -> list[Any]:
    """
    Decode a system.multicall response into one value per call.

    Args:
        payload: Raw response body
        expected: Number of calls in the originating batch

    Returns:
        List of return values in request order
    """
    entries = decode_response(payload)
    if not isinstance(entries, list):
        raise DecodeError(f"Multicall response must be an array, got {type(entries).__name__}")
    if len(entries) != expected:
        raise DecodeError(f"Multicall returned {len(entries)} results for {expected} calls")

    results = []
    for index, entry in enumerate(entries):
        if isinstance(entry, dict) and "faultCode" in entry:
            raise RemoteFault(entry.get("faultCode", 0), str(entry.get("faultString", "")), index)
        if not isinstance(entry, list) or len(entry) != 1:
            raise DecodeError(f"Multicall result {index} has unexpected shape: {entry!r}")
        results.append(entry[0])
    return results


def expect_tuple(values: Any, types: tuple[type, ...], context: str = "result") -> tuple[Any, ...]:
    """
    Check a decoded tuple against the primitive types expected at each position.

    Args:
        values: Decoded array
        types: Expected type per position (str or int)
        context: Label used in error messages

    Returns:
        The values as a tuple
    """
    if not isinstance(values, list):
        raise DecodeError(f"{context}: expected an array, got {type(values).__name__}")
    if len(values) != len(types):
        raise DecodeError(f"{context}: expected {len(types)} values, got {len(values)}")
    for position, (value, expected) in enumerate(zip(values, types)):
        # bool is an int subclass; an exact type match keeps <boolean> out of int fields
        if type(value) is not expected:
            raise DecodeError(
                f"{context}: value {position} is {type(value).__name__}, expected {expected.__name__}"
            )
    return tuple(values)
