"""
Parsers for the compact device identifiers accepted on the command line.

``[BUS:]DEV`` is given in decimal and ``VID[:PID]`` in hexadecimal. Numbers
are read the way ``strtoul`` reads them: leading whitespace and a sign are
allowed, the longest valid digit prefix is used and anything after it is
ignored. A token with no digits reads as 0, which is never a valid value.
"""

import re
from dataclasses import dataclass

from .errors import FormatError

MAX_UINT32 = 0xFFFFFFFF
MAX_UINT16 = 0xFFFF

re_decimal = re.compile(r"\s*(?P<sign>[+-]?)(?P<digits>[0-9]*)")
re_hexadecimal = re.compile(
    r"\s*(?P<sign>[+-]?)(?:0[xX](?=[0-9a-fA-F]))?(?P<digits>[0-9a-fA-F]*)"
)


@dataclass(frozen=True)
class BusDevIdentifier:
    """A device selected by USB bus and device number; busnum 0 is unset."""

    devnum: int
    busnum: int = 0


@dataclass(frozen=True)
class VidPidIdentifier:
    """A device selected by USB vendor and product id; pid 0 is unset."""

    vid: int
    pid: int = 0


def _parse_unsigned(text: str, base: int) -> int:
    """Read an unsigned number, returning a value above any field limit for
    negative input so that range checks reject it."""
    pattern = re_decimal if base == 10 else re_hexadecimal
    match = pattern.match(text)
    digits = match.group("digits")
    if not digits:
        return 0
    value = int(digits, base)
    if match.group("sign") == "-" and value != 0:
        return MAX_UINT32 + 1
    return value


def _split_fields(text: str, kind: str) -> list[str]:
    fields = text.split(":")
    if len(fields) > 2:
        raise FormatError(f"invalid {kind} string: too many fields")
    return fields


def parse_busnum_devnum(text: str) -> BusDevIdentifier:
    """Parse a ``[BUS:]DEV`` token.

    Args:
        text: the raw option value, e.g. ``"2:5"`` or ``"5"``

    Returns:
        BusDevIdentifier with busnum left at 0 when only DEV was given

    Raises:
        FormatError: on too many fields or a zero/out of range number
    """
    fields = _split_fields(text, "busnum-devnum")

    busnum = 0
    if len(fields) == 2:
        busnum = _parse_unsigned(fields[0], 10)
        if busnum == 0 or busnum > MAX_UINT32:
            raise FormatError(f"invalid bus number: {fields[0]}")

    devnum = _parse_unsigned(fields[-1], 10)
    if devnum == 0 or devnum > MAX_UINT32:
        raise FormatError(f"invalid dev number: {fields[-1]}")

    return BusDevIdentifier(devnum=devnum, busnum=busnum)


def parse_vid_pid(text: str) -> VidPidIdentifier:
    """Parse a ``VID[:PID]`` token.

    Args:
        text: the raw option value, e.g. ``"1199:68c0"`` or ``"1199"``

    Returns:
        VidPidIdentifier with pid left at 0 when only VID was given

    Raises:
        FormatError: on too many fields or a zero/out of range id
    """
    fields = _split_fields(text, "vid-pid")

    pid = 0
    if len(fields) == 2:
        pid = _parse_unsigned(fields[1], 16)
        if pid == 0 or pid > MAX_UINT16:
            raise FormatError(f"invalid product id: {fields[1]}")

    vid = _parse_unsigned(fields[0], 16)
    if vid == 0 or vid > MAX_UINT16:
        raise FormatError(f"invalid vendor id: {fields[0]}")

    return VidPidIdentifier(vid=vid, pid=pid)


def parse_busnum_devnum_tokens(tokens: list[str]) -> BusDevIdentifier | None:
    """Parse every ``[BUS:]DEV`` token given, in order.

    Later tokens override earlier ones; a bus number set by an earlier token
    is kept when a later one gives only the device number.
    """
    result = None
    for token in tokens:
        parsed = parse_busnum_devnum(token)
        if result is not None and not parsed.busnum:
            parsed = BusDevIdentifier(devnum=parsed.devnum, busnum=result.busnum)
        result = parsed
    return result


def parse_vid_pid_tokens(tokens: list[str]) -> VidPidIdentifier | None:
    """Parse every ``VID[:PID]`` token given, in order.

    Later tokens override earlier ones; a product id set by an earlier token
    is kept when a later one gives only the vendor id.
    """
    result = None
    for token in tokens:
        parsed = parse_vid_pid(token)
        if result is not None and not parsed.pid:
            parsed = VidPidIdentifier(vid=parsed.vid, pid=result.pid)
        result = parsed
    return result
