"""IPv4 CIDR arithmetic and port-range parsing.

All address math is done on unsigned 32-bit integers. Prefix length 0 covers
the whole IPv4 space and prefix length 32 a single host.
"""

from __future__ import annotations

import re
from typing import NamedTuple

CIDR_RE = re.compile(r"([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})/([0-9]{1,2})")
PORT_RE = re.compile(r"[0-9]+")

MAX_PORT = 65535
_ALL_ONES = 0xFFFFFFFF


class ParsedCidr(NamedTuple):
    ip: str
    prefix_length: int


def is_valid_cidr(cidr: str) -> bool:
    """Check ``ddd.ddd.ddd.ddd/dd`` with octets in 0-255 and prefix in 0-32."""
    if not isinstance(cidr, str):
        return False
    match = CIDR_RE.fullmatch(cidr)
    if not match:
        return False
    if any(int(octet) > 255 for octet in match.groups()[:4]):
        return False
    return int(match.group(5)) <= 32


def parse_cidr(cidr: str) -> ParsedCidr | None:
    """Split a valid CIDR into ip and prefix length, or None if invalid."""
    if not is_valid_cidr(cidr):
        return None
    ip, prefix = cidr.split("/")
    return ParsedCidr(ip=ip, prefix_length=int(prefix))


def ip_to_int(ip: str) -> int:
    """Pack a dotted-quad address into an integer, most significant octet first."""
    o0, o1, o2, o3 = (int(part) for part in ip.split("."))
    return ((o0 << 24) | (o1 << 16) | (o2 << 8) | o3) & _ALL_ONES


def int_to_ip(value: int) -> str:
    value &= _ALL_ONES
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def prefix_mask(prefix_length: int) -> int:
    # Python ints do not wrap, so the shifted value is masked back to 32 bits.
    return (_ALL_ONES << (32 - prefix_length)) & _ALL_ONES


def _bounds(parsed: ParsedCidr) -> tuple[int, int]:
    mask = prefix_mask(parsed.prefix_length)
    network = ip_to_int(parsed.ip) & mask
    broadcast = network | (~mask & _ALL_ONES)
    return network, broadcast


def network_address(cidr: str) -> str | None:
    parsed = parse_cidr(cidr)
    if parsed is None:
        return None
    return int_to_ip(_bounds(parsed)[0])


def broadcast_address(cidr: str) -> str | None:
    parsed = parse_cidr(cidr)
    if parsed is None:
        return None
    return int_to_ip(_bounds(parsed)[1])


def canonicalize_cidr(cidr: str) -> str | None:
    """Return ``cidr`` with its host bits cleared and octets normalized."""
    parsed = parse_cidr(cidr)
    if parsed is None:
        return None
    return f"{network_address(cidr)}/{parsed.prefix_length}"


def is_within_cidr(child_cidr: str, parent_cidr: str) -> bool:
    """Check whether ``child_cidr`` lies entirely inside ``parent_cidr``."""
    child = parse_cidr(child_cidr)
    parent = parse_cidr(parent_cidr)
    if child is None or parent is None:
        return False

    # A shorter prefix is a larger range and can never fit in the parent.
    if child.prefix_length < parent.prefix_length:
        return False

    parent_mask = prefix_mask(parent.prefix_length)
    child_network = ip_to_int(child.ip) & prefix_mask(child.prefix_length)
    parent_network = ip_to_int(parent.ip) & parent_mask
    return (child_network & parent_mask) == parent_network


def cidrs_overlap(cidr1: str, cidr2: str) -> bool:
    """Check whether two CIDR ranges share at least one address."""
    range1 = parse_cidr(cidr1)
    range2 = parse_cidr(cidr2)
    if range1 is None or range2 is None:
        return False

    network1, broadcast1 = _bounds(range1)
    network2, broadcast2 = _bounds(range2)
    return network1 <= broadcast2 and network2 <= broadcast1


def _is_port(value: str) -> bool:
    return bool(PORT_RE.fullmatch(value)) and int(value) <= MAX_PORT


def is_valid_port_range(port_range: str) -> bool:
    """Accept ``*``, a single port, or ``start-end`` with start <= end."""
    if not isinstance(port_range, str):
        return False
    if port_range == "*":
        return True

    parts = port_range.split("-")
    if len(parts) == 1:
        return _is_port(parts[0])
    if len(parts) == 2:
        start, end = parts
        return _is_port(start) and _is_port(end) and int(start) <= int(end)
    return False
