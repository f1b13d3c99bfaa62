"""Parsing of textual OpenFlow match fields into Match objects."""

from __future__ import annotations

import re
from collections.abc import Callable

from ovsflows.fields import (
    conjunction_id,
    connection_tracking_zone,
    data_link_type,
    data_link_vlan,
    data_link_vlan_pcp,
    icmp6_code,
    icmp6_type,
    icmp_code,
    icmp_type,
    in_port_match,
    network_ecn,
    network_protocol,
    network_tos,
    network_ttl,
    tunnel_flags,
    tunnel_gbp,
    tunnel_gbp_flags,
    tunnel_tos,
    tunnel_ttl,
)
from ovsflows.masked import (
    arp_op,
    connection_tracking_mark,
    connection_tracking_state,
    ipv6_label,
    metadata_with_mask,
    tcp_flags,
    transport_destination_masked_port,
    transport_source_masked_port,
    tunnel_id_with_mask,
    udp_destination_masked_port,
    udp_source_masked_port,
    vlan_tci,
    vlan_tci1,
)
from ovsflows.match import (
    Match,
    MatchError,
    arp_source_hardware_address,
    arp_source_protocol_address,
    arp_target_hardware_address,
    arp_target_protocol_address,
    data_link_destination,
    data_link_source,
    ipv6_destination,
    ipv6_source,
    neighbor_discovery_source_link_layer,
    neighbor_discovery_target,
    neighbor_discovery_target_link_layer,
    network_destination,
    network_source,
    parse_mac,
)

__all__ = ["parse_match"]

_HEX_PREFIX = "0x"
_MAX_UINT8 = 0xFF
_MAX_UINT16 = 0xFFFF
_MAX_UINT32 = 0xFFFFFFFF
_MAX_INT32 = 0x7FFFFFFF
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_SIGNED_DECIMAL = re.compile(r"[+-]?[0-9]+")
_UNSIGNED_DECIMAL = re.compile(r"[0-9]+")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def _mask(bits: int) -> int:
    return (1 << bits) - 1


def _atoi(text: str) -> int:
    """Parse a signed decimal integer that must fit in 64 bits."""
    if not _SIGNED_DECIMAL.fullmatch(text):
        raise MatchError(f"invalid integer {text!r}")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        raise MatchError(f"integer {text!r} out of range")
    return number


def _parse_hex(text: str, bits: int) -> int:
    """Parse a hexadecimal integer, with optional 0x prefix, of at most bits bits."""
    digits = text.removeprefix(_HEX_PREFIX)
    if not _HEX_DIGITS.fullmatch(digits):
        raise MatchError(f"invalid hexadecimal integer {text!r}")
    number = int(digits, 16)
    if number > _mask(bits):
        raise MatchError(f"hexadecimal integer {text!r} out of range")
    return number


def _parse_clamp_int(text: str, maximum: int) -> int:
    number = _atoi(text)
    if number > maximum:
        raise MatchError(f"integer {number} too large; {number} > {maximum}")
    return number


def _decimal_or_hex(text: str, bits: int) -> int:
    """Parse a decimal or 0x-prefixed value, truncated to bits bits."""
    if not text.startswith(_HEX_PREFIX):
        return _atoi(text) & _mask(bits)
    return _parse_hex(text, max(bits, 32)) & _mask(bits)


# key -> (largest accepted value, truncation width or None, constructor)
_INTEGER_MATCHES: dict[str, tuple[int, int | None, Callable[[int], Match]]] = {
    "icmp_type": (_MAX_UINT8, 8, icmp_type),
    "icmp_code": (_MAX_UINT8, 8, icmp_code),
    "icmpv6_type": (_MAX_UINT8, 8, icmp6_type),
    "icmpv6_code": (_MAX_UINT8, 8, icmp6_code),
    "nw_proto": (_MAX_UINT8, 8, network_protocol),
    "ct_zone": (_MAX_UINT16, 16, connection_tracking_zone),
    "conj_id": (_MAX_UINT32, 32, conjunction_id),
    "nw_ecn": (_MAX_INT32, None, network_ecn),
    "nw_ttl": (_MAX_INT32, None, network_ttl),
    "tun_ttl": (_MAX_INT32, None, tunnel_ttl),
    "tun_tos": (_MAX_INT32, None, tunnel_tos),
    "nw_tos": (_MAX_INT32, None, network_tos),
    "tun_gbp_id": (_MAX_INT32, None, tunnel_gbp),
    "tun_gbp_flags": (_MAX_INT32, None, tunnel_gbp_flags),
    "tun_flags": (_MAX_INT32, None, tunnel_flags),
    "in_port": (_MAX_INT32, None, in_port_match),
}

_PORT_MATCHES: dict[str, Callable[[int, int], Match]] = {
    "tp_src": transport_source_masked_port,
    "tp_dst": transport_destination_masked_port,
    "udp_src": udp_source_masked_port,
    "udp_dst": udp_destination_masked_port,
}

_MAC_MATCHES: dict[str, Callable[[bytes], Match]] = {
    "arp_sha": arp_source_hardware_address,
    "arp_tha": arp_target_hardware_address,
    "nd_sll": neighbor_discovery_source_link_layer,
    "nd_tll": neighbor_discovery_target_link_layer,
}

_TEXT_MATCHES: dict[str, Callable[[str], Match]] = {
    "arp_spa": arp_source_protocol_address,
    "arp_tpa": arp_target_protocol_address,
    "dl_src": data_link_source,
    "dl_dst": data_link_destination,
    "nd_target": neighbor_discovery_target,
    "ipv6_src": ipv6_source,
    "ipv6_dst": ipv6_destination,
    "tun_ipv6_src": ipv6_source,
    "tun_ipv6_dst": ipv6_destination,
    "nw_src": network_source,
    "nw_dst": network_destination,
    "tun_src": network_source,
    "tun_dst": network_destination,
}

# key -> (value width in bits, constructor taking value and mask)
_MASKED_MATCHES: dict[str, tuple[int, Callable[[int, int], Match]]] = {
    "vlan_tci": (16, vlan_tci),
    "vlan_tci1": (16, vlan_tci1),
    "ipv6_label": (32, ipv6_label),
    "ct_mark": (32, connection_tracking_mark),
    "metadata": (64, metadata_with_mask),
    "tun_id": (64, tunnel_id_with_mask),
}


def _parse_integer(key: str, value: str) -> Match:
    maximum, bits, make = _INTEGER_MATCHES[key]
    number = _parse_clamp_int(value, maximum)
    if bits is not None:
        number &= _mask(bits)
    return make(number)


def _parse_port(key: str, value: str) -> Match:
    parts = value.split("/")
    if len(parts) == 1:
        port, mask = _parse_clamp_int(value, _MAX_UINT16) & _MAX_UINT16, 0
    elif len(parts) == 2:
        numbers = []
        for part in parts:
            number = _parse_hex(part, 64)
            if number > _MAX_UINT16:
                raise MatchError(
                    f"integer {number} too large; {number} > {_MAX_UINT16}"
                )
            numbers.append(number)
        port, mask = numbers
    else:
        raise MatchError(f"invalid value, no action matched for {key}={value}")
    return _PORT_MATCHES[key](port, mask)


def _parse_masked(key: str, value: str) -> Match:
    bits, make = _MASKED_MATCHES[key]
    numbers = [_decimal_or_hex(part, bits) for part in value.split("/")]
    if len(numbers) == 1:
        return make(numbers[0], 0)
    if len(numbers) == 2:
        return make(numbers[0], numbers[1])
    raise MatchError(f"invalid {key} match: {value!r}")


def _parse_ct_state(value: str) -> Match:
    if "|" in value:
        value = "+" + value.replace("|", "+")
    if "+" in value or "-" in value:
        value = value.replace("+", " +").replace("-", " -").strip(" ")
    else:
        value = "+" + value
    return connection_tracking_state(*value.split())


def _parse_tcp_flags(value: str) -> Match:
    try:
        _atoi(value)
    except MatchError:
        pass
    else:
        return tcp_flags(value)

    if len(value.encode("utf-8")) % 4:
        raise MatchError("tcp_flags length must be divisible by 4")

    flags: list[str] = []
    current: list[str] = []
    offset = 0
    for char in value:
        if offset and offset % 4 == 0:
            flags.append("".join(current))
            current = []
        current.append(char)
        offset += len(char.encode("utf-8"))
    flags.append("".join(current))
    return tcp_flags(*flags)


def _parse_vlan_int(value: str) -> int:
    if not value.startswith(_HEX_PREFIX):
        return _atoi(value)
    return _parse_hex(value, 32) & _MAX_UINT16


def _parse_arp_op(value: str) -> Match:
    if value.startswith(_HEX_PREFIX):
        return arp_op(_parse_hex(value, 32) & _MAX_UINT16)
    if not _UNSIGNED_DECIMAL.fullmatch(value):
        raise MatchError(f"invalid ARP operation {value!r}")
    number = int(value)
    if number > _MAX_UINT16:
        raise MatchError(f"ARP operation {value!r} out of range")
    return arp_op(number)


def parse_match(key: str, value: str) -> Match | None:
    """Build the Match for a key=value field, or None if the key is not known."""
    if key in _MAC_MATCHES:
        return _MAC_MATCHES[key](parse_mac(value))
    if key in _INTEGER_MATCHES:
        return _parse_integer(key, value)
    if key in _PORT_MATCHES:
        return _parse_port(key, value)
    if key in _TEXT_MATCHES:
        return _TEXT_MATCHES[key](value)
    if key in _MASKED_MATCHES:
        return _parse_masked(key, value)
    if key == "arp_op":
        return _parse_arp_op(value)
    if key == "ct_state":
        return _parse_ct_state(value)
    if key == "tcp_flags":
        return _parse_tcp_flags(value)
    if key == "dl_type":
        return data_link_type(_parse_hex(value, 32) & _MAX_UINT16)
    if key == "dl_vlan":
        return data_link_vlan(_parse_vlan_int(value))
    if key == "dl_vlan_pcp":
        return data_link_vlan_pcp(_parse_vlan_int(value))
    return None