"""Address-based packet matches and their OpenFlow text form."""

from __future__ import annotations

import ipaddress
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "Direction",
    "MatchError",
    "Match",
    "DataLinkMatch",
    "NetworkMatch",
    "TunnelMatch",
    "ARPProtocolAddressMatch",
    "IPv6Match",
    "NeighborDiscoveryTargetMatch",
    "ARPHardwareAddressMatch",
    "NeighborDiscoveryLinkLayerMatch",
    "parse_mac",
    "data_link_source",
    "data_link_destination",
    "network_source",
    "network_destination",
    "tunnel_src",
    "tunnel_dst",
    "arp_source_protocol_address",
    "arp_target_protocol_address",
    "ipv6_source",
    "ipv6_destination",
    "neighbor_discovery_target",
    "arp_source_hardware_address",
    "arp_target_hardware_address",
    "neighbor_discovery_source_link_layer",
    "neighbor_discovery_target_link_layer",
]

_ETHERNET_ADDR_LEN = 6
_MAC_OCTET_COUNTS = (6, 8, 20)

_IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


class Direction(str, Enum):
    """Which end of a packet a match applies to."""

    SOURCE = "src"
    DESTINATION = "dst"

    def __str__(self) -> str:
        return self.value


class MatchError(ValueError):
    """A match cannot be expressed as valid OpenFlow text."""


class Match(ABC):
    """A packet matching statement that can be rendered as OpenFlow text."""

    @abstractmethod
    def marshal_text(self) -> str:
        """Return the OpenFlow text form of this match."""


def _is_hex(text: str) -> bool:
    return bool(text) and all(c in string.hexdigits for c in text)


def parse_mac(text: str) -> bytes:
    """Parse a colon, dash or dot separated hardware address into bytes."""
    invalid = MatchError(f"address {text}: invalid MAC address")
    if len(text) < 14:
        raise invalid

    if text[2] in ":-":
        if (len(text) + 1) % 3:
            raise invalid
        count = (len(text) + 1) // 3
        groups = text.split(text[2])
        width = 2
    elif text[4] == ".":
        if (len(text) + 1) % 5:
            raise invalid
        count = 2 * (len(text) + 1) // 5
        groups = text.split(".")
        width = 4
    else:
        raise invalid

    if count not in _MAC_OCTET_COUNTS:
        raise invalid
    if any(len(group) != width or not _is_hex(group) for group in groups):
        raise invalid

    addr = bytes.fromhex("".join(groups))
    if len(addr) != count:
        raise invalid
    return addr


def _format_mac(addr: bytes) -> str:
    return ":".join(f"{octet:02x}" for octet in addr)


def _check_ethernet_len(addr: bytes, what: str) -> None:
    if len(addr) != _ETHERNET_ADDR_LEN:
        raise MatchError(
            f"{what} must be {_ETHERNET_ADDR_LEN} octets, but got {len(addr)}"
        )


def _parse_ip(text: str) -> _IPAddress | None:
    if "%" in text:
        return None
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


def _parse_cidr(text: str) -> _IPAddress | None:
    addr_text, sep, prefix = text.partition("/")
    if not sep:
        return None
    addr = _parse_ip(addr_text)
    if addr is None or not prefix.isascii() or not prefix.isdigit():
        return None
    bits = 32 if addr.version == 4 else 128
    if int(prefix) > bits:
        return None
    return addr


def _is_ipv4(addr: _IPAddress) -> bool:
    return addr.version == 4 or addr.ipv4_mapped is not None


def _ip_string(addr: _IPAddress) -> str:
    if addr.version == 6 and addr.ipv4_mapped is not None:
        return str(addr.ipv4_mapped)
    return str(addr)


def _ipv4_address_or_cidr(key: str, ip: str) -> str:
    invalid = MatchError(f'"{ip}" is not a valid IPv4 address or IPv4 CIDR block')
    cidr = _parse_cidr(ip)
    if cidr is not None:
        if not _is_ipv4(cidr):
            raise invalid
        return f"{key}={ip}"
    addr = _parse_ip(ip)
    if addr is not None:
        if not _is_ipv4(addr):
            raise invalid
        return f"{key}={_ip_string(addr)}"
    raise invalid


def _ipv6_address_or_cidr(key: str, ip: str) -> str:
    invalid = MatchError(f'"{ip}" is not a valid IPv6 address or IPv6 CIDR block')
    cidr = _parse_cidr(ip)
    if cidr is not None:
        if _is_ipv4(cidr):
            raise invalid
        return f"{key}={ip}"
    addr = _parse_ip(ip)
    if addr is not None:
        if _is_ipv4(addr):
            raise invalid
        return f"{key}={_ip_string(addr)}"
    raise invalid


def _ethernet_address(key: str, addr: bytes) -> str:
    _check_ethernet_len(addr, "hardware address")
    return f"{key}={_format_mac(addr)}"


@dataclass(frozen=True, repr=False)
class DataLinkMatch(Match):
    """Ethernet source or destination address, with optional wildcard mask."""

    direction: Direction
    addr: str

    def marshal_text(self) -> str:
        address, sep, wildcard = self.addr.partition("/")
        hw_addr = parse_mac(address)
        _check_ethernet_len(hw_addr, "hardware address")
        if not sep:
            return f"dl_{self.direction}={_format_mac(hw_addr)}"
        mask = parse_mac(wildcard)
        _check_ethernet_len(mask, "wildcard mask")
        return f"dl_{self.direction}={_format_mac(hw_addr)}/{_format_mac(mask)}"

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "destination"
        return f"data_link_{name}({self.addr!r})"


@dataclass(frozen=True, repr=False)
class NetworkMatch(Match):
    """IPv4 source or destination address or CIDR block."""

    direction: Direction
    ip: str

    def marshal_text(self) -> str:
        return _ipv4_address_or_cidr(f"nw_{self.direction}", self.ip)

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "destination"
        return f"network_{name}({self.ip!r})"


@dataclass(frozen=True, repr=False)
class TunnelMatch(Match):
    """IPv4 tunnel source or destination address or CIDR block."""

    direction: Direction
    ip: str

    def marshal_text(self) -> str:
        return _ipv4_address_or_cidr(f"tun_{self.direction}", self.ip)

    def __repr__(self) -> str:
        return f"tunnel_{self.direction}({self.ip!r})"


@dataclass(frozen=True, repr=False)
class ARPProtocolAddressMatch(Match):
    """ARP source or target protocol address (IPv4 address or CIDR block)."""

    direction: Direction
    ip: str

    def marshal_text(self) -> str:
        key = "arp_spa" if self.direction is Direction.SOURCE else "arp_tpa"
        return _ipv4_address_or_cidr(key, self.ip)

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "target"
        return f"arp_{name}_protocol_address({self.ip!r})"


@dataclass(frozen=True, repr=False)
class IPv6Match(Match):
    """IPv6 source or destination address or CIDR block."""

    direction: Direction
    ip: str

    def marshal_text(self) -> str:
        return _ipv6_address_or_cidr(f"ipv6_{self.direction}", self.ip)

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "destination"
        return f"ipv6_{name}({self.ip!r})"


@dataclass(frozen=True, repr=False)
class NeighborDiscoveryTargetMatch(Match):
    """IPv6 neighbor discovery target address or CIDR block."""

    ip: str

    def marshal_text(self) -> str:
        return _ipv6_address_or_cidr("nd_target", self.ip)

    def __repr__(self) -> str:
        return f"neighbor_discovery_target({self.ip!r})"


@dataclass(frozen=True, repr=False)
class ARPHardwareAddressMatch(Match):
    """ARP source or target hardware address."""

    direction: Direction
    addr: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "addr", bytes(self.addr))

    def marshal_text(self) -> str:
        key = "arp_sha" if self.direction is Direction.SOURCE else "arp_tha"
        return _ethernet_address(key, self.addr)

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "target"
        return f"arp_{name}_hardware_address({self.addr!r})"


@dataclass(frozen=True, repr=False)
class NeighborDiscoveryLinkLayerMatch(Match):
    """IPv6 neighbor discovery source or target link-layer address."""

    direction: Direction
    addr: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "addr", bytes(self.addr))

    def marshal_text(self) -> str:
        key = "nd_sll" if self.direction is Direction.SOURCE else "nd_tll"
        return _ethernet_address(key, self.addr)

    def __repr__(self) -> str:
        name = "source" if self.direction is Direction.SOURCE else "target"
        return f"neighbor_discovery_{name}_link_layer({self.addr!r})"


def data_link_source(addr: str) -> DataLinkMatch:
    """Match an Ethernet source address with an optional wildcard mask."""
    return DataLinkMatch(Direction.SOURCE, addr)


def data_link_destination(addr: str) -> DataLinkMatch:
    """Match an Ethernet destination address with an optional wildcard mask."""
    return DataLinkMatch(Direction.DESTINATION, addr)


def network_source(ip: str) -> NetworkMatch:
    """Match an IPv4 source address or CIDR block."""
    return NetworkMatch(Direction.SOURCE, ip)


def network_destination(ip: str) -> NetworkMatch:
    """Match an IPv4 destination address or CIDR block."""
    return NetworkMatch(Direction.DESTINATION, ip)


def tunnel_src(addr: str) -> TunnelMatch:
    """Match a tunnel source address."""
    return TunnelMatch(Direction.SOURCE, addr)


def tunnel_dst(addr: str) -> TunnelMatch:
    """Match a tunnel destination address."""
    return TunnelMatch(Direction.DESTINATION, addr)


def arp_source_protocol_address(ip: str) -> ARPProtocolAddressMatch:
    """Match the ARP source protocol address (SPA)."""
    return ARPProtocolAddressMatch(Direction.SOURCE, ip)


def arp_target_protocol_address(ip: str) -> ARPProtocolAddressMatch:
    """Match the ARP target protocol address (TPA)."""
    return ARPProtocolAddressMatch(Direction.DESTINATION, ip)


def ipv6_source(ip: str) -> IPv6Match:
    """Match an IPv6 source address or CIDR block."""
    return IPv6Match(Direction.SOURCE, ip)


def ipv6_destination(ip: str) -> IPv6Match:
    """Match an IPv6 destination address or CIDR block."""
    return IPv6Match(Direction.DESTINATION, ip)


def neighbor_discovery_target(ip: str) -> NeighborDiscoveryTargetMatch:
    """Match the IPv6 neighbor discovery target address or CIDR block."""
    return NeighborDiscoveryTargetMatch(ip)


def arp_source_hardware_address(addr: bytes) -> ARPHardwareAddressMatch:
    """Match the ARP source hardware address (SHA)."""
    return ARPHardwareAddressMatch(Direction.SOURCE, addr)


def arp_target_hardware_address(addr: bytes) -> ARPHardwareAddressMatch:
    """Match the ARP target hardware address (THA)."""
    return ARPHardwareAddressMatch(Direction.DESTINATION, addr)


def neighbor_discovery_source_link_layer(addr: bytes) -> NeighborDiscoveryLinkLayerMatch:
    """Match the neighbor solicitation source link-layer address."""
    return NeighborDiscoveryLinkLayerMatch(Direction.SOURCE, addr)


def neighbor_discovery_target_link_layer(addr: bytes) -> NeighborDiscoveryLinkLayerMatch:
    """Match the neighbor solicitation target link-layer address."""
    return NeighborDiscoveryLinkLayerMatch(Direction.DESTINATION, addr)