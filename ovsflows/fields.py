"""Integer-valued packet matches and their OpenFlow text form."""

from __future__ import annotations

from dataclasses import dataclass

from ovsflows.match import Match, MatchError

__all__ = [
    "VLAN_NONE",
    "IntegerMatch",
    "DataLinkTypeMatch",
    "DataLinkVLANMatch",
    "DataLinkVLANPCPMatch",
    "data_link_type",
    "data_link_vlan",
    "data_link_vlan_pcp",
    "network_ecn",
    "network_tos",
    "network_ttl",
    "tunnel_gbp",
    "tunnel_gbp_flags",
    "tunnel_flags",
    "tunnel_ttl",
    "tunnel_tos",
    "conjunction_id",
    "network_protocol",
    "icmp_type",
    "icmp_code",
    "icmp6_type",
    "icmp6_code",
    "in_port_match",
    "arp_operation",
    "connection_tracking_zone",
]

VLAN_NONE = 0xFFFF
"""Special VLAN ID matching only packets that carry no VLAN tag."""

_VLAN_VID_MAX = 0x0FFF
_VLAN_PCP_MAX = 7


def _unsigned(value: int, bits: int, what: str) -> int:
    if not 0 <= value < (1 << bits):
        raise MatchError(f"{what} {value} does not fit in {bits} unsigned bits")
    return value


@dataclass(frozen=True, repr=False)
class IntegerMatch(Match):
    """A field matched exactly against a decimal integer value."""

    key: str
    value: int
    name: str

    def marshal_text(self) -> str:
        return f"{self.key}={self.value}"

    def __repr__(self) -> str:
        return f"{self.name}({self.value})"


@dataclass(frozen=True, repr=False)
class DataLinkTypeMatch(Match):
    """Ethernet frame type (EtherType) match."""

    ether_type: int

    def __post_init__(self) -> None:
        _unsigned(self.ether_type, 16, "EtherType")

    def marshal_text(self) -> str:
        return f"dl_type=0x{self.ether_type:04x}"

    def __repr__(self) -> str:
        return f"data_link_type(0x{self.ether_type:04x})"


@dataclass(frozen=True, repr=False)
class DataLinkVLANMatch(Match):
    """VLAN ID match; VLAN_NONE matches untagged packets only."""

    vid: int

    def marshal_text(self) -> str:
        if self.vid == VLAN_NONE:
            return "dl_vlan=0xffff"
        if not 0 <= self.vid <= _VLAN_VID_MAX:
            raise MatchError(f"invalid VLAN VID: {self.vid}")
        return f"dl_vlan={self.vid}"

    def __repr__(self) -> str:
        if self.vid == VLAN_NONE:
            return "data_link_vlan(VLAN_NONE)"
        return f"data_link_vlan({self.vid})"


@dataclass(frozen=True, repr=False)
class DataLinkVLANPCPMatch(Match):
    """VLAN priority code point match."""

    pcp: int

    def marshal_text(self) -> str:
        if not 0 <= self.pcp <= _VLAN_PCP_MAX:
            raise MatchError(f"invalid VLAN PCP: {self.pcp}")
        return f"dl_vlan_pcp={self.pcp}"

    def __repr__(self) -> str:
        return f"data_link_vlan_pcp({self.pcp})"


def data_link_type(ether_type: int) -> DataLinkTypeMatch:
    """Match packets with the given EtherType."""
    return DataLinkTypeMatch(ether_type)


def data_link_vlan(vid: int) -> DataLinkVLANMatch:
    """Match packets with the given VLAN ID."""
    return DataLinkVLANMatch(vid)


def data_link_vlan_pcp(pcp: int) -> DataLinkVLANPCPMatch:
    """Match packets with the given VLAN priority code point."""
    return DataLinkVLANPCPMatch(pcp)


def network_ecn(ecn: int) -> IntegerMatch:
    """Match the IP explicit congestion notification bits."""
    return IntegerMatch("nw_ecn", ecn, "network_ecn")


def network_tos(tos: int) -> IntegerMatch:
    """Match the IP type of service."""
    return IntegerMatch("nw_tos", tos, "network_tos")


def network_ttl(ttl: int) -> IntegerMatch:
    """Match the IP time to live."""
    return IntegerMatch("nw_ttl", ttl, "network_ttl")


def tunnel_gbp(gbp: int) -> IntegerMatch:
    """Match the tunnel group based policy ID."""
    return IntegerMatch("tun_gbp_id", gbp, "tunnel_gbp")


def tunnel_gbp_flags(gbp_flags: int) -> IntegerMatch:
    """Match the tunnel group based policy flags."""
    return IntegerMatch("tun_gbp_flags", gbp_flags, "tunnel_gbp_flags")


def tunnel_flags(flags: int) -> IntegerMatch:
    """Match the tunnel flags."""
    return IntegerMatch("tun_flags", flags, "tunnel_flags")


def tunnel_ttl(ttl: int) -> IntegerMatch:
    """Match the tunnel time to live."""
    return IntegerMatch("tun_ttl", ttl, "tunnel_ttl")


def tunnel_tos(tos: int) -> IntegerMatch:
    """Match the tunnel type of service."""
    return IntegerMatch("tun_tos", tos, "tunnel_tos")


def conjunction_id(conj_id: int) -> IntegerMatch:
    """Match flows that matched every dimension of a conjunction."""
    return IntegerMatch("conj_id", _unsigned(conj_id, 32, "conjunction ID"), "conjunction_id")


def network_protocol(num: int) -> IntegerMatch:
    """Match the IP or IPv6 protocol number."""
    return IntegerMatch("nw_proto", _unsigned(num, 8, "protocol number"), "network_protocol")


def icmp_type(typ: int) -> IntegerMatch:
    """Match the ICMP type."""
    return IntegerMatch("icmp_type", _unsigned(typ, 8, "ICMP type"), "icmp_type")


def icmp_code(code: int) -> IntegerMatch:
    """Match the ICMP code."""
    return IntegerMatch("icmp_code", _unsigned(code, 8, "ICMP code"), "icmp_code")


def icmp6_type(typ: int) -> IntegerMatch:
    """Match the ICMPv6 type."""
    return IntegerMatch("icmpv6_type", _unsigned(typ, 8, "ICMPv6 type"), "icmp6_type")


def icmp6_code(code: int) -> IntegerMatch:
    """Match the ICMPv6 code."""
    return IntegerMatch("icmpv6_code", _unsigned(code, 8, "ICMPv6 code"), "icmp6_code")


def in_port_match(port: int) -> IntegerMatch:
    """Match packets arriving on the given switch port."""
    return IntegerMatch("in_port", port, "in_port_match")


def arp_operation(oper: int) -> IntegerMatch:
    """Match the ARP operation code."""
    return IntegerMatch("arp_op", _unsigned(oper, 16, "ARP operation"), "arp_operation")


def connection_tracking_zone(zone: int) -> IntegerMatch:
    """Match the connection tracking zone."""
    return IntegerMatch("ct_zone", _unsigned(zone, 16, "conntrack zone"), "connection_tracking_zone")