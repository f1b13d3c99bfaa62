"""Port, masked, flag and free-form packet matches and their OpenFlow text form."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from ovsflows.match import Direction, Match, MatchError

__all__ = [
    "TransportPortMatch",
    "UDPPortMatch",
    "VLANTCIMatch",
    "IPv6LabelMatch",
    "ArpOpMatch",
    "ConnectionTrackingMarkMatch",
    "ConnectionTrackingStateMatch",
    "CTState",
    "TCPFlagsMatch",
    "TCPFlag",
    "MetadataMatch",
    "TunnelIDMatch",
    "IPFragFlag",
    "IPFragMatch",
    "FieldMatch",
    "transport_source_port",
    "transport_destination_port",
    "transport_source_masked_port",
    "transport_destination_masked_port",
    "udp_source_port",
    "udp_destination_port",
    "udp_source_masked_port",
    "udp_destination_masked_port",
    "vlan_tci",
    "vlan_tci1",
    "ipv6_label",
    "arp_op",
    "connection_tracking_mark",
    "connection_tracking_state",
    "set_state",
    "unset_state",
    "tcp_flags",
    "set_tcp_flag",
    "unset_tcp_flag",
    "metadata",
    "metadata_with_mask",
    "tunnel_id",
    "tunnel_id_with_mask",
    "ip_frag",
    "field_match",
]

_IPV6_LABEL_MAX = 0xFFFFF
_ARP_OP_MIN = 1
_ARP_OP_MAX = 4


def _unsigned(value: int, bits: int, what: str) -> int:
    if not 0 <= value < (1 << bits):
        raise MatchError(f"{what} {value} does not fit in {bits} unsigned bits")
    return value


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class CTState(_StrEnum):
    """Connection tracking state flag."""

    NEW = "new"
    ESTABLISHED = "est"
    RELATED = "rel"
    REPLY = "rpl"
    INVALID = "inv"
    TRACKED = "trk"


class TCPFlag(_StrEnum):
    """Flag in the TCP header."""

    URG = "urg"
    ACK = "ack"
    PSH = "psh"
    RST = "rst"
    SYN = "syn"
    FIN = "fin"


class IPFragFlag(_StrEnum):
    """IP fragmentation state."""

    YES = "yes"
    NO = "no"
    FIRST = "first"
    LATER = "later"
    NOT_LATER = "not_later"


@dataclass(frozen=True, repr=False)
class _PortMatch(Match):
    _prefix: ClassVar[str] = ""
    _name: ClassVar[str] = ""

    direction: Direction
    port: int
    mask: int = 0

    def __post_init__(self) -> None:
        _unsigned(self.port, 16, "port")
        _unsigned(self.mask, 16, "port mask")

    def marshal_text(self) -> str:
        key = f"{self._prefix}_{self.direction}"
        if self.mask == 0:
            return f"{key}={self.port}"
        return f"{key}=0x{self.port:04x}/0x{self.mask:04x}"

    def __repr__(self) -> str:
        side = "source" if self.direction is Direction.SOURCE else "destination"
        if self.mask > 0:
            return f"{self._name}_{side}_masked_port({self.port:#x}, {self.mask:#x})"
        return f"{self._name}_{side}_port({self.port})"


@dataclass(frozen=True, repr=False)
class TransportPortMatch(_PortMatch):
    """Transport (TCP) source or destination port, with optional mask."""

    _prefix: ClassVar[str] = "tp"
    _name: ClassVar[str] = "transport"


@dataclass(frozen=True, repr=False)
class UDPPortMatch(_PortMatch):
    """UDP source or destination port, with optional mask."""

    _prefix: ClassVar[str] = "udp"
    _name: ClassVar[str] = "udp"


@dataclass(frozen=True, repr=False)
class VLANTCIMatch(Match):
    """VLAN tag control information with optional mask."""

    key: str
    tci: int
    mask: int = 0

    def __post_init__(self) -> None:
        _unsigned(self.tci, 16, "VLAN TCI")
        _unsigned(self.mask, 16, "VLAN TCI mask")

    def marshal_text(self) -> str:
        if self.mask != 0:
            return f"{self.key}=0x{self.tci:04x}/0x{self.mask:04x}"
        return f"{self.key}=0x{self.tci:04x}"

    def __repr__(self) -> str:
        return f"{self.key}(0x{self.tci:04x}, 0x{self.mask:04x})"


@dataclass(frozen=True, repr=False)
class IPv6LabelMatch(Match):
    """IPv6 flow label with optional mask; both must fit in 20 bits."""

    label: int
    mask: int = 0

    def __post_init__(self) -> None:
        _unsigned(self.label, 32, "IPv6 label")
        _unsigned(self.mask, 32, "IPv6 label mask")

    def marshal_text(self) -> str:
        if self.label > _IPV6_LABEL_MAX or self.mask > _IPV6_LABEL_MAX:
            raise MatchError("IPv6 label must only use 20 lower bits")
        if self.mask != 0:
            return f"ipv6_label=0x{self.label:05x}/0x{self.mask:05x}"
        return f"ipv6_label=0x{self.label:05x}"

    def __repr__(self) -> str:
        return f"ipv6_label(0x{self.label:05x}, 0x{self.mask:05x})"


@dataclass(frozen=True, repr=False)
class ArpOpMatch(Match):
    """ARP operation code, checked against the known operations."""

    op: int

    def __post_init__(self) -> None:
        _unsigned(self.op, 16, "ARP operation")

    def marshal_text(self) -> str:
        if not _ARP_OP_MIN <= self.op <= _ARP_OP_MAX:
            raise MatchError(f"invalid ARP operation: {self.op}")
        return f"arp_op={self.op}"

    def __repr__(self) -> str:
        return f"arp_op({self.op})"


@dataclass(frozen=True, repr=False)
class ConnectionTrackingMarkMatch(Match):
    """Connection tracking mark with optional mask."""

    mark: int
    mask: int = 0

    def __post_init__(self) -> None:
        _unsigned(self.mark, 32, "conntrack mark")
        _unsigned(self.mask, 32, "conntrack mark mask")

    def marshal_text(self) -> str:
        if self.mask != 0:
            return f"ct_mark=0x{self.mark:08x}/0x{self.mask:08x}"
        return f"ct_mark=0x{self.mark:08x}"

    def __repr__(self) -> str:
        return f"connection_tracking_mark(0x{self.mark:08x}, 0x{self.mask:08x})"


@dataclass(frozen=True, repr=False)
class ConnectionTrackingStateMatch(Match):
    """Connection tracking state flags such as '+new' or '-trk'."""

    states: tuple[str, ...] = field(default_factory=tuple)

    def marshal_text(self) -> str:
        return f"ct_state={''.join(self.states)}"

    def __repr__(self) -> str:
        return f"connection_tracking_state({', '.join(map(repr, self.states))})"


@dataclass(frozen=True, repr=False)
class TCPFlagsMatch(Match):
    """TCP header flags such as '+syn' or '-ack'."""

    flags: tuple[str, ...] = field(default_factory=tuple)

    def marshal_text(self) -> str:
        return f"tcp_flags={''.join(self.flags)}"

    def __repr__(self) -> str:
        return f"tcp_flags({', '.join(map(repr, self.flags))})"


@dataclass(frozen=True, repr=False)
class _HexMaskedMatch(Match):
    _key: ClassVar[str] = ""
    _name: ClassVar[str] = ""

    value: int
    mask: int = 0

    def __post_init__(self) -> None:
        _unsigned(self.value, 64, self._key)
        _unsigned(self.mask, 64, f"{self._key} mask")

    def marshal_text(self) -> str:
        if self.mask == 0:
            return f"{self._key}={self.value:#x}"
        return f"{self._key}={self.value:#x}/{self.mask:#x}"

    def __repr__(self) -> str:
        if self.mask > 0:
            return f"{self._name}_with_mask({self.value:#x}, {self.mask:#x})"
        return f"{self._name}({self.value:#x})"


@dataclass(frozen=True, repr=False)
class MetadataMatch(_HexMaskedMatch):
    """Pipeline metadata register with optional mask."""

    _key: ClassVar[str] = "metadata"
    _name: ClassVar[str] = "metadata"


@dataclass(frozen=True, repr=False)
class TunnelIDMatch(_HexMaskedMatch):
    """Tunnel ID with optional mask."""

    _key: ClassVar[str] = "tun_id"
    _name: ClassVar[str] = "tunnel_id"


@dataclass(frozen=True, repr=False)
class IPFragMatch(Match):
    """IP fragmentation state match."""

    flag: str

    def marshal_text(self) -> str:
        return f"ip_frag={self.flag}"

    def __repr__(self) -> str:
        return f"ip_frag({str(self.flag)!r})"


@dataclass(frozen=True, repr=False)
class FieldMatch(Match):
    """Match a field against a literal value or another field."""

    field: str
    src_or_value: str

    def marshal_text(self) -> str:
        return f"{self.field}={self.src_or_value}"

    def __repr__(self) -> str:
        return f"field_match({self.field!r}, {self.src_or_value!r})"


def transport_source_port(port: int) -> TransportPortMatch:
    """Match a TCP source port."""
    return TransportPortMatch(Direction.SOURCE, port)


def transport_destination_port(port: int) -> TransportPortMatch:
    """Match a TCP destination port."""
    return TransportPortMatch(Direction.DESTINATION, port)


def transport_source_masked_port(port: int, mask: int) -> TransportPortMatch:
    """Match a TCP source port range given as value and mask."""
    return TransportPortMatch(Direction.SOURCE, port, mask)


def transport_destination_masked_port(port: int, mask: int) -> TransportPortMatch:
    """Match a TCP destination port range given as value and mask."""
    return TransportPortMatch(Direction.DESTINATION, port, mask)


def udp_source_port(port: int) -> UDPPortMatch:
    """Match a UDP source port."""
    return UDPPortMatch(Direction.SOURCE, port)


def udp_destination_port(port: int) -> UDPPortMatch:
    """Match a UDP destination port."""
    return UDPPortMatch(Direction.DESTINATION, port)


def udp_source_masked_port(port: int, mask: int) -> UDPPortMatch:
    """Match a UDP source port range given as value and mask."""
    return UDPPortMatch(Direction.SOURCE, port, mask)


def udp_destination_masked_port(port: int, mask: int) -> UDPPortMatch:
    """Match a UDP destination port range given as value and mask."""
    return UDPPortMatch(Direction.DESTINATION, port, mask)


def vlan_tci(tci: int, mask: int) -> VLANTCIMatch:
    """Match the outer VLAN tag control information."""
    return VLANTCIMatch("vlan_tci", tci, mask)


def vlan_tci1(tci: int, mask: int) -> VLANTCIMatch:
    """Match the inner VLAN tag control information."""
    return VLANTCIMatch("vlan_tci1", tci, mask)


def ipv6_label(label: int, mask: int) -> IPv6LabelMatch:
    """Match the IPv6 flow label."""
    return IPv6LabelMatch(label, mask)


def arp_op(op: int) -> ArpOpMatch:
    """Match a validated ARP operation code."""
    return ArpOpMatch(op)


def connection_tracking_mark(mark: int, mask: int) -> ConnectionTrackingMarkMatch:
    """Match the connection tracking mark."""
    return ConnectionTrackingMarkMatch(mark, mask)


def connection_tracking_state(*args: str) -> ConnectionTrackingStateMatch:
    """Match connection tracking state flags built with set_state/unset_state."""
    return ConnectionTrackingStateMatch(tuple(str(arg) for arg in args))


def set_state(state: CTState | str) -> str:
    """Return the flag text that requires state to be set."""
    return f"+{state}"


def unset_state(state: CTState | str) -> str:
    """Return the flag text that requires state to be unset."""
    return f"-{state}"


def tcp_flags(*args: str) -> TCPFlagsMatch:
    """Match TCP flags built with set_tcp_flag/unset_tcp_flag."""
    return TCPFlagsMatch(tuple(str(arg) for arg in args))


def set_tcp_flag(flag: TCPFlag | str) -> str:
    """Return the flag text that requires flag to be set."""
    return f"+{flag}"


def unset_tcp_flag(flag: TCPFlag | str) -> str:
    """Return the flag text that requires flag to be unset."""
    return f"-{flag}"


def metadata(value: int) -> MetadataMatch:
    """Match the metadata register exactly."""
    return MetadataMatch(value)


def metadata_with_mask(value: int, mask: int) -> MetadataMatch:
    """Match the metadata register under a mask."""
    return MetadataMatch(value, mask)


def tunnel_id(value: int) -> TunnelIDMatch:
    """Match the tunnel ID exactly."""
    return TunnelIDMatch(value)


def tunnel_id_with_mask(value: int, mask: int) -> TunnelIDMatch:
    """Match the tunnel ID under a mask."""
    return TunnelIDMatch(value, mask)


def ip_frag(flag: IPFragFlag | str) -> IPFragMatch:
    """Match the IP fragmentation state."""
    return IPFragMatch(str(flag))


def field_match(field: str, src_or_value: str) -> FieldMatch:
    """Match a field against a literal value or another field."""
    return FieldMatch(field, src_or_value)