"""Shared Open vSwitch configuration values and the control-program error."""

from __future__ import annotations

from enum import Enum

__all__ = [
    "FailMode",
    "InterfaceType",
    "PortAction",
    "OvsError",
    "is_port_not_exist",
]

_NO_PORT_PREFIX = b"ovs-vsctl: no port named "
_EXIT_STATUS_ONE = "exit status 1"


class _StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class FailMode(_StrEnum):
    """Failure mode used by Open vSwitch when it cannot reach a controller."""

    STANDALONE = "standalone"
    SECURE = "secure"


class InterfaceType(_StrEnum):
    """Network interface type recognised by Open vSwitch."""

    GRE = "gre"
    INTERNAL = "internal"
    SYSTEM = "system"
    PATCH = "patch"
    STT = "stt"
    VXLAN = "vxlan"


class PortAction(_StrEnum):
    """Action that changes the characteristics of a port."""

    UP = "up"
    DOWN = "down"
    STP = "stp"
    NO_STP = "no-stp"
    RECEIVE = "receive"
    NO_RECEIVE = "no-receive"
    RECEIVE_STP = "receive-stp"
    NO_RECEIVE_STP = "no-receive-stp"
    FORWARD = "forward"
    NO_FORWARD = "no-forward"
    FLOOD = "flood"
    NO_FLOOD = "no-flood"
    PACKET_IN = "packet-in"
    NO_PACKET_IN = "no-packet-in"


class OvsError(Exception):
    """Failure of an Open vSwitch control program, with its combined output."""

    def __init__(self, out: bytes, err: BaseException | str) -> None:
        super().__init__(out, err)
        self.out = bytes(out)
        self.err = err

    def __str__(self) -> str:
        return f"{self.err}: {self.out.decode('utf-8', errors='replace')}"


def is_port_not_exist(err: BaseException | None) -> bool:
    """Report whether err was caused by asking about a port that does not exist."""
    if not isinstance(err, OvsError):
        return False
    return err.out.startswith(_NO_PORT_PREFIX) and str(err.err) == _EXIT_STATUS_ONE