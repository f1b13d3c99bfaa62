"""Flows used to select existing OpenFlow flows, for deletion or dumping."""

from __future__ import annotations

from dataclasses import dataclass, field

from ovsflows.match import Match

__all__ = [
    "ANY_TABLE",
    "PORT_LOCAL",
    "MatchFlowError",
    "MatchFlow",
]

ANY_TABLE = -1
"""Table value that selects flows in any table."""

PORT_LOCAL = -1
"""in_port value that stands for the switch's LOCAL port."""

_EMPTY_MATCH_FLOW = "match flow is empty"
_UINT64_MAX = (1 << 64) - 1


class MatchFlowError(ValueError):
    """Error met while turning a MatchFlow into text, or text into one."""

    def __init__(self, err: BaseException | str, text: str = "") -> None:
        super().__init__(err, text)
        self.err = err
        self.text = text

    def __str__(self) -> str:
        if not self.text:
            return str(self.err)
        return f'flow error due to string "{self.text}": {self.err}'


def _padded_hex(value: int) -> str:
    return f"0x{value:016x}"


@dataclass
class MatchFlow:
    """An OpenFlow flow description that selects flows rather than adds them.

    A cookie_mask of zero with a non-zero cookie matches the cookie exactly.
    """

    protocol: str = ""
    in_port: int = 0
    matches: list[Match] = field(default_factory=list)
    table: int = 0
    cookie: int = 0
    cookie_mask: int = 0

    def __post_init__(self) -> None:
        for name in ("cookie", "cookie_mask"):
            value = getattr(self, name)
            if not 0 <= value <= _UINT64_MAX:
                raise MatchFlowError(f"{name} {value} does not fit in 64 unsigned bits")

    def marshal_text(self) -> str:
        """Return the textual form of this flow, as accepted by Open vSwitch."""
        matches = [m.marshal_text() for m in self.matches]

        parts: list[str] = []
        if self.protocol:
            parts.append(str(self.protocol))

        if self.in_port != 0:
            port = "LOCAL" if self.in_port == PORT_LOCAL else str(self.in_port)
            parts.append(f"in_port={port}")

        parts.extend(matches)

        if self.cookie > 0 or self.cookie_mask > 0:
            mask = "-1" if self.cookie_mask == 0 else _padded_hex(self.cookie_mask)
            parts.append(f"cookie={_padded_hex(self.cookie)}/{mask}")

        if self.table != ANY_TABLE:
            parts.append(f"table={self.table}")

        text = ",".join(parts).strip(",")
        if not text:
            raise MatchFlowError(_EMPTY_MATCH_FLOW)
        return text