"""Flow bundle transactions and parsing of flow-table tool output."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Protocol

__all__ = [
    "DUMP_PORTS_PREFIX",
    "DUMP_TABLES_PREFIX",
    "DUMP_FLOWS_PREFIX",
    "NotCommittedError",
    "UnexpectedEOFError",
    "FlowTransaction",
    "build_flow_bundle",
    "parse_each",
    "parse_each_line",
]

DUMP_PORTS_PREFIX = b"OFPST_PORT reply"
DUMP_TABLES_PREFIX = b"OFPST_TABLE reply"
# Matches both "NXST_FLOW reply" and "OFPST_FLOW reply".
DUMP_FLOWS_PREFIX = b"ST_FLOW reply"

_DIR_ADD = "add"
_DIR_DELETE = "delete"


class NotCommittedError(RuntimeError):
    """A flow bundle transaction ended without being committed."""


class UnexpectedEOFError(EOFError):
    """Tool output ended before a complete record could be read."""

    def __init__(self, message: str = "unexpected EOF") -> None:
        super().__init__(message)


class _TextMarshaler(Protocol):
    def marshal_text(self) -> str: ...


@dataclass(frozen=True)
class _FlowDirective:
    directive: str
    flow: str


class FlowTransaction:
    """Collects flow additions and deletions for one atomic flow bundle.

    The first flow that cannot be rendered makes further additions no-ops;
    its error is raised by commit().
    """

    def __init__(self) -> None:
        self._flows: list[_FlowDirective] = []
        self._committed = False
        self._error: BaseException | None = None

    @property
    def committed(self) -> bool:
        """Whether commit() has succeeded."""
        return self._committed

    def add(self, *args: _TextMarshaler) -> None:
        """Queue flows to be added."""
        self._push(_DIR_ADD, args)

    def delete(self, *args: _TextMarshaler) -> None:
        """Queue match flows whose flows are to be deleted."""
        self._push(_DIR_DELETE, args)

    def _push(self, directive: str, flows: tuple[_TextMarshaler, ...]) -> None:
        if self._error is not None:
            return
        for flow in flows:
            try:
                text = flow.marshal_text()
            except Exception as exc:
                self._error = exc
                return
            self._flows.append(_FlowDirective(directive, text))

    def commit(self) -> None:
        """Finalise the transaction, raising any error met while queueing flows."""
        if self._error is not None:
            raise self._error
        self._committed = True

    def discard(self, err: BaseException | str) -> None:
        """Drop every queued flow and raise an error that wraps err."""
        self._flows = []
        exc = NotCommittedError(f"discarding add flow transaction: {err}")
        if isinstance(err, BaseException):
            raise exc from err
        raise exc


def build_flow_bundle(fn: Callable[[FlowTransaction], object]) -> str:
    """Run fn on a new transaction and return the bundle text it produced.

    Each line has the form "<directive> <flow>". Errors raised by fn
    propagate; a transaction that was not committed raises NotCommittedError.
    """
    tx = FlowTransaction()
    fn(tx)
    if not tx.committed:
        raise NotCommittedError("flow bundle not committed, discarding flows")
    return "".join(f"{d.directive} {d.flow}\n" for d in tx._flows)


def _scan_lines(data: bytes) -> Iterator[bytes]:
    if not data:
        return
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith(b"\r") else line


def parse_each(data: bytes, prefix: bytes) -> Iterator[bytes]:
    """Yield the records of multi-line tool output whose first line starts with prefix.

    Each record joins two lines; OpenFlow 1.x banners add a discarded third
    line, and custom statistics two more.
    """
    lines = _scan_lines(data)
    first = next(lines, None)
    if first is None or not first.startswith(prefix):
        raise UnexpectedEOFError()

    has_duration = b"(OF1." in first
    has_custom_stats = b"CUSTOM" in data
    extra = (1 + (2 if has_custom_stats else 0)) if has_duration else 0

    for line in lines:
        second = next(lines, None)
        if second is None:
            raise UnexpectedEOFError()
        for _ in range(extra):
            if next(lines, None) is None:
                raise UnexpectedEOFError()
        yield line + second


def parse_each_line(data: bytes, prefix: bytes) -> Iterator[bytes]:
    """Yield every line after a first line that contains prefix."""
    lines = _scan_lines(data)
    first = next(lines, None)
    if first is None or prefix not in first:
        raise UnexpectedEOFError()
    yield from lines