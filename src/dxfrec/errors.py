from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DXFError(Exception):
    pass


class IoFailure(DXFError):
    def __init__(self, message: str, *, stream_name: str, line_number: int) -> None:
        super().__init__(f"{message} ({stream_name}, line {line_number})")
        self.stream_name = stream_name
        self.line_number = line_number


class Malformed(DXFError):
    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        value: str | None = None,
        line_number: int | None = None,
    ) -> None:
        if line_number is not None:
            message = f"{message} (line {line_number})"
        super().__init__(message)
        self.code = code
        self.value = value
        self.line_number = line_number


class TruncatedRecord(Malformed):
    """Stream ended before the record's terminating group code 0."""


class DegenerateGeometry(DXFError):
    def __init__(self, message: str, *, dxftype: str, handle: int | None = None) -> None:
        if handle is not None:
            message = f"{message} ({dxftype} handle {handle:x})"
        else:
            message = f"{message} ({dxftype})"
        super().__init__(message)
        self.dxftype = dxftype
        self.handle = handle


class VersionMismatch(DXFError):
    def __init__(self, message: str, *, dxftype: str, version: object) -> None:
        super().__init__(f"{message} ({dxftype} at {version})")
        self.dxftype = dxftype
        self.version = version


class DiagnosticKind(str, Enum):
    UNRECOGNIZED = "unrecognized"
    BAD_SUBCLASS_MARKER = "bad_subclass_marker"
    VERSION_GATED = "version_gated"
    COMMENT = "comment"
    OUT_OF_RANGE = "out_of_range"
    COUNT_MISMATCH = "count_mismatch"
    BAD_PROXY_CLASS_ID = "bad_proxy_class_id"
    UNBALANCED_GROUP = "unbalanced_group"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str
    code: int | None = None
    value: str | None = None
    line_number: int | None = None
