from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from .errors import Diagnostic, DiagnosticKind

Point3D = tuple[float, float, float]

_LOG_LEVELS = {
    DiagnosticKind.VERSION_GATED: "DEBUG",
    DiagnosticKind.COMMENT: "INFO",
}


@dataclass
class Record:
    dxftype: str
    dxf: dict[str, Any]
    diagnostics: list[Diagnostic] = field(default_factory=list, compare=False, repr=False)
    # COUNT values as read from the wire, checked against the lists on finalize.
    counts: dict[str, int] = field(default_factory=dict, compare=False, repr=False)

    @property
    def handle(self) -> int | None:
        return self.dxf.get("handle")

    def copy(self) -> "Record":
        return Record(
            dxftype=self.dxftype,
            dxf=copy.deepcopy(self.dxf),
            diagnostics=list(self.diagnostics),
            counts=dict(self.counts),
        )

    def report(
        self,
        kind: DiagnosticKind,
        message: str,
        *,
        code: int | None = None,
        value: str | None = None,
        line_number: int | None = None,
    ) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, code=code, value=value, line_number=line_number)
        self.diagnostics.append(diagnostic)
        where = f" (line {line_number})" if line_number is not None else ""
        logger.log(_LOG_LEVELS.get(kind, "WARNING"), f"{self.dxftype}: {message}{where}")
        return diagnostic

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def to_points(self) -> list[Point3D]:
        if self.dxftype == "LINE":
            return [self.dxf["start"], self.dxf["end"]]
        if self.dxftype == "XLINE":
            start = self.dxf.get("start", (0.0, 0.0, 0.0))
            direction = self.dxf.get("unit_vector", (1.0, 0.0, 0.0))
            return [
                (start[0] - direction[0], start[1] - direction[1], start[2] - direction[2]),
                (start[0] + direction[0], start[1] + direction[1], start[2] + direction[2]),
            ]
        if self.dxftype == "3DFACE":
            return [self.dxf["first"], self.dxf["second"], self.dxf["third"], self.dxf["fourth"]]
        if self.dxftype == "MLINE":
            return list(self.dxf.get("vertices", []))
        if self.dxftype == "LWPOLYLINE":
            elevation = float(self.dxf.get("elevation", 0.0))
            return [(x, y, elevation) for x, y in self.dxf.get("vertices", [])]
        if self.dxftype in {"ATTRIB", "ATTDEF"}:
            return [self.dxf["insert"]]
        raise NotImplementedError(f"to_points is not supported for {self.dxftype}")
