from . import entities, objects, tables  # noqa: F401  (registers the record types)
from .assembler import assemble, decode_field, read_record
from .config import DEFAULT_CONFIG, MAX_PARAM, Config
from .convert import ConvertResult, to_dxf
from .document import Document, read, read_stream, write
from .encoder import encode, write_record
from .errors import (
    DegenerateGeometry,
    Diagnostic,
    DiagnosticKind,
    DXFError,
    IoFailure,
    Malformed,
    TruncatedRecord,
    VersionMismatch,
)
from .record import Record
from .schema import RecordType, get_record_type, new, supported_types
from .tags import Tag, TagReader, TagWriter
from .validation import finalize
from .versions import DXFVersion, parse_version

__all__ = [
    "read",
    "read_stream",
    "write",
    "Document",
    "Record",
    "RecordType",
    "get_record_type",
    "supported_types",
    "new",
    "assemble",
    "decode_field",
    "read_record",
    "finalize",
    "encode",
    "write_record",
    "Tag",
    "TagReader",
    "TagWriter",
    "DXFVersion",
    "parse_version",
    "Config",
    "DEFAULT_CONFIG",
    "MAX_PARAM",
    "to_dxf",
    "ConvertResult",
    "DXFError",
    "IoFailure",
    "Malformed",
    "TruncatedRecord",
    "DegenerateGeometry",
    "VersionMismatch",
    "Diagnostic",
    "DiagnosticKind",
]
