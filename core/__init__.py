"""Core data models, indexed tables and process boundary for dumpbin analysis."""

from .brackets import BalancedBracketScanner
from .errors import ParseError, ToolExecutionError, ToolNotFoundError
from .indexing import MultiFieldIndex
from .models import (
    BinaryInfo,
    CallEntry,
    ExportEntry,
    FileHint,
    FileIdentity,
    FilePath,
    FunctionRegion,
    ImportEntry,
)
from .tables import CallTable, ExportTable, FileHintTable, FilePathTable, ImportTable
from .utils import compute_identity, describe_binary, make_file_path, validate_file

__all__ = [
    "BalancedBracketScanner",
    "BinaryInfo",
    "CallEntry",
    "CallTable",
    "ExportEntry",
    "ExportTable",
    "FileHint",
    "FileHintTable",
    "FileIdentity",
    "FilePath",
    "FilePathTable",
    "FunctionRegion",
    "ImportEntry",
    "ImportTable",
    "MultiFieldIndex",
    "ParseError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "compute_identity",
    "describe_binary",
    "make_file_path",
    "validate_file",
]
