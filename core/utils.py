"""Utility helpers: file validation, content identity, PE header summary."""

from __future__ import annotations

import hashlib
from pathlib import Path

import pefile
import structlog

from .models import BinaryInfo, FileIdentity, FilePath

logger = structlog.get_logger("dumpbin.utils")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MAX_FILE_SIZE = 512 * 1024 * 1024  # 512 MB safety limit

PE_MAGIC = b"MZ"

_CHUNK = 1024 * 1024

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_file(path: str) -> Path:
    """Ensure *path* exists, is a file, and is within the size limit.

    Returns the resolved ``Path`` on success; raises ``ValueError`` otherwise.
    """
    p = Path(path).resolve()
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    if not p.is_file():
        raise ValueError(f"Not a regular file: {p}")
    if p.stat().st_size > MAX_FILE_SIZE:
        raise ValueError(
            f"File too large ({p.stat().st_size / 1024 / 1024:.1f} MB). "
            f"Limit is {MAX_FILE_SIZE / 1024 / 1024:.0f} MB."
        )
    return p


def identity_of_bytes(data: bytes) -> FileIdentity:
    return FileIdentity(hashlib.sha1(data).hexdigest().upper(), len(data))


def compute_identity(path: str) -> FileIdentity:
    """SHA-1 (upper-case hex) and size of the file at *path*."""
    p = validate_file(path)
    digest = hashlib.sha1()
    size = 0
    with p.open("rb") as stream:
        for chunk in iter(lambda: stream.read(_CHUNK), b""):
            digest.update(chunk)
            size += len(chunk)
    return FileIdentity(digest.hexdigest().upper(), size)


def make_file_path(path: str) -> FilePath:
    p = validate_file(path)
    return FilePath(str(p), compute_identity(str(p)))


def describe_binary(path: str) -> BinaryInfo:
    """Read PE headers with *pefile*; non-PE files keep only their identity."""
    file_path = make_file_path(path)
    info = BinaryInfo(path=file_path.full_name, identity=file_path.identity)

    with open(file_path.full_name, "rb") as f:
        if f.read(2) != PE_MAGIC:
            logger.warning("not_a_pe_file", path=file_path.full_name)
            return info

    try:
        pe = pefile.PE(file_path.full_name, fast_load=True)
    except pefile.PEFormatError as exc:
        logger.warning("pe_parse_failed", path=file_path.full_name, error=str(exc))
        return info

    try:
        info.arch = _pe_machine_name(pe.FILE_HEADER.Machine)
        info.bits = 64 if pe.OPTIONAL_HEADER.Magic == 0x20B else 32
        info.is_dll = pe.is_dll()
        info.entry_point = pe.OPTIONAL_HEADER.AddressOfEntryPoint
        info.section_names = [
            sec.Name.rstrip(b"\x00").decode(errors="replace") for sec in pe.sections
        ]
    finally:
        pe.close()
    return info


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PE_MACHINES = {
    0x14C: "x86",
    0x8664: "x86_64",
    0x1C0: "ARM",
    0xAA64: "ARM64",
}


def _pe_machine_name(machine: int) -> str:
    return _PE_MACHINES.get(machine, f"0x{machine:X}")
