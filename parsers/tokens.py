"""Lexical predicates for dumpbin columns."""

from __future__ import annotations

import re

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
DECIMAL_DIGITS = frozenset("0123456789")

MIN_ADDRESS_DIGITS = 8
FILLER_BYTE = "CC"

# operand text is split on these; whitespace is already gone by then
OPERAND_DELIMITERS = re.compile(r"[ \t,\[+\]\-]+")


def is_hex(token: str) -> bool:
    return bool(token) and all(c in HEX_DIGITS for c in token)


def is_decimal(token: str) -> bool:
    return bool(token) and all(c in DECIMAL_DIGITS for c in token)


def is_address_token(token: str) -> bool:
    """``0000000180001000:`` / ``10001000`` style address column."""
    digits = token[:-1] if token.endswith(":") else token
    return len(digits) >= MIN_ADDRESS_DIGITS and is_hex(digits)


def parse_address(token: str) -> int:
    return int(token.rstrip(":"), 16)


def is_opcode_byte(token: str) -> bool:
    return len(token) == 2 and is_hex(token)


def is_filler_byte(token: str) -> bool:
    return token.upper() == FILLER_BYTE


def split_operands(token: str) -> list[str]:
    return [part for part in OPERAND_DELIMITERS.split(token) if part]
