"""Tests for function-boundary scanning, code extents and call extraction."""

import pytest

from core.errors import ParseError
from core.models import FunctionRegion
from parsers.disasm import (
    RegionTokenizer,
    build_symbol_resolver,
    label_name,
    parse_disassembly,
    scan_function_regions,
)

IMPORTED = ["GetLastError", "CreateFileW", "MessageBoxW"]


@pytest.fixture
def listing(disasm_output, sample_file):
    return parse_disassembly(disasm_output, sample_file, IMPORTED)


def _tokenize(lines, resolver=None, file=None):
    region = FunctionRegion(name="f", line_start=0)
    tokenizer = RegionTokenizer(region, file, resolver or {})
    for line in lines:
        tokenizer.feed(line)
    return tokenizer.finish(), tokenizer.calls


# ---------------------------------------------------------------------------
# Labels and regions
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("line, expected", [
    ("?run@@YAXXZ:", "?run@@YAXXZ"),
    ("MyFunc:   ", "MyFunc"),
    ("?f@@YAXXZ (void __cdecl f(void)):", "?f@@YAXXZ (void __cdecl f(void))"),
    ("  0000000180001010: 48 83 EC 28        sub         rsp,28h", None),
    ("  0000000180001010:", None),
    ("", None),
    ("  Summary", None),
])
def test_label_name(line, expected):
    assert label_name(line) == expected


def test_regions_are_contiguous_and_blank_line_closes(listing, disasm_output):
    regions = listing.regions

    assert listing.bounds.start == 7
    assert listing.function_names == ["?run@@YAXXZ", "?step@ns@@YAHH@Z", "MyFunc"]
    assert [(r.line_start, r.line_end) for r in regions] == [(8, 13), (13, 19), (19, 24)]
    assert regions[0].line_end == regions[1].line_start
    assert not disasm_output[regions[2].line_end].strip()


def test_last_region_runs_to_end_of_input():
    lines = ["a:", "  00401000: C3  ret", "b:", "  00401001: C3  ret"]

    regions = scan_function_regions(lines, 0, len(lines))

    assert [(r.line_start, r.line_end) for r in regions] == [(0, 2), (2, 4)]


def test_lines_before_first_label_are_not_a_region():
    lines = ["  00401000: C3  ret", "a:", "  00401001: C3  ret"]

    regions = scan_function_regions(lines, 0, len(lines))

    assert len(regions) == 1
    assert regions[0].line_start == 1


def test_region_line_count_excludes_label(listing):
    run, step, _ = listing.regions

    assert [r.line_count for r in listing.regions] == [4, 5, 4]
    assert run.to_dict()["line_count"] == 4
    assert step.to_dict()["code_address_start"] == "0x180001020"


# ---------------------------------------------------------------------------
# Code extent
# ---------------------------------------------------------------------------


def test_code_byte_counts(listing):
    run, step, my_func = listing.regions

    assert run.first_address == 0x180001010
    assert run.code_byte_count == 16
    assert run.filler_byte_count == 0

    assert step.first_address == 0x180001020
    assert step.code_byte_count == 4
    assert step.filler_byte_count == 3
    assert step.opcode_byte_count == 7

    # continuation line without an address still counts its byte
    assert my_func.code_byte_count == 13
    assert my_func.filler_byte_count == 0


def test_filler_run_is_reset_by_real_code():
    region, _ = _tokenize([
        "  00401000: CC  int 3",
        "  00401001: CC  int 3",
        "  00401002: CC  int 3",
        "  00401003: 90  nop",
    ])

    assert region.filler_byte_count == 0
    assert region.code_byte_count == 4


def test_filler_bytes_on_one_line_chain():
    region, _ = _tokenize([
        "  00401000: C3           ret",
        "  00401001: CC CC CC     int 3",
    ])

    assert region.filler_byte_count == 3
    assert region.code_byte_count == 1


def test_mid_instruction_cc_is_not_filler():
    region, _ = _tokenize(["  00401000: 48 CC  mov eax,ecx"])

    assert region.filler_byte_count == 0
    assert region.code_byte_count == 2


def test_region_without_addresses_has_no_extent():
    region, calls = _tokenize(["   ; comment line"])

    assert region.first_address is None
    assert region.code_byte_count == 0
    assert calls == []


# ---------------------------------------------------------------------------
# Call edges
# ---------------------------------------------------------------------------


def test_call_edges_in_order(listing, sample_file):
    assert [(c.caller_symbol, c.callee_symbol) for c in listing.calls] == [
        ("?run@@YAXXZ", "?step@ns@@YAHH@Z"),
        ("?run@@YAXXZ", "GetLastError"),
        ("MyFunc", "?step@ns@@YAHH@Z"),
        ("MyFunc", "MessageBoxW"),
    ]
    assert all(c.called_from_file == sample_file for c in listing.calls)


def test_code_after_blank_line_is_not_attributed(listing):
    assert "?run@@YAXXZ" not in [c.callee_symbol for c in listing.calls]


def test_unknown_operands_make_no_edge(disasm_output, sample_file):
    listing = parse_disassembly(disasm_output, sample_file)

    callees = {c.callee_symbol for c in listing.calls}
    assert callees == {"?step@ns@@YAHH@Z"}


def test_numeric_operands_are_never_callees():
    resolver = {"10h": "10h", "helper": "helper"}
    _, calls = _tokenize(["  00401000: 83 C0 10  add eax,10h", "  00401003: E8 00  call helper"],
                         resolver)

    assert [c.callee_symbol for c in calls] == ["helper"]


def test_operands_are_split_on_brackets_and_arithmetic():
    resolver = {"table": "table", "ecx": "ecx"}
    _, calls = _tokenize(["  00401000: 8B 04 8D 00  mov eax,dword ptr table[ecx*4-8]"], resolver)

    # '*' is not a delimiter
    assert [c.callee_symbol for c in calls] == ["table"]

    _, calls = _tokenize(["  00401000: 8B 04 8D 00  mov eax,dword ptr [table+ecx-8]"], resolver)

    assert [c.callee_symbol for c in calls] == ["table", "ecx"]


def test_resolver_aliases():
    resolver = build_symbol_resolver(
        ["?f@@YAXXZ (void __cdecl f(void))", "plain"],
        ["GetLastError"],
        aliases={"thunk_plain": "plain"},
    )

    assert resolver["__imp_GetLastError"] == "GetLastError"
    assert resolver["GetLastError"] == "GetLastError"
    assert resolver["?f@@YAXXZ"] == "?f@@YAXXZ (void __cdecl f(void))"
    assert resolver["thunk_plain"] == "plain"
    assert resolver["plain"] == "plain"


def test_exact_name_wins_over_alias():
    resolver = build_symbol_resolver(["__imp_X"], ["X"])

    assert resolver["__imp_X"] == "__imp_X"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


def test_listing_without_header_is_fatal(sample_file):
    with pytest.raises(ParseError):
        parse_disassembly(["f:", "  00401000: C3  ret"], sample_file)


def test_header_only_listing_is_empty(sample_file):
    listing = parse_disassembly(["Dump of file x.dll", "File Type: DLL"], sample_file)

    assert listing.regions == []
    assert listing.calls == []

