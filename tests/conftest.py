"""Pytest configuration and shared fixtures: captured dumpbin output and a fake runner."""

from __future__ import annotations

from typing import Sequence

import pytest

from core.config import Settings
from core.models import FileIdentity, FilePath
from core.process import DumpBinInvoker, ProcessResult

EXPORTS_OUTPUT = """\
Microsoft (R) COFF/PE Dumper Version 14.13.26128.0
Copyright (C) Microsoft Corporation.  All rights reserved.


Dump of file C:\\bin\\sample.dll

File Type: DLL

  Section contains the following exports for sample.dll

    00000000 characteristics
    FFFFFFFF time date stamp
        0.00 version
           1 ordinal base
           3 number of functions
           3 number of names

    ordinal hint RVA      name

          1    0 00001010 ?run@@YAXXZ = ?run@@YAXXZ (void __cdecl run(void))
          2    1 00001020 ?step@ns@@YAHH@Z = ?step@ns@@YAHH@Z (int __cdecl ns::step(int))
          3    2 00001030 MyFunc=?MyFunc@@YAXXZ

  Summary

        1000 .data
        1000 .text
"""

IMPORTS_OUTPUT = """\
Microsoft (R) COFF/PE Dumper Version 14.13.26128.0
Copyright (C) Microsoft Corporation.  All rights reserved.


Dump of file C:\\bin\\sample.dll

File Type: DLL

  Section contains the following imports:

    KERNEL32.dll
             180002000 Import Address Table
             180002050 Import Name Table
                     0 time date stamp
                     0 Index of first forwarder reference

                         2B5 GetLastError
                         1A3 CreateFileW

    USER32.dll
             180002020 Import Address Table
             180002070 Import Name Table
                     0 time date stamp
                     0 Index of first forwarder reference

                         283 MessageBoxW

  Summary

        1000 .data
"""

DEPENDENTS_OUTPUT = """\
Dump of file C:\\bin\\sample.dll

File Type: DLL

  Image has the following dependencies:

    KERNEL32.dll
    USER32.dll

  Image has the following delay load dependencies:

    SHELL32.dll

  Summary

        1000 .data
"""

DISASM_OUTPUT = """\
Microsoft (R) COFF/PE Dumper Version 14.13.26128.0
Copyright (C) Microsoft Corporation.  All rights reserved.


Dump of file C:\\bin\\sample.dll

File Type: DLL

?run@@YAXXZ:
  0000000180001010: 48 83 EC 28        sub         rsp,28h
  0000000180001014: E8 07 00 00 00     call        ?step@ns@@YAHH@Z
  0000000180001019: FF 15 E1 0F 00 00  call        qword ptr [__imp_GetLastError]
  000000018000101F: C3                 ret
?step@ns@@YAHH@Z:
  0000000180001020: 8D 41 01           lea         eax,[rcx+1]
  0000000180001023: C3                 ret
  0000000180001024: CC                 int         3
  0000000180001025: CC                 int         3
  0000000180001026: CC                 int         3
MyFunc:
  0000000180001030: 48 8D 0D C9 0F 00  lea         rcx,[?step@ns@@YAHH@Z]
                    00
  0000000180001037: E9 00 00 00 00     jmp         MessageBoxW
  000000018000103C: 90                 nop

  0000000180001100: E8 0B FF FF FF     call        ?run@@YAXXZ

  Summary

        1000 .text
"""


def _lines(text: str) -> list[str]:
    return text.splitlines()


@pytest.fixture
def exports_output() -> list[str]:
    return _lines(EXPORTS_OUTPUT)


@pytest.fixture
def imports_output() -> list[str]:
    return _lines(IMPORTS_OUTPUT)


@pytest.fixture
def dependents_output() -> list[str]:
    return _lines(DEPENDENTS_OUTPUT)


@pytest.fixture
def disasm_output() -> list[str]:
    return _lines(DISASM_OUTPUT)


@pytest.fixture
def sample_file() -> FilePath:
    return FilePath("C:\\bin\\sample.dll", FileIdentity("0123456789ABCDEF", 4096))


class FakeRunner:
    """ProcessRunner double answering by dumpbin option."""

    def __init__(self, outputs: dict[str, list[str]], exit_status: int = 0) -> None:
        self.outputs = outputs
        self.exit_status = exit_status
        self.calls: list[list[str]] = []

    def run(self, args: Sequence[str]) -> ProcessResult:
        self.calls.append(list(args))
        key = args[1] if len(args) > 1 else args[0]
        return ProcessResult(lines=list(self.outputs.get(key, [])), exit_status=self.exit_status)


@pytest.fixture
def fake_runner(exports_output, imports_output, dependents_output, disasm_output) -> FakeRunner:
    return FakeRunner({
        "/EXPORTS": exports_output,
        "/IMPORTS": imports_output,
        "/DEPENDENTS": dependents_output,
        "/DISASM": disasm_output,
    })


@pytest.fixture
def dumpbin_exe(tmp_path) -> str:
    exe = tmp_path / "dumpbin.exe"
    exe.write_bytes(b"")
    return str(exe)


@pytest.fixture
def invoker(fake_runner, dumpbin_exe) -> DumpBinInvoker:
    return DumpBinInvoker(runner=fake_runner, settings=Settings(), exe_path=dumpbin_exe)


@pytest.fixture
def binary_file(tmp_path) -> str:
    target = tmp_path / "sample.dll"
    target.write_bytes(b"MZ" + b"\x00" * 62)
    return str(target)
