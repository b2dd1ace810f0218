"""Environment-driven settings for dumpbin discovery, logging and the agent."""

from __future__ import annotations

import ntpath
import os
from dataclasses import dataclass

DEFAULT_TOOLSET_VERSION = "14.13.26128"
DEFAULT_HOST_ARCH = "Hostx64/x64"
DEFAULT_TIMEOUT = 300.0
DEFAULT_MODEL_ID = "gemini-2.5-flash"


def _default_vswhere_path() -> str:
    program_files = os.getenv("ProgramFiles(x86)", r"C:\Program Files (x86)")
    return ntpath.join(program_files, "Microsoft Visual Studio", "Installer", "vswhere.exe")


@dataclass(frozen=True)
class Settings:
    dumpbin_path: str = ""
    vswhere_path: str = ""
    toolset_version: str = DEFAULT_TOOLSET_VERSION
    host_arch: str = DEFAULT_HOST_ARCH
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"
    log_json: bool = False
    debug: bool = False
    google_api_key: str = ""
    model_id: str = DEFAULT_MODEL_ID

    @classmethod
    def from_env(cls) -> Settings:
        timeout = os.getenv("DUMPBIN_TIMEOUT", "")
        return cls(
            dumpbin_path=os.getenv("DUMPBIN_PATH", ""),
            vswhere_path=os.getenv("VSWHERE_PATH", "") or _default_vswhere_path(),
            toolset_version=os.getenv("MSVC_TOOLSET_VERSION", DEFAULT_TOOLSET_VERSION),
            host_arch=os.getenv("MSVC_HOST_ARCH", DEFAULT_HOST_ARCH),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "0") == "1",
            debug=os.getenv("DEBUG", "0") == "1",
            google_api_key=os.getenv("GOOGLE_API_KEY", ""),
            model_id=os.getenv("AGENT_MODEL_ID", DEFAULT_MODEL_ID),
        )

    def dumpbin_under(self, installation_path: str) -> str:
        """dumpbin.exe location inside a Visual Studio installation."""
        return ntpath.join(
            installation_path, "VC", "Tools", "MSVC", self.toolset_version,
            "bin", *self.host_arch.split("/"), "dumpbin.exe",
        )
