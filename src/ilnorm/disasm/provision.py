"""
Provisioning of the ildasm binary.

ildasm ships inside the package (ilnorm/bundled) and is copied out to a
well-known location the first time it is needed. The resolved path is
process-wide state: computed once under a lock, never changed afterwards.
"""
import os
import shutil
import stat
import threading
from importlib import resources
from pathlib import Path
from typing import Callable, Iterable, Optional
from ..errors import DisassemblyIOError, ToolProvisioningError

TOOL_NAME = "ildasm.exe"
DEFAULT_TOOL_PATH = Path.home() / ".ilnorm" / "bin" / TOOL_NAME
CHUNK_SIZE = 4096


def bundled_payloads():
    """Lists the files shipped in the ilnorm.bundled resource directory."""
    return resources.files("ilnorm.bundled").iterdir()


def find_payload(payloads: Iterable, file_name: str = TOOL_NAME):
    """First payload whose name ends with `file_name`, ignoring case."""
    wanted = file_name.lower()
    for payload in payloads:
        if payload.name.lower().endswith(wanted):
            return payload
    raise ToolProvisioningError(f"Cannot find {file_name} in the bundled resources of ilnorm")


def extract_payload(payload, target: Path):
    """
    Streams the payload to `target`. An existing file is left alone, whatever
    its version: presence is enough.
    """
    if target.exists():
        return
    # target only ever appears complete; racing writers each use their own tmp
    tmp = target.with_name(f"{target.name}.{os.getpid()}.{threading.get_ident()}.tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with payload.open("rb") as src, open(tmp, "wb") as dst:
            shutil.copyfileobj(src, dst, CHUNK_SIZE)
        mode = os.stat(tmp).st_mode
        os.chmod(tmp, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        os.replace(tmp, target)
    except OSError as e:
        if tmp.exists():
            tmp.unlink()
        raise DisassemblyIOError(target, f"Cannot extract {TOOL_NAME} ({e})") from e


class ToolBinary:
    """
    Write-once holder for the disassembler path.
    """
    def __init__(self, target: Optional[Path] = None, payloads: Optional[Callable[[], Iterable]] = None):
        self.target = Path(target) if target else DEFAULT_TOOL_PATH
        self._payloads = payloads if payloads else bundled_payloads
        self._lock = threading.Lock()
        self._path: Optional[Path] = None

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def ensure(self) -> Path:
        if self._path is not None:
            return self._path
        with self._lock:
            if self._path is None:
                if not self.target.exists():
                    extract_payload(find_payload(self._payloads()), self.target)
                self._path = self.target
        return self._path


_TOOL = ToolBinary()


def ensure_tool_available() -> Path:
    """Materializes ildasm on first use and returns its path."""
    return _TOOL.ensure()


def resolve_tool(tool_path: Optional[str] = None) -> Path:
    """
    A configured tool path is used as-is and must already exist;
    otherwise the bundled copy is provisioned.
    """
    if tool_path:
        path = Path(tool_path)
        if not path.exists():
            raise ToolProvisioningError(f"Configured disassembler not found: {tool_path}")
        return path
    return ensure_tool_available()
