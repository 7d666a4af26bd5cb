from typing import Callable, Optional
from .disasm import (
    DisassemblyResult,
    IL_FILE_NAME,
    RES_FILE_NAME,
    collect,
    create_workspace,
    invoke,
    release_workspace,
    resolve_tool,
)
from .parsing import normalize_il, normalize_resource_dump
from .errors import DisassemblyIOError, ExternalToolError, InputNotFoundError, ToolTimeoutError
from .utils.config import ConfigManager, DEFAULT_CONFIG
from .utils.watcher import FileWatcher
import os
import threading
import time


def disassemble(
    input_path: str,
    strip_version_info: bool = False,
    tool_path: Optional[str] = None,
    timeout: Optional[float] = None,
    log: Optional[Callable[[str], None]] = None,
) -> DisassemblyResult:
    """
    Pipeline: Binary -> ildasm -> Normalized IL (+ .res) -> Result

    The returned workspace is owned by the caller (see DisassemblyResult.release).
    When ildasm fails the workspace is kept for inspection; the error carries its path.
    A tool that times out or cannot be launched leaves nothing to inspect, so its
    workspace is released before the error propagates.
    """
    log = log or (lambda msg: None)

    if not os.path.isfile(input_path):
        raise InputNotFoundError(input_path)

    tool = resolve_tool(tool_path)
    workspace = create_workspace()
    log(f"Disassembling {input_path} with {tool} into {workspace}")

    try:
        invoke(tool, input_path, workspace, timeout=timeout)
    except (ToolTimeoutError, DisassemblyIOError):
        release_workspace(workspace)
        raise

    il_file = workspace / IL_FILE_NAME
    normalize_il(il_file, strip_version_info)

    res_file = workspace / RES_FILE_NAME
    if res_file.is_file():
        normalize_resource_dump(res_file, strip_version_info)
        log(f"Resource dump found ({'stripped' if strip_version_info else 'kept'})")

    result = collect(workspace, il_file)
    log(f"Collected {len(result.resources)} passthrough resource(s)")
    return result


class DisassemblyEngine:
    """
    Keeps the latest normalized disassembly of one module, optionally
    re-running whenever the module is rebuilt.
    """
    def __init__(self, input_path: str, config_manager: Optional[ConfigManager] = None):
        self.config = config_manager if config_manager else ConfigManager()
        self.input_path = os.path.abspath(input_path)
        self.strip_version_info = bool(self.config.get("strip_version_info", False))
        self.tool_path = self.config.get("tool_path")
        self.timeout = self.config.get("timeout")
        self.log_file = self.config.get("log_file") or DEFAULT_CONFIG["log_file"]
        self.watcher = FileWatcher()
        self.on_update_callback: Optional[Callable[["DisassemblyEngine"], None]] = None
        self.result: Optional[DisassemblyResult] = None
        self.last_error: Optional[Exception] = None
        self.runs = 0
        self._lock = threading.Lock()

    def _log(self, msg: str):
        with open(self.log_file, "a") as f:
            f.write(f"[{time.time()}] {msg}\n")

    def run(self) -> DisassemblyResult:
        """
        Disassembles once and replaces the current result.
        The previous workspace is released only after the new run succeeded.
        """
        with self._lock:
            result = disassemble(
                self.input_path,
                strip_version_info=self.strip_version_info,
                tool_path=self.tool_path,
                timeout=self.timeout,
                log=self._log,
            )
            previous, self.result = self.result, result
            self.last_error = None
            self.runs += 1
            if previous is not None:
                self._log(f"Releasing previous workspace {previous.workspace}")
                previous.release()
            return result

    def refresh(self):
        self._log(f"Refreshing {self.input_path} (strip_version_info={self.strip_version_info})")
        try:
            self.run()
        except Exception as e:
            self._log(f"Refresh Error: {e}")
            if isinstance(e, ExternalToolError):
                self._log(f"Kept failed workspace {e.workspace}")
            self.last_error = e

        if self.on_update_callback:
            self.on_update_callback(self)

    def start(self):
        self.refresh()
        self.watcher.start_watching(self.input_path, self._on_file_saved)

    def stop(self):
        self.watcher.stop_watching()

    def release(self):
        with self._lock:
            if self.result is not None:
                self._log(f"Releasing workspace {self.result.workspace}")
                self.result.release()
                self.result = None

    def _on_file_saved(self, path: str):
        self.refresh()
