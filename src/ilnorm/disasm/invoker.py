import os
import subprocess
from pathlib import Path
from typing import List, Optional
from ..errors import DisassemblyIOError, ExternalToolError, ToolTimeoutError

IL_FILE_NAME = "output.il"
RES_FILE_NAME = "output.res"


def build_command(tool_path, input_path) -> List[str]:
    """
    ildasm command line. The output name is relative so that every file
    ildasm writes (listing, .res dump, extracted resources) lands in the cwd.
    """
    return [
        str(tool_path),
        "/all",
        "/text",
        str(Path(input_path).resolve()),
        f"/output:{IL_FILE_NAME}",
    ]


def invoke(tool_path, input_path, workspace, timeout: Optional[float] = None) -> str:
    """
    Runs ildasm inside `workspace` and blocks until it exits.
    Returns the combined stdout/stderr log.
    """
    command = build_command(tool_path, input_path)

    # Keep ildasm from flashing a console window on Windows
    creationflags = getattr(subprocess, "CREATE_NO_WINDOW", 0) if os.name == "nt" else 0

    # stderr is folded into stdout so lines keep their arrival order
    try:
        process = subprocess.Popen(
            command,
            cwd=str(workspace),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            creationflags=creationflags,
        )
    except OSError as e:
        raise DisassemblyIOError(tool_path, f"Cannot launch disassembler ({e})") from e
    try:
        raw_output, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        raw_output, _ = process.communicate()
        raise ToolTimeoutError(timeout, _join_lines(raw_output))

    output = _join_lines(raw_output)
    if process.returncode > 0:
        raise ExternalToolError(process.returncode, output, input_path, Path(workspace))
    return output


def _join_lines(raw: Optional[str]) -> str:
    if not raw:
        return ""
    return "".join(line + "\n" for line in raw.splitlines())
