"""
Error types raised by the disassembly pipeline.
Nothing here is retried internally; every failure reaches the caller typed.
"""
from pathlib import Path
from typing import Optional


class IlnormError(Exception):
    """Base class for all ilnorm failures."""


class InputNotFoundError(IlnormError, FileNotFoundError):
    def __init__(self, path):
        super().__init__(f"The file {path} does not exist!")
        self.path = Path(path)


class ToolProvisioningError(IlnormError, FileNotFoundError):
    pass


class ExternalToolError(IlnormError):
    """
    The disassembler exited with a positive status.
    The workspace is left on disk so the partial output can be inspected.
    """

    def __init__(self, exit_code: int, output: str, input_path=None, workspace: Optional[Path] = None):
        super().__init__(
            f"Generating IL code for file {input_path} failed with exit code - {exit_code}. Log: {output}"
        )
        self.exit_code = exit_code
        self.output = output
        self.input_path = input_path
        self.workspace = workspace


class ToolTimeoutError(IlnormError):
    def __init__(self, timeout: float, output: str = ""):
        super().__init__(f"Disassembler did not finish within {timeout} seconds")
        self.timeout = timeout
        self.output = output


class DisassemblyIOError(IlnormError):
    def __init__(self, path, message: str):
        super().__init__(f"{message}: {path}")
        self.path = Path(path)
