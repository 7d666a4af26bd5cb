from .engine import disassemble, DisassemblyEngine
from .disasm import DisassemblyResult, create_workspace, release_workspace, ensure_tool_available
from .parsing import normalize_il, normalize_resource_dump, normalize_text
from .errors import (
    IlnormError,
    InputNotFoundError,
    ToolProvisioningError,
    ExternalToolError,
    ToolTimeoutError,
    DisassemblyIOError,
)

__version__ = "0.1.0"
