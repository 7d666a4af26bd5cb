from .workspace import create_workspace, release_workspace
from .provision import ToolBinary, ensure_tool_available, resolve_tool
from .invoker import invoke, build_command, IL_FILE_NAME, RES_FILE_NAME
from .collector import DisassemblyResult, collect, is_noise_resource
