import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List
from .workspace import release_workspace

# PostSharp drops a versioned aspect payload next to the IL on every build.
# Its bytes change between otherwise identical builds.
RE_NOISE_RESOURCE = re.compile(r"^PostSharp\.Aspects\.[0-9.]+$", re.IGNORECASE)


@dataclass
class DisassemblyResult:
    """
    What a successful run hands back. The workspace belongs to the holder
    and stays on disk until release() is called.
    """
    workspace: Path
    il_file: Path
    resources: List[Path] = field(default_factory=list)

    def read_text(self) -> str:
        with open(self.il_file, "r") as f:
            return f.read()

    def release(self):
        release_workspace(self.workspace)


def is_noise_resource(file_name: str) -> bool:
    return RE_NOISE_RESOURCE.match(file_name) is not None


def collect(workspace, il_file) -> DisassemblyResult:
    """
    Lists the files ildasm left directly in the workspace.
    Everything except the IL listing and known noise is a passthrough resource.
    """
    workspace = Path(workspace)
    il_file = Path(il_file)
    resources = [
        entry for entry in sorted(workspace.iterdir())
        if entry.is_file() and entry != il_file and not is_noise_resource(entry.name)
    ]
    return DisassemblyResult(workspace=workspace, il_file=il_file, resources=resources)
