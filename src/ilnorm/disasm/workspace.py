import secrets
import shutil
import tempfile
from pathlib import Path
from typing import Optional
from ..errors import DisassemblyIOError


def _random_name() -> str:
    return secrets.token_hex(6)


def create_workspace(root: Optional[str] = None) -> Path:
    """
    Creates a fresh, empty directory for one disassembly run.
    Names are drawn until one is free; mkdir itself refuses an existing entry,
    so two callers can never end up sharing a directory.
    """
    base = Path(root) if root else Path(tempfile.gettempdir())
    while True:
        path = base / _random_name()
        if path.exists():
            continue
        try:
            path.mkdir()
        except FileExistsError:
            continue
        except OSError as e:
            raise DisassemblyIOError(path, f"Cannot create workspace ({e})") from e
        return path


def release_workspace(path) -> None:
    """Deletes the workspace and everything under it."""
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise DisassemblyIOError(path, f"Cannot delete workspace ({e})") from e
