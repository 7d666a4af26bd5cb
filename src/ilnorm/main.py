import sys
import os
import time
import shutil
import argparse
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from .engine import DisassemblyEngine, disassemble
from .errors import ExternalToolError, IlnormError
from .utils.config import ConfigManager

# stdout carries the IL itself, so everything else goes to stderr
console = Console(stderr=True)

C_ACCENT = "#45d3ee"
C_ERROR = "#e06c75"


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(description="ilnorm: deterministic, diffable IL disassembly")
    parser.add_argument("file", nargs="?", help=".NET module (.dll/.exe) to disassemble")
    parser.add_argument("--strip-version-info", action="store_true",
                        help="Also erase assembly/file/product version stamps")
    parser.add_argument("--output", "-o", help="Copy the normalized IL and its resources into this directory")
    parser.add_argument("--keep", action="store_true", help="Do not delete the temporary workspace")
    parser.add_argument("--watch", action="store_true", help="Re-disassemble whenever the module changes")
    parser.add_argument("--timeout", type=float, help="Kill ildasm after this many seconds")
    parser.add_argument("--tool", help="Use this ildasm instead of the bundled one")
    return parser


def _print_tool_failure(err: ExternalToolError):
    console.print(Panel(
        Text(err.output.rstrip() or "(no output)"),
        title=f"ildasm exited with code {err.exit_code}",
        title_align="left",
        border_style=C_ERROR,
    ))
    if err.workspace:
        console.print(f"Partial output kept in [bold]{escape(str(err.workspace))}[/bold]")


def _summary_table(engine: DisassemblyEngine) -> Table:
    table = Table(title=os.path.basename(engine.input_path), title_justify="left", expand=False)
    table.add_column("Run", style=f"bold {C_ACCENT}", no_wrap=True)
    table.add_column("Workspace")
    table.add_column("IL lines", justify="right")
    table.add_column("Resources", justify="right")

    result = engine.result
    if result is None:
        table.add_row(str(engine.runs), "-", "-", "-")
    else:
        line_count = len(result.read_text().splitlines())
        table.add_row(str(engine.runs), escape(str(result.workspace)), str(line_count), str(len(result.resources)))
    return table


def _export(result, output_dir: str):
    os.makedirs(output_dir, exist_ok=True)
    for path in [result.il_file] + result.resources:
        shutil.copy2(path, os.path.join(output_dir, path.name))


def _run_watch(abs_path: str, config: ConfigManager, args) -> None:
    engine = DisassemblyEngine(abs_path, config)
    engine.strip_version_info = args.strip_version_info or engine.strip_version_info
    if args.tool:
        engine.tool_path = args.tool
    if args.timeout is not None:
        engine.timeout = args.timeout

    def on_update(eng: DisassemblyEngine):
        if eng.last_error is not None:
            if isinstance(eng.last_error, ExternalToolError):
                _print_tool_failure(eng.last_error)
            else:
                console.print(f"[{C_ERROR}]Error:[/] {escape(str(eng.last_error))}")
            return
        console.print(_summary_table(eng))
        if args.output:
            _export(eng.result, args.output)

    engine.on_update_callback = on_update
    engine.start()
    console.print(f"Watching [bold]{escape(abs_path)}[/bold]. Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    finally:
        engine.stop()
        if not args.keep:
            engine.release()


def run():
    parser = _build_parser()
    args = parser.parse_args()

    if not args.file:
        console.print("Error: No input module specified.")
        console.print("Usage: ilnorm <assembly.dll|assembly.exe>")
        sys.exit(1)

    # Resolve to absolute path immediately
    abs_path = os.path.abspath(args.file)

    if not os.path.exists(abs_path):
        console.print(f"Error: File not found: {escape(abs_path)}")
        sys.exit(1)

    config = ConfigManager()

    if args.watch:
        try:
            _run_watch(abs_path, config, args)
        except KeyboardInterrupt:
            pass
        return

    strip = args.strip_version_info or bool(config.get("strip_version_info", False))
    timeout = args.timeout if args.timeout is not None else config.get("timeout")

    try:
        result = disassemble(
            abs_path,
            strip_version_info=strip,
            tool_path=args.tool or config.get("tool_path"),
            timeout=timeout,
        )
    except ExternalToolError as e:
        _print_tool_failure(e)
        sys.exit(1)
    except IlnormError as e:
        console.print(f"[{C_ERROR}]Fatal Error:[/] {escape(str(e))}")
        sys.exit(1)

    try:
        if args.output:
            _export(result, args.output)
            console.print(f"Wrote {1 + len(result.resources)} file(s) to [bold]{escape(args.output)}[/bold]")
        else:
            sys.stdout.write(result.read_text())
    finally:
        if args.keep:
            console.print(f"Workspace kept at [bold]{escape(str(result.workspace))}[/bold]")
        else:
            result.release()


if __name__ == "__main__":
    run()
