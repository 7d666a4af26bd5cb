"""
Shared fixtures: a stand-in for ildasm.

The fake tool is a small Python script with a shebang, so it is launched
exactly the way the real disassembler is (one executable path + arguments).
Every run emits fresh MVIDs, timestamps and version stamps, which is what
normalization is supposed to hide. Behavior is steered through environment
variables:

  FAKE_ILDASM_EXIT   exit status to return (default 0)
  FAKE_ILDASM_SLEEP  seconds to sleep before doing anything
  FAKE_ILDASM_RES    "1" to also write output.res and extracted resources
"""
import os
import stat
import sys

import pytest

FAKE_ILDASM = '''#!{python}
import os
import random
import sys
import time
import uuid

time.sleep(float(os.environ.get("FAKE_ILDASM_SLEEP", "0")))

args = sys.argv[1:]
print("args: " + "|".join(args))
sys.stdout.flush()
sys.stderr.write("warning: stderr line\\n")
sys.stderr.flush()

exit_code = int(os.environ.get("FAKE_ILDASM_EXIT", "0"))
if exit_code:
    with open("partial.il", "w") as f:
        f.write("// partial\\n")
    sys.exit(exit_code)

output = args[3].split(":", 1)[1]
stamp = "%08X" % random.getrandbits(32)
lines = [
    "// Metadata version: v4.0.30319",
    ".assembly extern mscorlib",
    "{{",
    "  .ver 4:0:0:0",
    "}}",
    ".assembly Sample",
    "{{",
    "  .custom instance void [mscorlib]System.Reflection.AssemblyFileVersionAttribute::.ctor(string) = ( 01 00 07 31 2E 30 2E 30 2E %02X 00 00 )" % random.getrandbits(8),
    "  .ver 1:0:%d:0" % random.randint(0, 9999),
    "}}",
    ".module Sample.dll",
    "// MVID: {{%s}}" % uuid.uuid4(),
    ".imagebase 0x%08X" % random.getrandbits(32),
    "// Image base: 0x%08X" % random.getrandbits(32),
    "// Time-date stamp: 0x" + stamp,
    "// Entry point code:",
    "// FF 25 %02X 20 40 00" % random.getrandbits(8),
    "// %s" % stamp,
    ".method public static void Main() cil managed",
    "{{",
    "  .entrypoint",
    "  ret",
    "}}",
]
with open(output, "w") as f:
    f.write("\\n".join(lines) + "\\n")

if os.environ.get("FAKE_ILDASM_RES") == "1":
    base = os.path.splitext(output)[0]
    res = (
        "VS_VERSION_INFO\\x00%d\\x00StringFileInfo\\x00VarFileInfo\\x00\\r\\n"
        "FileVersion\\x001.0.0.%d\\x00\\r\\n"
        "ProductVersion\\x001.0.0.%d\\x00\\r\\n"
        "Assembly Version\\x001.0.%d.0\\x00\\r\\n"
        "CompanyName\\x00Contoso\\x00\\r\\n"
    ) % tuple(random.randint(0, 9999) for _ in range(4))
    with open(base + ".res", "wb") as f:
        f.write(res.encode("utf-16-le"))
    with open("Sample.Strings.resources", "wb") as f:
        f.write(b"\\xce\\xca\\xef\\xbe")
    with open("PostSharp.Aspects.4.1.28", "wb") as f:
        f.write(os.urandom(16))
'''


@pytest.fixture
def fake_ildasm(tmp_path):
    """Path (str) to an executable fake ildasm."""
    if os.name == "nt":
        pytest.skip("fake ildasm relies on a shebang script")
    tool = tmp_path / "tools" / "ildasm"
    tool.parent.mkdir()
    tool.write_text(FAKE_ILDASM.format(python=sys.executable))
    tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(tool)


@pytest.fixture
def sample_module(tmp_path):
    """A file standing in for the compiled module; its bytes never matter."""
    module = tmp_path / "Sample.dll"
    module.write_bytes(b"MZ\x90\x00")
    return str(module)
