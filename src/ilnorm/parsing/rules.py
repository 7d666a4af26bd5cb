import re
from dataclasses import dataclass
from typing import List, Pattern, Union

# --- REDACTION RULE TYPES ---

@dataclass(frozen=True)
class EraseRule:
    """Removes every match from the line; the (possibly empty) line is kept."""
    name: str
    pattern: Pattern[str]

    def apply(self, line: str) -> str:
        return self.pattern.sub("", line)


@dataclass(frozen=True)
class SkipRule:
    """A matching line is dropped together with the next `count` lines."""
    name: str
    pattern: Pattern[str]
    count: int

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None


RedactionRule = Union[EraseRule, SkipRule]


# --- IL REGEX REGISTRY ---

# 1. BUILD IDENTITY
# // MVID: {12345678-1234-1234-1234-123456789abc}
RE_MVID = re.compile(r"//\s*MVID\:\s*\{[a-zA-Z0-9\-]+\}")

# 2. LOAD ADDRESS
# // Image base: 0x00E30000   and   .imagebase 0x10000000
RE_IMAGE_BASE = re.compile(r"//\s*Image\s+base\:\s*0x[0-9A-Fa-f]*")
RE_DOT_IMAGE_BASE = re.compile(r"^\.imagebase\s0x[0-9A-Fa-f]*")

# 3. TIMESTAMPS
RE_TIME_STAMP = re.compile(r"//\s*Time-date\s+stamp\:\s*0x[0-9A-Fa-f]*")

# 4. COMPILER GENERATED
# <PrivateImplementationDetails>{4C3D2D4A-...} carries a fresh guid per build
RE_PRIVATE_IMPLEMENTATION_DETAILS = re.compile(r"<PrivateImplementationDetails>\{[^\}]*\}")

# 5. ATTRIBUTE BLOBS
# .custom /*0C000001:0A000002*/ instance void ...  (metadata tokens drift)
RE_CUSTOM_COMMENT = re.compile(r"\s*\.custom\s+/\*.*$")
# 01 00 07 31 2E 30 2E 30 2E 30 00 00   // ...1.0.0.0..
RE_HEXA_DATA = re.compile(r"\s*[A-F0-9][A-F0-9][A-F0-9 ]+\s*//.*$")

# 6. ENTRY POINT
# The entry point's raw bytes follow on the next two lines.
RE_ENTRY_POINT = re.compile(r"//\s*Entry point code\:")

# 7. VERSION STAMPS (opt-in)
RE_ASSEMBLY_VERSION = re.compile(r"^[ ]*\.ver \d.*$")
RE_ASSEMBLY_FILE_VERSION = re.compile(r"^[ ]*\.custom.*System.Reflection\.AssemblyFileVersionAttribute.*$")


# --- RESOURCE DUMP REGEX REGISTRY ---
# The .res dump is UTF-16 and fields are NUL padded.

RE_VS_VERSION_INFO_RES = re.compile(r"VS_VERSION_INFO.*VarFileInfo")
RE_FILE_VERSION_RES = re.compile(r"FileVersion[0-9.\x00 ]*")
RE_PRODUCT_VERSION_RES = re.compile(r"ProductVersion[0-9.\x00 ]*")
RE_ASSEMBLY_VERSION_RES = re.compile(r"Assembly Version[0-9.\x00 ]*")

ENTRY_POINT_SKIP = 2


def il_rules(strip_version_info: bool = False) -> List[RedactionRule]:
    """
    Ordered rule list for the IL text file.
    Erase rules come first, in list order; the skip trigger is tested last.
    """
    rules: List[RedactionRule] = [
        EraseRule("mvid", RE_MVID),
        EraseRule("image-base", RE_IMAGE_BASE),
        EraseRule("dot-image-base", RE_DOT_IMAGE_BASE),
        EraseRule("time-stamp", RE_TIME_STAMP),
        EraseRule("private-implementation-details", RE_PRIVATE_IMPLEMENTATION_DETAILS),
        EraseRule("custom-comment", RE_CUSTOM_COMMENT),
        EraseRule("hexa-data", RE_HEXA_DATA),
    ]
    if strip_version_info:
        rules.append(EraseRule("assembly-file-version", RE_ASSEMBLY_FILE_VERSION))
        rules.append(EraseRule("assembly-version", RE_ASSEMBLY_VERSION))
    rules.append(SkipRule("entry-point", RE_ENTRY_POINT, ENTRY_POINT_SKIP))
    return rules


def resource_rules() -> List[RedactionRule]:
    return [
        EraseRule("vs-version-info", RE_VS_VERSION_INFO_RES),
        EraseRule("file-version", RE_FILE_VERSION_RES),
        EraseRule("product-version", RE_PRODUCT_VERSION_RES),
        EraseRule("assembly-version", RE_ASSEMBLY_VERSION_RES),
    ]
