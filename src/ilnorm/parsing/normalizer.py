"""
Normalizers for the two text artifacts ildasm writes: the IL listing and the
optional Win32 resource dump.
"""
from .cleaner import rewrite_file
from .rules import il_rules, resource_rules

# .res dumps are wide text; lone surrogates and raw line endings must survive.
RESOURCE_ENCODING = "utf-16-le"
RESOURCE_ERRORS = "surrogatepass"


def normalize_il(il_file, strip_version_info: bool = False):
    """
    Strips build noise from the IL listing in place, using the platform's
    default text encoding.
    """
    rewrite_file(il_file, il_rules(strip_version_info))


def normalize_resource_dump(res_file, strip_version_info: bool = False):
    """
    Version resources are the only volatile part of the dump, so without
    `strip_version_info` the file is left byte-for-byte untouched.
    """
    if not strip_version_info:
        return
    rewrite_file(
        res_file,
        resource_rules(),
        encoding=RESOURCE_ENCODING,
        errors=RESOURCE_ERRORS,
        newline="",
    )
