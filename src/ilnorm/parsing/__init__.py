import io
from .rules import EraseRule, SkipRule, RedactionRule, il_rules, resource_rules
from .cleaner import clean_lines, rewrite_file
from .normalizer import normalize_il, normalize_resource_dump


def normalize_text(raw_il: str, strip_version_info: bool = False) -> str:
    """
    In-memory variant of normalize_il, for callers that already hold the listing.
    Line endings are kept as they are.
    """
    return "".join(clean_lines(io.StringIO(raw_il, newline=""), il_rules(strip_version_info)))
