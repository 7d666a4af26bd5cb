import os
from pathlib import Path
from typing import Iterable, Iterator, Optional, Sequence
from .rules import EraseRule, RedactionRule, SkipRule
from ..errors import DisassemblyIOError


def _split_terminator(line: str):
    body = line.rstrip("\r\n")
    return body, line[len(body):]


def clean_lines(lines: Iterable[str], rules: Sequence[RedactionRule]) -> Iterator[str]:
    """
    Single pass over `lines` (terminators included, as file iteration yields them).

    Per line: every EraseRule runs in order on the body, then the SkipRules are
    tested in order against the erased body. A hit drops the line and arms a
    counter; while the counter is pending, lines are dropped without being
    looked at.
    """
    erasers = [r for r in rules if isinstance(r, EraseRule)]
    skippers = [r for r in rules if isinstance(r, SkipRule)]
    pending_skip = 0

    for line in lines:
        if pending_skip > 0:
            pending_skip -= 1
            continue

        body, terminator = _split_terminator(line)
        for rule in erasers:
            body = rule.apply(body)

        triggered = False
        for rule in skippers:
            if rule.matches(body):
                pending_skip = rule.count
                triggered = True
                break
        if triggered:
            continue

        yield body + terminator


def rewrite_file(path, rules: Sequence[RedactionRule], encoding: Optional[str] = None,
                 errors: Optional[str] = None, newline: Optional[str] = None):
    """
    Rewrites `path` through clean_lines. Output goes to a sibling .tmp file
    which replaces the original only once both handles are closed.
    """
    path = Path(path)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        with open(path, "r", encoding=encoding, errors=errors, newline=newline) as reader, \
                open(tmp_path, "w", encoding=encoding, errors=errors, newline=newline) as writer:
            writer.writelines(clean_lines(reader, rules))
        os.replace(tmp_path, path)
    except (OSError, UnicodeError) as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise DisassemblyIOError(path, f"Failed to normalize file ({e})") from e
