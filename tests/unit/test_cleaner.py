"""
Unit tests for the line-streaming rewriter: erase/skip interplay,
line-count preservation and the atomic in-place rewrite.
"""
import re
import pytest
from unittest.mock import patch
from ilnorm.parsing.cleaner import clean_lines, rewrite_file
from ilnorm.parsing.rules import EraseRule, SkipRule, il_rules
from ilnorm.errors import DisassemblyIOError


def _clean(text, rules=None):
    lines = text.splitlines(keepends=True)
    return "".join(clean_lines(lines, rules if rules is not None else il_rules()))


class TestEraseRules:

    def test_mvid_line_becomes_empty_line(self):
        text = "before\n// MVID: {12345678-1234-1234-1234-123456789abc}\nafter\n"
        assert _clean(text) == "before\n\nafter\n"

    def test_line_count_preserved(self):
        text = (
            "// MVID: {12345678-1234-1234-1234-123456789abc}\n"
            ".imagebase 0x10000000\n"
            "// Image base: 0x00E30000\n"
            "// Time-date stamp: 0x5F3A2B1C\n"
            "    IL_0000:  ret\n"
        )
        out = _clean(text)
        assert len(out.splitlines()) == len(text.splitlines())
        assert out.splitlines()[-1] == "    IL_0000:  ret"

    def test_erasers_run_in_order(self):
        rules = [
            EraseRule("a", re.compile("ab")),
            EraseRule("b", re.compile("ac")),
        ]
        # "aabc" -> "ac" after the first rule, which the second then removes
        assert _clean("aabc\n", rules) == "\n"

    def test_no_rules_is_identity(self):
        text = "one\r\ntwo\nthree"
        assert _clean(text, []) == text

    def test_last_line_without_newline_kept(self):
        assert _clean("ret") == "ret"


class TestSkipRules:

    def test_entry_point_removes_three_lines(self):
        text = "a\n// Entry point code:\n// FF 25 00 20 40 00\n// 00402000\nb\n"
        assert _clean(text) == "a\nb\n"

    def test_line_after_skip_emitted_unchanged(self):
        text = "// Entry point code:\nx\ny\n    IL_0001:  nop\n"
        assert _clean(text) == "    IL_0001:  nop\n"

    def test_skip_exhausts_at_eof(self):
        assert _clean("keep\n// Entry point code:\nonly one\n") == "keep\n"
        assert _clean("keep\n// Entry point code:") == "keep\n"

    def test_skipped_lines_are_not_evaluated(self):
        # A second trigger inside the skipped window does not extend it
        text = "// Entry point code:\n// Entry point code:\nz\nvisible\n"
        assert _clean(text) == "visible\n"

    def test_trigger_tested_after_erasure(self):
        rules = [
            EraseRule("strip", re.compile("XX")),
            SkipRule("trigger", re.compile("^AB$"), 1),
        ]
        assert _clean("AXXB\nhidden\nshown\n", rules) == "shown\n"

    def test_erasure_can_hide_trigger(self):
        rules = [
            EraseRule("strip", re.compile("TRIGGER")),
            SkipRule("trigger", re.compile("TRIGGER"), 1),
        ]
        assert _clean("TRIGGER\nstill here\n", rules) == "\nstill here\n"

    def test_first_matching_trigger_wins(self):
        rules = [
            SkipRule("one", re.compile("T"), 1),
            SkipRule("three", re.compile("T"), 3),
        ]
        assert _clean("T\na\nb\nc\n", rules) == "b\nc\n"


class TestIdempotency:

    SAMPLE = (
        ".assembly Sample\n"
        "{\n"
        "  .custom /*0C000001:0A000001*/ instance void [mscorlib]System.Reflection.AssemblyFileVersionAttribute::.ctor(string) = ( 01 00 )\n"
        "  .ver 1:2:3:4\n"
        "}\n"
        "// MVID: {12345678-1234-1234-1234-123456789abc}\n"
        "// Entry point code:\n"
        "// FF 25 00 20 40 00\n"
        "// 00402000\n"
        "  0A 1B 2C 3D   // ....\n"
        "  .class private auto ansi '<PrivateImplementationDetails>{AAAA-BBBB}'\n"
    )

    @pytest.mark.parametrize("strip", [False, True])
    def test_twice_equals_once(self, strip):
        rules = il_rules(strip)
        once = _clean(self.SAMPLE, rules)
        twice = _clean(once, rules)
        assert once == twice


class TestRewriteFile:

    def test_rewrites_in_place(self, tmp_path):
        path = tmp_path / "output.il"
        path.write_text("// MVID: {1234-abcd}\nret\n")
        rewrite_file(path, il_rules())
        assert path.read_text() == "\nret\n"

    def test_no_tmp_file_left_behind(self, tmp_path):
        path = tmp_path / "output.il"
        path.write_text("ret\n")
        rewrite_file(path, il_rules())
        assert sorted(p.name for p in tmp_path.iterdir()) == ["output.il"]

    def test_missing_file_raises_io_error(self, tmp_path):
        with pytest.raises(DisassemblyIOError) as exc_info:
            rewrite_file(tmp_path / "missing.il", il_rules())
        assert exc_info.value.path == tmp_path / "missing.il"

    def test_failed_swap_discards_tmp_and_keeps_original(self, tmp_path):
        path = tmp_path / "output.il"
        path.write_text("// MVID: {1234-abcd}\n")
        with patch("ilnorm.parsing.cleaner.os.replace", side_effect=PermissionError("locked")):
            with pytest.raises(DisassemblyIOError):
                rewrite_file(path, il_rules())
        assert path.read_text() == "// MVID: {1234-abcd}\n"
        assert not (tmp_path / "output.il.tmp").exists()

    def test_explicit_encoding_round_trip(self, tmp_path):
        path = tmp_path / "dump.res"
        path.write_bytes("FileVersion\x001.0\x00\r\nkeep\r\n".encode("utf-16-le"))
        rewrite_file(path, [EraseRule("v", re.compile("FileVersion[0-9.\x00 ]*"))],
                     encoding="utf-16-le", errors="surrogatepass", newline="")
        assert path.read_bytes() == "\r\nkeep\r\n".encode("utf-16-le")
