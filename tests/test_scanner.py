"""
Directive scanner tests

Tests line classification, argument extraction, line endings and scan
errors for malformed directive lines.
"""

import pytest

from shaderprep.lib.scanner import DirectiveScanner, lines_split
from shaderprep.models import Const, Else, End, If, Include, Text
from shaderprep.models.errors import DirectiveScanError, ErrorKind


class TestPlainText:
    """Lines without the directive marker"""

    def test_empty_source(self):
        """Empty string scans to no directives"""
        assert DirectiveScanner("").scan() == []

    def test_plain_lines_are_text(self):
        """Ordinary shader lines become Text, in order"""
        source = "fn main() {\n    return;\n}\n"
        directives = DirectiveScanner(source).scan()

        assert [type(d) for d in directives] == [Text, Text, Text]
        assert [d.line_no for d in directives] == [1, 2, 3]

    def test_text_reproduces_source(self):
        """Concatenated Text lines equal the source exactly"""
        source = "a  \r\n\n   b\t\nno final newline"
        directives = DirectiveScanner(source).scan()

        assert "".join(d.line for d in directives) == source

    def test_ordinary_comments_are_text(self):
        """Regular // and /// comments are not directives"""
        directives = DirectiveScanner("// if DEBUG\n/// doc\n// : end\n").scan()
        assert all(isinstance(d, Text) for d in directives)


class TestDirectiveForms:
    """Each of the five directive keywords"""

    def test_conditional_block(self):
        """if / else / end with raw condition text"""
        source = "//:if quality >= 4.0\nA\n//:else\nB\n//:end"
        directives = DirectiveScanner(source).scan()

        assert [type(d) for d in directives] == [If, Text, Else, Text, End]
        assert directives[0].condition == "quality >= 4.0"
        assert [d.line_no for d in directives] == [1, 2, 3, 4, 5]

    def test_last_line_has_no_eol(self):
        """A directive on the final line without newline has empty eol"""
        directives = DirectiveScanner("//:if A\n//:end").scan()
        assert directives[0].eol == "\n"
        assert directives[1].eol == ""

    def test_const(self):
        """const carries the constant name"""
        directives = DirectiveScanner("//:const SAMPLE_SIZE\n").scan()
        assert directives == [Const(name="SAMPLE_SIZE", line_no=1, eol="\n")]

    def test_include(self):
        """include carries the raw path"""
        directives = DirectiveScanner("//:include shared/math.wgsl\n").scan()
        assert directives == [Include(path="shared/math.wgsl", line_no=1, eol="\n")]

    def test_indented_directive(self):
        """Leading indentation before the marker is allowed"""
        directives = DirectiveScanner("fn f() {\n    //:include body.wgsl\n}\n").scan()
        assert isinstance(directives[1], Include)
        assert directives[1].line_no == 2

    def test_argument_trimmed(self):
        """Whitespace around the argument is trimmed"""
        directives = DirectiveScanner("//:const   SAMPLE_SIZE   \n").scan()
        assert directives[0].name == "SAMPLE_SIZE"

    def test_tab_separated_argument(self):
        directives = DirectiveScanner("//:if\tDEBUG && !LOW_POWER\n").scan()
        assert directives[0].condition == "DEBUG && !LOW_POWER"

    def test_condition_not_parsed(self):
        """Scanner keeps nonsense conditions for the evaluator to reject"""
        directives = DirectiveScanner("//:if ((( ==\n").scan()
        assert directives[0].condition == "((( =="

    def test_crlf_line_endings(self):
        """CRLF is preserved on text and directive lines"""
        directives = DirectiveScanner("//:if A\r\nx\r\n//:end\r\n").scan()
        assert directives[0].eol == "\r\n"
        assert directives[1].line == "x\r\n"

    def test_custom_marker(self):
        """The marker can be overridden"""
        directives = DirectiveScanner("#:if A\n//:bogus\n#:end\n", marker="#:").scan()
        assert [type(d) for d in directives] == [If, Text, End]


class TestScanErrors:
    """Malformed directive lines"""

    def test_unknown_keyword(self):
        """Unknown keywords report line number and keyword"""
        source = "a\nb\n//:define X 1\n"
        with pytest.raises(DirectiveScanError, match="unknown directive 'define'") as info:
            DirectiveScanner(source, path="main.wgsl").scan()

        assert info.value.line == 3
        assert info.value.path == "main.wgsl"
        assert info.value.kind is ErrorKind.SCAN

    def test_keyword_prefix_is_not_keyword(self):
        """//:iffy is not //:if"""
        with pytest.raises(DirectiveScanError, match="iffy"):
            DirectiveScanner("//:iffy A\n").scan()

    def test_missing_keyword(self):
        """A bare marker is an error"""
        with pytest.raises(DirectiveScanError, match="missing directive keyword"):
            DirectiveScanner("//:\n").scan()

    def test_space_after_marker(self):
        """The keyword must follow the marker directly"""
        with pytest.raises(DirectiveScanError, match="missing directive keyword"):
            DirectiveScanner("//: if DEBUG\n").scan()

    @pytest.mark.parametrize("line", ["//:if", "//:const", "//:include   "])
    def test_missing_argument(self, line):
        """if, const and include need an argument"""
        with pytest.raises(DirectiveScanError, match="requires an argument"):
            DirectiveScanner(line).scan()

    @pytest.mark.parametrize("line", ["//:else quality > 2", "//:end if"])
    def test_unexpected_argument(self, line):
        """else and end take no argument (no else-if chaining)"""
        with pytest.raises(DirectiveScanError, match="takes no argument"):
            DirectiveScanner(line).scan()

    def test_invalid_const_name(self):
        """const names must be identifiers"""
        with pytest.raises(DirectiveScanError, match="invalid constant name"):
            DirectiveScanner("//:const 1ABC\n").scan()


class TestLineSplitting:
    """lines_split helper"""

    def test_keeps_terminators(self):
        assert lines_split("a\nb\n") == ["a\n", "b\n"]

    def test_final_line_without_newline(self):
        assert lines_split("a\r\nb") == ["a\r\n", "b"]

    def test_blank_lines_kept(self):
        assert lines_split("\n\n") == ["\n", "\n"]
