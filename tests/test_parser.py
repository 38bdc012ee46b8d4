"""
Tests for the lfrc parser.

These tests verify that the parser:
- Builds the expected expression for each statement form
- Preserves argument and list order
- Rejects malformed scripts with the right error kind and location
- Round-trips through the canonical stringifier
"""

import io
import sys

import pytest

import lfrc
from lfrc.errors import (
    CommandSyntaxError, ErrorKind, IncompleteInputError, LexicalError, ParseError,
)
from lfrc.parser import (
    Parser, parse, stringify,
    CallExpr, CmdExpr, ExecExpr, ListExpr, MapExpr, SetExpr,
)


def parse_one(source):
    """Parse a script holding exactly one statement."""
    statements = parse(source)
    assert len(statements) == 1, statements
    return statements[0]


def parse_error(source):
    """Parse a malformed script and return the recorded error."""
    parser = Parser(source)
    while parser.parse():
        pass
    assert parser.error is not None
    assert parser.expr is None
    return parser.error


class TestSet:
    """Tests for option assignment."""

    def test_boolean_option(self):
        """Test that an omitted value is empty."""
        assert parse_one("set nohidden;") == SetExpr("nohidden", "")

    def test_option_with_value(self):
        """Test that colons survive inside the value."""
        assert parse_one("set ratios 1:2:3;") == SetExpr("ratios", "1:2:3")

    def test_value_spanning_lines(self):
        """Test that line breaks between the parts are insignificant."""
        assert parse_one("set\n  scrolloff\n  10\n;") == SetExpr("scrolloff", "10")

    def test_missing_option(self):
        """Test that 'set' needs an option name."""
        err = parse_error("set;")
        assert type(err) is CommandSyntaxError
        assert err.kind == ErrorKind.SYNTAX
        assert "option name" in err.message

    def test_too_many_values(self):
        """Test that only one value is accepted."""
        err = parse_error("set tabstop 4 8;")
        assert type(err) is CommandSyntaxError
        assert "'8'" in err.message


class TestMapAndCmd:
    """Tests for key bindings and macros."""

    def test_map_to_call(self):
        """Test binding keys to a command."""
        assert parse_one("map gg top;") == MapExpr("gg", CallExpr("top", []))

    def test_cmd_with_line_command(self):
        """Test a macro whose body is a shell command."""
        assert parse_one("cmd usage $du -sh .|less\n") == \
            CmdExpr("usage", ExecExpr("$", "du -sh .|less"))

    def test_cmd_with_block_command(self):
        """Test a macro whose body is a multi-line shell block."""
        source = 'cmd open-file ${{\n    case "$f" in\n        *.txt) $EDITOR "$f";;\n    esac\n}}\n'
        assert parse_one(source) == CmdExpr(
            "open-file",
            ExecExpr("$", '\n    case "$f" in\n        *.txt) $EDITOR "$f";;\n    esac\n'),
        )

    def test_map_to_list(self):
        """Test that multi-statement bindings nest a list."""
        assert parse_one("map x :{{ top; bottom; }};") == MapExpr(
            "x", ListExpr([CallExpr("top"), CallExpr("bottom")])
        )

    def test_map_to_map(self):
        """Test that the body is any expression, even another binding."""
        assert parse_one("map a map b c;") == MapExpr("a", MapExpr("b", CallExpr("c")))

    def test_map_body_on_next_line(self):
        """Test that the body may start on the following line."""
        assert parse_one("map <c-f>\n  &{{ lf -remote reload }};") == \
            MapExpr("<c-f>", ExecExpr("&", " lf -remote reload "))

    def test_keys_that_look_like_prefixes(self):
        """Test that keys are read as plain text."""
        assert parse_one("map / search;") == MapExpr("/", CallExpr("search"))
        assert parse_one("map : read;") == MapExpr(":", CallExpr("read"))

    def test_truncated_map(self):
        """Test that a map without a body is incomplete input."""
        parser = Parser("map gg")
        assert parser.parse() is False
        assert isinstance(parser.error, IncompleteInputError)
        assert parser.error.kind == ErrorKind.INCOMPLETE

    def test_truncated_cmd(self):
        """Test that a cmd without a body is incomplete input."""
        assert isinstance(parse_error("cmd foo\n"), IncompleteInputError)

    def test_map_without_keys(self):
        """Test that map needs keys."""
        err = parse_error("map ;")
        assert type(err) is CommandSyntaxError
        assert "keys" in err.message


class TestCall:
    """Tests for command invocations."""

    def test_arguments_keep_order(self):
        """Test positional arguments in source order."""
        assert parse_one("open a b c;") == CallExpr("open", ["a", "b", "c"])

    def test_no_arguments(self):
        """Test a bare command."""
        assert parse_one("quit;") == CallExpr("quit", [])

    def test_arguments_that_look_like_prefixes(self):
        """Test that '/' and ':' inside arguments are plain text."""
        assert parse_one("cd /tmp:x;") == CallExpr("cd", ["/tmp:x"])

    def test_missing_semicolon(self):
        """Test that a call needs its terminator."""
        assert isinstance(parse_error("open a b"), IncompleteInputError)

    def test_braces_as_arguments(self):
        """Test that brace tokens are not arguments."""
        err = parse_error("echo {{ x }};")
        assert type(err) is CommandSyntaxError
        assert "'{{'" in err.message


class TestExec:
    """Tests for prefixed commands."""

    @pytest.mark.parametrize("prefix", list("$!&/?"))
    def test_every_prefix(self, prefix):
        """Test every execution mode prefix."""
        assert parse_one(f"{prefix}some text\n") == ExecExpr(prefix, "some text")

    def test_block_form(self):
        """Test braces keep their interior verbatim."""
        assert parse_one("!{{ echo hi }};") == ExecExpr("!", " echo hi ")

    def test_line_form_at_end_of_input(self):
        """Test that the last line needs no line break."""
        assert parse_one("$echo hi") == ExecExpr("$", "echo hi")

    def test_unterminated_block(self):
        """Test that a missing '}}' is a lexical error."""
        parser = Parser("$ {{ echo hi")
        assert parser.parse() is False
        assert isinstance(parser.error, LexicalError)
        assert parser.error.kind == ErrorKind.LEXICAL

    def test_text_after_block(self):
        """Test that '}}' must end the statement."""
        assert isinstance(parse_error("${{a}} set b;"), LexicalError)


class TestList:
    """Tests for sequential composition."""

    def test_brace_list(self):
        """Test a braced list keeps statement order."""
        assert parse_one(":{{ set hidden; set preview; }};") == ListExpr([
            SetExpr("hidden", ""), SetExpr("preview", ""),
        ])

    def test_brace_list_over_lines(self):
        """Test a braced list spread over several lines."""
        source = ":{{\n  set hidden;\n  $echo hi\n  top;\n}}\n"
        assert parse_one(source) == ListExpr([
            SetExpr("hidden"), ExecExpr("$", "echo hi"), CallExpr("top"),
        ])

    def test_nested_lists(self):
        """Test lists inside lists."""
        assert parse_one(":{{ :{{ a; }}; b; }};") == ListExpr([
            ListExpr([CallExpr("a")]), CallExpr("b"),
        ])

    def test_line_list(self):
        """Test a list closed by the end of the line."""
        statements = parse(": set a; set b;\nset c;")
        assert statements == [
            ListExpr([SetExpr("a"), SetExpr("b")]),
            SetExpr("c"),
        ]

    def test_line_list_ending_with_command(self):
        """Test a line list whose last item is a line command."""
        assert parse_one("map x : top; $echo hi\n") == MapExpr("x", ListExpr([
            CallExpr("top"), ExecExpr("$", "echo hi"),
        ]))

    def test_line_list_holding_brace_list(self):
        """Test a braced list as the last item of a line list."""
        assert parse_one(": :{{ a; }}\n") == ListExpr([ListExpr([CallExpr("a")])])

    def test_brace_list_over_lines_inside_line_list(self):
        """Test that line breaks inside '{{' leave the outer line list open."""
        assert parse_one("map x : a; :{{ b;\n c; }}\n") == MapExpr("x", ListExpr([
            CallExpr("a"), ListExpr([CallExpr("b"), CallExpr("c")]),
        ]))

    def test_exec_block_inside_line_list(self):
        """Test a multi-line shell block as a line list item."""
        assert parse_one(": a; ${{\necho hi\n}}\n") == ListExpr([
            CallExpr("a"), ExecExpr("$", "\necho hi\n"),
        ])

    def test_empty_brace_list(self):
        """Test that a list needs at least one expression."""
        err = parse_error(":{{ }};")
        assert type(err) is CommandSyntaxError
        assert "'}}'" in err.message

    def test_unterminated_brace_list(self):
        """Test that end of input inside a list is incomplete input."""
        assert isinstance(parse_error(":{{ set a;"), IncompleteInputError)


class TestParserProtocol:
    """Tests for statement-by-statement parsing and error state."""

    def test_parse_walks_statements(self):
        """Test repeated parse() calls until the clean end."""
        parser = Parser("set a;\nmap b c;\n;;")
        assert parser.parse() is True
        assert parser.expr == SetExpr("a")
        assert parser.parse() is True
        assert parser.expr == MapExpr("b", CallExpr("c"))
        assert parser.parse() is False
        assert parser.expr is None
        assert parser.error is None

    def test_parse_expr_three_outcomes(self):
        """Test node, None at the end, and raised errors."""
        parser = Parser("quit;")
        assert parser.parse_expr() == CallExpr("quit")
        assert parser.parse_expr() is None

        parser = Parser("quit")
        with pytest.raises(IncompleteInputError):
            parser.parse_expr()

    def test_error_is_sticky(self):
        """Test that the first error aborts the rest of the script."""
        parser = Parser("set;\nset a;")
        assert parser.parse() is False
        first = parser.error
        assert parser.parse() is False
        assert parser.error is first
        with pytest.raises(ParseError) as excinfo:
            parser.parse_expr()
        assert excinfo.value is first

    def test_error_location(self):
        """Test error messages carry file, line and column."""
        parser = Parser("set a;\nset;", filename="lfrc")
        assert parser.parse() is True
        assert parser.parse() is False
        assert (parser.error.line, parser.error.column) == (2, 4)
        assert str(parser.error) == "lfrc:2:4: Expected option name after 'set', got ';'"

    def test_unexpected_leading_token(self):
        """Test a statement starting with a closing brace."""
        err = parse_error("}};")
        assert type(err) is CommandSyntaxError
        assert "expected a command" in err.message

    def test_deep_nesting_is_syntax_error(self):
        """Test that nesting beyond the interpreter stack is reported, not raised."""
        parser = Parser("map a " * sys.getrecursionlimit() + "b;")
        assert parser.parse() is False
        assert type(parser.error) is CommandSyntaxError
        assert "nested too deeply" in parser.error.message
        with pytest.raises(CommandSyntaxError):
            parser.parse_expr()

    def test_whole_script_rejected(self):
        """Test that parse() raises rather than returning a partial list."""
        with pytest.raises(IncompleteInputError):
            parse("set a;\nmap gg")

    def test_iteration(self):
        """Test iterating a parser."""
        assert list(Parser("a; b; c;")) == [CallExpr("a"), CallExpr("b"), CallExpr("c")]

    def test_text_stream(self):
        """Test parsing from a text stream."""
        assert parse(io.StringIO("set hidden;\n")) == [SetExpr("hidden")]

    def test_trace_sees_every_node(self):
        """Test that the trace callback receives nested nodes first."""
        seen = []
        parse("map gg :{{ top; }};", trace=seen.append)
        assert seen == [
            CallExpr("top"),
            ListExpr([CallExpr("top")]),
            MapExpr("gg", ListExpr([CallExpr("top")])),
        ]

    def test_package_exports(self):
        """Test the top-level package interface."""
        assert lfrc.parse("set a;") == [lfrc.SetExpr("a")]
        assert issubclass(lfrc.IncompleteInputError, lfrc.CommandSyntaxError)


ROUND_TRIP_SCRIPTS = [
    "set nohidden;",
    "set ratios 1:2:3;",
    "map gg top;",
    "cmd usage $du -sh .|less\n",
    ":{{ set hidden; set preview; }};",
    "open a b c;",
    "map x : top; $echo }}\n",
    "cmd edit ${{\n  $EDITOR \"$f\"\n}}\n",
    "map <c-f> &{{ lf -remote \"send $id reload\" }};",
    ":{{ :{{ a; }}; b; /needle\n }};",
    "map a map b ?back\ncmd c !{{}};",
    "$echo a \\\n b\n",
    "$test -n \"$x\" && { echo hi; }\n",
    "cmd f $f() { ls; }\n",
    "map x : a; :{{ b;\n c; }}\n",
]


class TestRoundTrip:
    """Tests that canonical output parses back to the same tree."""

    @pytest.mark.parametrize("source", ROUND_TRIP_SCRIPTS)
    def test_stringify_reparses(self, source):
        """Test print/parse round trip."""
        statements = parse(source)
        text = "\n".join(stringify(expr) for expr in statements)
        assert parse(text) == statements
