"""Tests for the turtle command parser."""

from turtle_path import TurtleCommand, parse_commands, parse_number


class TestParseCommands:
    def test_basic_program(self):
        commands = parse_commands("start 0 0\nfd 1.0\nrt 90\nfd 1.0")
        assert commands == [
            TurtleCommand('start', (0.0, 0.0), 1),
            TurtleCommand('fd', 1.0, 2),
            TurtleCommand('rt', 90.0, 3),
            TurtleCommand('fd', 1.0, 4),
        ]

    def test_case_insensitive(self):
        commands = parse_commands("FD 2\nLt 45")
        assert [(c.kind, c.value) for c in commands] == [('fd', 2.0), ('lt', 45.0)]

    def test_line_numbers_count_skipped_lines(self):
        commands = parse_commands("\n  \nfd 1\n# comment here\nbk 2")
        assert [c.line_number for c in commands] == [3, 5]

    def test_malformed_lines_are_skipped(self):
        commands = parse_commands("fd\nstart 1\njump 3\nhello world\nrt 10")
        assert [c.kind for c in commands] == ['rt']

    def test_bad_numbers_become_zero(self):
        commands = parse_commands("fd abc\nstart x 2")
        assert commands[0].value == 0.0
        assert commands[1].value == (0.0, 2.0)

    def test_extra_tokens_ignored(self):
        commands = parse_commands("fd 1 2 3\nstart 1 2 3")
        assert commands[0].value == 1.0
        assert commands[1].value == (1.0, 2.0)

    def test_surrounding_whitespace(self):
        commands = parse_commands("   lt    30   \r")
        assert commands == [TurtleCommand('lt', 30.0, 1)]

    def test_empty_program(self):
        assert parse_commands("") == []


class TestParseNumber:
    def test_plain_numbers(self):
        assert parse_number("1.5") == 1.5
        assert parse_number("-2") == -2.0
        assert parse_number(".25") == 0.25
        assert parse_number("1e2") == 100.0

    def test_leading_number_is_read(self):
        assert parse_number("3.5cm") == 3.5

    def test_unreadable_is_zero(self):
        assert parse_number("nan") == 0.0
        assert parse_number("inf") == 0.0
        assert parse_number("-") == 0.0
