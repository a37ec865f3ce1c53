"""Parser for the turtle command language.

One command per line, case-insensitive, whitespace separated:

    start <x> <y>
    fd <distance>
    bk <distance>
    lt <degrees>
    rt <degrees>

Parsing is permissive: blank, unknown and incomplete lines are skipped, and a
number that cannot be read becomes 0.
"""

import re
from typing import List

from .path_types import TurtleCommand

MOTION_COMMANDS = ('fd', 'bk', 'lt', 'rt')

# Leading decimal number, as far as it can be read
_NUMBER_PREFIX = re.compile(r'[+-]?(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?')


def parse_number(token: str) -> float:
    """Read the leading decimal number of a token, or 0 if there is none."""
    match = _NUMBER_PREFIX.match(token)
    if match is None:
        return 0.0
    return float(match.group(0))


def parse_commands(text: str) -> List[TurtleCommand]:
    """Parse a program into commands tagged with 1-based line numbers.

    Args:
        text: Program source

    Returns:
        Commands in source order
    """
    commands = []
    for line_number, line in enumerate(text.split('\n'), start=1):
        parts = line.strip().lower().split()
        if len(parts) < 2:
            continue
        kind = parts[0]
        if kind == 'start' and len(parts) >= 3:
            value = (parse_number(parts[1]), parse_number(parts[2]))
            commands.append(TurtleCommand('start', value, line_number))
        elif kind in MOTION_COMMANDS:
            commands.append(TurtleCommand(kind, parse_number(parts[1]), line_number))
    return commands
