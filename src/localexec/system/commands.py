"""
Command line preparation utilities.

This module turns the flat argument string supplied with a job into the
argument list handed to the operating system. No shell is involved: there is
no globbing, variable expansion, piping or redirection, and quotes only group
words together.
"""

import logging
import re
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

# A double-quoted run, a single-quoted run, or a run of non-whitespace.
# Quotes are only recognised where a token starts; anything else is literal.
_ARGUMENT_PATTERN = re.compile(r"\"([^\"]*)\"|'([^']*)'|\S+")


def tokenize_command_args(command_args: Optional[str]) -> List[str]:
    """Split a raw argument string into individual arguments.

    Arguments are separated by whitespace. A run enclosed in a matching pair
    of double or single quotes forms one argument with the quotes removed and
    inner whitespace kept verbatim.

    Args:
        command_args: The raw argument string, or None.

    Returns:
        The arguments in order of appearance. Empty for None or blank input.

    Note:
        Escape sequences are not interpreted. An unterminated quote is kept as
        literal text of the surrounding whitespace-delimited word, a quote in
        the middle of a word is literal, and text directly after a closing
        quote starts a new argument.

    Examples:
        >>> tokenize_command_args('-f "a b" -x')
        ['-f', 'a b', '-x']
        >>> tokenize_command_args("--name 'John Smith'")
        ['--name', 'John Smith']
        >>> tokenize_command_args('"unterminated quote')
        ['"unterminated', 'quote']
    """
    if not command_args:
        return []

    tokens = []
    for match in _ARGUMENT_PATTERN.finditer(command_args):
        double_quoted, single_quoted = match.group(1), match.group(2)
        if double_quoted is not None:
            tokens.append(double_quoted)
        elif single_quoted is not None:
            tokens.append(single_quoted)
        else:
            tokens.append(match.group(0))
    return tokens


def prepare_command_line(command_path: str, command_args: Optional[str]) -> List[str]:
    """Build the process argument list for a command and its raw arguments.

    The command path is always the first element, whatever the arguments
    tokenize to.

    Examples:
        >>> prepare_command_line("/bin/echo", 'hello "big world"')
        ['/bin/echo', 'hello', 'big world']
        >>> prepare_command_line("ls", None)
        ['ls']
    """
    command_line = [command_path]
    command_line.extend(tokenize_command_args(command_args))
    return command_line


def join_command_args(tokens: Sequence[str]) -> str:
    """Render arguments back into a string that tokenizes to the same list.

    A token is quoted when it is empty, contains whitespace or starts with a
    quote character. Double quotes are used unless the token contains one, in
    which case single quotes are used. A token holding both quote characters
    cannot be quoted and is only reproduced when it needs no quoting.
    """
    rendered = []
    for token in tokens:
        if token and not re.search(r"\s", token) and token[0] not in "\"'":
            rendered.append(token)
        elif '"' not in token:
            rendered.append(f'"{token}"')
        elif "'" not in token:
            rendered.append(f"'{token}'")
        else:
            logger.debug(f"Argument {token!r} contains both quote characters; leaving it unquoted")
            rendered.append(token)
    return " ".join(rendered)
