"""
Read and write the line-oriented KEY=VALUE format used by .env files.

Values containing whitespace or double quotes are wrapped in double quotes.
Inside a quoted value the sequences \\", \\\\ and \\n stand for a double
quote, a backslash and a newline, so any string survives a format/parse
round trip. Unquoted values are read literally, backslashes included.

Hand written quoted values are unescaped as well: LOG="C:\\new logs" reads
as "C:", a newline, then "ew logs". Leave such Windows paths unquoted when
they have no spaces, or double their backslashes inside quotes.
"""

import logging
import typing

from .utils import ParseError

log = logging.getLogger(__name__)

ConfigMapping = typing.Dict[str, str]

QUOTE = '"'
ESCAPES = {'"': '"', '\\': '\\', 'n': '\n'}


def parse(text: str) -> ConfigMapping:
    mapping: ConfigMapping = {}

    for number, line in enumerate(text.split('\n'), start=1):
        line = line.strip()

        if not line or line.startswith('#'):
            continue

        if '=' not in line:
            raise ParseError(number, "expected a line in the form KEY=VALUE")

        key, _, value = line.partition('=')
        key = key.strip()

        if not key:
            raise ParseError(number, "missing a key before '='")

        if key in mapping:
            log.debug(f"Line {number} redefines {key}")

        mapping[key] = unquote(value.strip())

    log.debug(f"Parsed {len(mapping)} entries")
    return mapping


def unquote(value: str) -> str:
    if len(value) < 2 or not (value.startswith(QUOTE) and value.endswith(QUOTE)):
        return value

    inner = value[1:-1]
    chars: typing.List[str] = []
    index = 0
    while index < len(inner):
        char = inner[index]
        if char == '\\' and inner[index + 1:index + 2] in ESCAPES:
            chars.append(ESCAPES[inner[index + 1]])
            index += 2
        else:
            chars.append(char)
            index += 1
    return ''.join(chars)


def format_value(value: str) -> str:
    """Quote a value if it contains whitespace or double quotes."""
    if not any(char.isspace() or char == QUOTE for char in value):
        return value

    escaped = (value
               .replace('\\', '\\\\')
               .replace('"', '\\"')
               .replace('\n', '\\n'))
    return f'{QUOTE}{escaped}{QUOTE}'


def format(mapping: ConfigMapping) -> str:
    return ''.join(f"{key}={format_value(value)}\n" for key, value in mapping.items())
