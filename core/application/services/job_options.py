"""
Job options parsing.

Options and node filters are configured as properties text
(``key=value`` per line) and may reference build variables with
``$NAME`` or ``${NAME}``.
"""
from string import Template
from typing import Dict, Mapping, Optional

from core.domain.exceptions import NotifierConfigurationError


def _logical_lines(text: str):
    """Yield lines with backslash continuations joined."""
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip()
        if not pending and (not line or line[0] in "#!"):
            continue
        # An odd number of trailing backslashes continues the line
        stripped = line.rstrip("\\")
        if (len(line) - len(stripped)) % 2 == 1:
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def _split_pair(line: str):
    for index, char in enumerate(line):
        if char in "=:" and (index == 0 or line[index - 1] != "\\"):
            return line[:index], line[index + 1:]
        if char.isspace():
            rest = line[index:].lstrip()
            if rest[:1] in ("=", ":"):
                rest = rest[1:]
            return line[:index], rest
    return line, ""


def parse_properties(text: Optional[str]) -> Dict[str, str]:
    """
    Parse properties text into an ordered dict.

    Args:
        text: Properties text; None or blank gives an empty dict

    Returns:
        Mapping of keys to raw (unexpanded) values

    Example:
        >>> parse_properties("# comment\\noption1=value 1\\njobName=$JOB_NAME")
        {'option1': 'value 1', 'jobName': '$JOB_NAME'}
    """
    properties: Dict[str, str] = {}
    if not text:
        return properties

    for line in _logical_lines(text):
        key, value = _split_pair(line)
        key = key.strip().replace("\\=", "=").replace("\\:", ":")
        if not key:
            raise NotifierConfigurationError(f"Property without a key: {line!r}")
        properties[key] = value.lstrip()
    return properties


def expand_variables(values: Mapping[str, str], variables: Mapping[str, str]) -> Dict[str, str]:
    """
    Replace ``$NAME``/``${NAME}`` references by build variables.

    Unknown references are left as they are.
    """
    return {
        key: Template(value).safe_substitute(variables)
        for key, value in values.items()
    }


def build_job_options(text: Optional[str], variables: Mapping[str, str]) -> Dict[str, str]:
    """Parse then expand a properties text."""
    return expand_variables(parse_properties(text), variables)
