"""Parsing and comparison of HTTP header values.

Header values are compared after being split into their comma and semicolon separated parts so that
whitespace and parameter ordering differences don't count as mismatches.
"""
import logging
from functools import total_ordering

log = logging.getLogger(__name__)


@total_ordering
class HeaderPart:
    def __init__(self, values, params):
        self.values = values
        self.params = params

    def has_param(self, name):
        return any(k == name for k, v in self.params)

    def __repr__(self):
        return f'<HeaderPart {", ".join(self.values + ["%s=%s" % p for p in self.params])}>'

    def __eq__(self, other):
        return (self.values, self.params) == (other.values, other.params)

    def __lt__(self, other):
        return (self.values, self.params) < (other.values, other.params)


def _split_unquoted(s, marker):
    # split on marker, ignoring any marker that appears inside a double-quoted string
    while s[:1] == marker:
        s = s[1:]
        end = s.find(marker)
        while end > 0 and (s.count('"', 0, end) - s.count('\\"', 0, end)) % 2:
            end = s.find(marker, end + 1)
        if end < 0:
            end = len(s)
        yield s[:end].strip()
        s = s[end:]


def _unquote(value):
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\\\', '\\').replace('\\"', '"')
    return value


def parse_header(line):
    for part in _split_unquoted(';' + line, ';'):
        values = []
        params = []
        for option in _split_unquoted(',' + part, ','):
            name, sep, value = option.partition('=')
            if sep:
                params.append((name.strip().lower(), _unquote(value.strip())))
            else:
                values.append(option)
        yield HeaderPart(values, params)


def header_values_match(name, expected, actual):
    """Compare an expected header value against the actual one.

    Returns True for a match, otherwise a message describing the mismatch. Content-Type values are allowed
    to differ only by the presence of a charset on one side.
    """
    parsed_actual = sorted(parse_header(str(actual)))
    parsed_expected = sorted(parse_header(str(expected)))
    log.debug(f'header_values_match {name} actual={parsed_actual} expected={parsed_expected}')
    if parsed_actual == parsed_expected:
        return True

    message = f'Expected header {name!r} to have value {expected!r} but was {actual!r}'
    if name.lower() != 'content-type':
        return message

    actual_without_charset = [part for part in parsed_actual if not part.has_param('charset')]
    expected_without_charset = [part for part in parsed_expected if not part.has_param('charset')]
    if actual_without_charset != expected_without_charset:
        return message + ' (ignoring charset)'

    actual_has_charset = any(part.has_param('charset') for part in parsed_actual)
    expected_has_charset = any(part.has_param('charset') for part in parsed_expected)
    if actual_has_charset == expected_has_charset:
        return message
    return True
