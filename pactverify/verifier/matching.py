"""Matching rules from pact specification versions 2 and 3.

A pact's matchingRules relax the exact comparison of an expected value: each rule is bound to a JSON path
and checks the actual value against a rule (type, regex, ...) rather than against the example in the pact.
Rules are grouped by the section of the interaction they apply to (path, query, header(s), body).

https://github.com/pact-foundation/pact-specification/tree/version-2
https://github.com/pact-foundation/pact-specification/tree/version-3
"""
import functools
import logging
import operator
import re
from collections import defaultdict

log = logging.getLogger(__name__)

PATH_ELEMENT = re.compile(r"\.([^.\[]+)|\['([^']*)'\]|\[(\d+)\]|\[\*\]")


def split_path(path):
    """Split a rule path such as `$.body.orders[*].lines[0]` into `['$', 'body', 'orders', '*', 'lines', 0]`.

    v3 header and query rules are keyed by a bare name, which becomes the first element.
    """
    head, tail = re.match(r"([^.\[]*)(.*)", path).groups()
    elements = [head]
    for match in PATH_ELEMENT.finditer(tail):
        name, quoted, index = match.groups()
        if index is not None:
            elements.append(int(index))
        elif quoted is not None:
            elements.append(quoted)
        elif name is not None:
            elements.append(name)
        else:
            elements.append('*')
    return elements


def weight_path(rule_path, element_path):
    """0 if the rule doesn't reach the element, otherwise higher the more exactly it names it."""
    if len(rule_path) > len(element_path):
        return 0
    factors = [2 if rule == element else 1 if rule == '*' else 0
               for rule, element in zip(rule_path, element_path)]
    return functools.reduce(operator.mul, factors, 1)


JSON_TYPES = (
    (bool, 'boolean'),
    ((int, float), 'number'),
    (str, 'string'),
    (type(None), 'null'),
    (list, 'array'),
    (dict, 'object'),
)


def json_type(value):
    # bool before number, as True is an int to Python
    for types, name in JSON_TYPES:
        if isinstance(value, types):
            return name
    return type(value).__name__


def same_value(data, spec):
    """Equality as JSON sees it, where true is not 1 and false is not 0."""
    return json_type(data) == json_type(spec) and data == spec


CHECKS = {}


def check(name):
    def register(func):
        CHECKS[name] = func
        return func
    return register


def check_size(rule, data):
    if json_type(data) != 'array':
        return None
    if 'min' in rule and len(data) < rule['min']:
        return f'size {len(data)} is smaller than minimum size {rule["min"]}'
    if 'max' in rule and len(data) > rule['max']:
        return f'size {len(data)} is larger than maximum size {rule["max"]}'
    return None


@check('type')
def match_type(rule, data, spec):
    if json_type(data) != json_type(spec):
        return f'not correct type ({json_type(data)} is not {json_type(spec)})'
    return check_size(rule, data)


@check('regex')
def match_regex(rule, data, spec):
    # regex rules are often written against numbers, so match the string form
    if re.fullmatch(rule['regex'], str(data)) is None:
        return f'value {data!r} does not match regex {rule["regex"]}'


@check('integer')
def match_integer(rule, data, spec):
    if json_type(data) != 'number' or not isinstance(data, int):
        return f'not correct type ({json_type(data)} is not integer)'


@check('decimal')
def match_decimal(rule, data, spec):
    if not isinstance(data, float):
        return f'not correct type ({json_type(data)} is not decimal)'


@check('number')
def match_number(rule, data, spec):
    if json_type(data) != 'number':
        return f'not correct type ({json_type(data)} is not number)'


@check('equality')
def match_equality(rule, data, spec):
    expected = rule.get('value', spec)
    if not same_value(data, expected):
        return f'value {data!r} does not equal expected {expected!r}'


@check('include')
def match_include(rule, data, spec):
    if str(rule['value']) not in str(data):
        return f'value {data!r} does not contain expected value {rule["value"]!r}'


@check('null')
def match_null(rule, data, spec):
    if data is not None:
        return f'value {data!r} is not null'


def rule_type(rule):
    if 'match' in rule:
        return rule['match']
    # v2 allows a bare regex, and min/max alone imply a type match
    return 'regex' if 'regex' in rule else 'type'


class Matcher:
    """The rules bound to one path, combined with AND (all must pass) or OR (any may pass)."""
    def __init__(self, path, rules, combine='AND'):
        self.path = path
        self.elements = split_path(path)
        self.rules = []
        for rule in rules:
            if rule_type(rule) in CHECKS:
                self.rules.append(rule)
            else:
                log.warning(f'ignoring invalid match type "{rule_type(rule)}" in rule at path {path}')
        self.combine = combine

    @classmethod
    def from_v3(cls, path, spec):
        return cls(path, spec.get('matchers', []), spec.get('combine', 'AND'))

    def __repr__(self):
        return f'<Matcher path={self.path!r} rules={self.rules} combine={self.combine}>'

    def weight(self, element_path):
        return weight_path(self.elements, element_path)

    @property
    def allows_any_length(self):
        """Arrays under a type or size rule are checked against their examples, not element by element."""
        return any(rule_type(rule) == 'type' or 'min' in rule or 'max' in rule for rule in self.rules)

    def mismatches(self, data, spec):
        """Describe why data fails the rules; an empty list means it passes."""
        failures = [message for message in (CHECKS[rule_type(rule)](rule, data, spec) for rule in self.rules)
                    if message]
        if self.combine == 'OR' and len(failures) < len(self.rules):
            return []
        return failures


def rule_matchers(spec_version, rules):
    """Build the matchers for a pact's matchingRules, keyed by section.

    v2 keys every rule by one JSON path including its section, eg. `{"$.body.id": {"match": "type"}}`. v3
    groups rules by section and wraps each in a matchers list, eg. `{"body": {"$.id": {"matchers": [...]}}}`;
    its query rules apply to every value of a parameter and its path rule to the whole path.
    """
    if not rules or spec_version.major < 2:
        return {}
    sections = defaultdict(list)
    if spec_version.major == 2:
        for path, rule in rules.items():
            elements = split_path(path)
            if len(elements) < 2:
                log.warning(f'ignoring rule without a section at path {path}')
            elif elements[1] == 'path':
                sections['path'].append(Matcher('$', [rule]))
            else:
                sections[elements[1]].append(Matcher(path, [rule]))
        return dict(sections)
    for section, section_rules in rules.items():
        if section == 'path':
            sections[section].append(Matcher.from_v3('$', section_rules))
        elif section == 'query':
            sections[section].extend(Matcher.from_v3(f'{name}[*]', spec) for name, spec in section_rules.items())
        elif section in ('header', 'body'):
            sections[section].extend(Matcher.from_v3(path, spec) for path, spec in section_rules.items())
    return dict(sections)
