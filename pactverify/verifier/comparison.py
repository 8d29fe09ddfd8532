"""Compare the actual outcome of an interaction against what the pact expects.

Nothing here has side effects: each comparison builds its own diff and returns it. A status or header
comparison gives True for a match or a message describing the mismatch; a body comparison gives a dict
mapping JSON paths to lists of mismatch messages, which is empty for a match.
"""
import json
import logging
from collections import defaultdict

from .headers import header_values_match
from .matching import json_type, rule_matchers, same_value
from .model import MISSING
from .paths import format_path

log = logging.getLogger(__name__)


def display_path(path):
    # internal paths start with the section name, which is shown as the JSON root
    return format_path(['$'] + path[1:])


def decode_body(body):
    if isinstance(body, bytes):
        body = body.decode('utf-8')
    if isinstance(body, str):
        try:
            return json.loads(body)
        except ValueError:
            return body
    return body


class Comparison:
    def __init__(self, spec_version, matching_rules, allow_unexpected_keys=True):
        self.spec_version = spec_version
        self.matching_rules = rule_matchers(spec_version, matching_rules)
        self.allow_unexpected_keys = allow_unexpected_keys
        self.mismatches = defaultdict(list)

    def mismatch(self, path, message):
        log.debug(f'mismatch at {display_path(path)}: {message}')
        self.mismatches[display_path(path)].append(message)
        return False

    def compare_headers(self, expected, actual):
        actual_by_name = {name.lower(): value for name, value in (actual or {}).items()}
        result = {}
        for name, expected_value in expected.items():
            if name.lower() not in actual_by_name:
                result[name] = f'Expected a header {name!r} but was missing'
            else:
                result[name] = self.compare_header(name, expected_value, actual_by_name[name.lower()])
        return result

    def compare_header(self, name, expected, actual):
        # v2 rules live under $.headers.<name>, v3 rules under the "header" section
        section = 'header' if self.spec_version.major > 2 else 'headers'
        matcher = self.find_rule([section, name])
        if matcher is None:
            return header_values_match(name, expected, actual)
        messages = matcher.mismatches(actual, expected)
        if messages:
            return '; '.join(messages)
        return True

    def compare_body(self, expected, actual):
        if expected is MISSING:
            return {}
        if json_type(expected) in ('object', 'array'):
            actual = decode_body(actual)
        if self.matching_rules:
            self.apply_rules(actual, expected, ['body'])
        else:
            self.compare(actual, expected, ['body'])
        return dict(self.mismatches)

    def compare(self, data, spec, path):
        if json_type(spec) == 'array':
            return self.compare_list(data, spec, path)
        if json_type(spec) == 'object':
            return self.compare_dict(data, spec, path)
        if not same_value(data, spec):
            return self.mismatch(path, f'Expected {spec!r} but received {data!r}')
        return True

    def compare_list(self, data, spec, path):
        if json_type(data) != 'array':
            return self.mismatch(path, f'Expected an array but received {json_type(data)} {data!r}')
        if len(data) != len(spec):
            return self.mismatch(path, f'Expected an array with {len(spec)} elements but received '
                                       f'{len(data)} elements')
        results = [self.compare(data_elem, spec_elem, path + [i])
                   for i, (data_elem, spec_elem) in enumerate(zip(data, spec))]
        return all(results)

    def compare_dict(self, data, spec, path):
        if json_type(data) != 'object':
            return self.mismatch(path, f'Expected an object but received {json_type(data)} {data!r}')
        success = True
        for key in spec:
            if key not in data:
                success = self.mismatch(path, f'Expected key {key!r} but was missing')
            elif not self.compare(data[key], spec[key], path + [key]):
                success = False
        if not self.allow_unexpected_keys:
            for key in data:
                if key not in spec:
                    success = self.mismatch(path + [key], f'Unexpected key {key!r} with value {data[key]!r}')
        return success

    def apply_rules(self, data, spec, path):
        matcher = self.find_rule(path)
        if matcher is not None:
            messages = matcher.mismatches(data, spec)
            for message in messages:
                self.mismatch(path, message)
            if messages:
                return False

        # a container that passed its own rule still needs its contents checked
        if json_type(spec) == 'array':
            return self.apply_rules_array(data, spec, path, matcher)
        if json_type(spec) == 'object':
            return self.apply_rules_dict(data, spec, path)
        if matcher is None and not same_value(data, spec):
            return self.mismatch(path, f'Expected {spec!r} but received {data!r}')
        return True

    def find_rule(self, path):
        section = path[0]
        section_rules = self.matching_rules.get(section)
        if not section_rules:
            return None
        if self.spec_version.major > 2:
            # v3 rule paths omit the section and only body paths are rooted at '$'
            path = path[1:]
            if section == 'body':
                path = ['$'] + path
        else:
            path = ['$'] + path
        weight, matcher = max(((rule.weight(path), rule) for rule in section_rules), key=lambda pair: pair[0])
        log.debug(f'find_rule {path} got {matcher} with weight {weight}')
        if weight:
            return matcher
        return None

    def apply_rules_array(self, data, spec, path, matcher):
        if json_type(data) != 'array':
            return self.mismatch(path, f'Expected an array but received {json_type(data)} {data!r}')
        if matcher is None or not matcher.allows_any_length:
            # no rule frees this array from its example, so it must match element for element
            if len(data) != len(spec):
                return self.mismatch(path, f'Expected an array with {len(spec)} elements but received '
                                           f'{len(data)} elements')
            results = [self.apply_rules(data_elem, spec_elem, path + [i])
                       for i, (data_elem, spec_elem) in enumerate(zip(data, spec))]
            return all(results)
        if not spec:
            return True
        results = []
        for index, data_elem in enumerate(data):
            # elements past the end of the example are matched against its first element
            spec_elem = spec[index] if index < len(spec) else spec[0]
            results.append(self.apply_rules(data_elem, spec_elem, path + [index]))
        return all(results)

    def apply_rules_dict(self, data, spec, path):
        if json_type(data) != 'object':
            return self.mismatch(path, f'Expected an object but received {json_type(data)} {data!r}')
        success = True
        for key in spec:
            if key not in data:
                success = self.mismatch(path, f'Expected key {key!r} but was missing')
            elif not self.apply_rules(data[key], spec[key], path + [key]):
                success = False
        return success


def compare_status(expected, actual):
    if expected is None or expected == actual:
        return True
    return f'expected status of {expected} but was {actual}'


class ResponseComparison:
    """Entry points used by the verifier; stateless, so a single instance can be shared."""

    def compare_response(self, expected, actual_status, actual_headers, actual_body):
        comparison = Comparison(expected.spec_version, expected.matching_rules)
        return {
            'method': compare_status(expected.status, actual_status),
            'headers': comparison.compare_headers(expected.headers, actual_headers),
            'body': comparison.compare_body(expected.body, actual_body),
        }

    def compare_message(self, expected, actual):
        comparison = Comparison(expected.spec_version, expected.matching_rules)
        return comparison.compare_body(expected.contents, decode_body(actual))
