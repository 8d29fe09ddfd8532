"""Project properties that tune a verification run.

The verifier only ever asks two questions of its configuration, whether a property is set and what its
value is, so the accessors are plain callables that can be backed by a dict, the environment or a build
tool.
"""
import os

PACT_FILTER_CONSUMERS = 'pact.filter.consumers'
PACT_FILTER_DESCRIPTION = 'pact.filter.description'
PACT_FILTER_PROVIDERSTATE = 'pact.filter.providerState'
PACT_SHOW_STACKTRACE = 'pact.showStacktrace'

PROPERTIES = (PACT_FILTER_CONSUMERS, PACT_FILTER_DESCRIPTION, PACT_FILTER_PROVIDERSTATE, PACT_SHOW_STACKTRACE)


def environment_variable(name):
    return name.upper().replace('.', '_')


class VerifierConfig:
    def __init__(self, has_property=None, get_property=None):
        self.has_property = has_property or (lambda name: False)
        self.get_property = get_property or (lambda name: None)

    @classmethod
    def from_mapping(cls, properties):
        properties = {k: v for k, v in properties.items() if v is not None}
        return cls(properties.__contains__, properties.get)

    @classmethod
    def from_environment(cls, environ=None):
        environ = os.environ if environ is None else environ
        return cls(lambda name: environment_variable(name) in environ,
                   lambda name: environ.get(environment_variable(name)))

    @property
    def show_stacktrace(self):
        return bool(self.has_property(PACT_SHOW_STACKTRACE))
