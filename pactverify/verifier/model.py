"""The things a verification run is made of: the provider, its consumers, and their pacts."""
import semver

MISSING = 'MISSING'

DEFAULT_SPEC_VERSION = '2.0.0'
MESSAGE_SPEC_VERSION = '3.0.0'


class PactVerification:
    """How a provider's actual behaviour is obtained for an interaction."""
    REQUEST_RESPONSE = 'request_response'
    ANNOTATED_METHOD = 'annotated_method'


class BuildTask:
    """A reference to an externally registered task that sets up provider state."""
    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return f'<BuildTask {self.name}>'


class ProviderInfo:
    def __init__(self, name, url=None, state_change_url=None, state_change_uses_body=True,
                 state_change_teardown=False, verification_type=None, packages_to_scan=(),
                 custom_headers=None, consumers=()):
        self.name = name
        self.url = url
        self.state_change_url = state_change_url
        self.state_change_uses_body = state_change_uses_body
        self.state_change_teardown = state_change_teardown
        self.verification_type = verification_type
        self.packages_to_scan = list(packages_to_scan)
        self.custom_headers = dict(custom_headers or {})
        self.consumers = list(consumers)

    def __repr__(self):
        return f'<ProviderInfo {self.name}>'

    def has_pact_with(self, consumer):
        self.consumers.append(consumer)
        return consumer


class ConsumerInfo:
    def __init__(self, name, pact_source=None, pact_source_authentication=None, state_change=None,
                 state_change_uses_body=True, verification_type=None, packages_to_scan=()):
        self.name = name
        self.pact_source = pact_source
        self.pact_source_authentication = pact_source_authentication
        self.state_change = state_change
        self.state_change_uses_body = state_change_uses_body
        self.verification_type = verification_type
        self.packages_to_scan = list(packages_to_scan)

    def __repr__(self):
        return f'<ConsumerInfo {self.name}>'


def verification_type(provider, consumer, pact):
    """Pick the verification strategy for a provider/consumer pair once their pact is known.

    Message pacts can only be verified by invoking provider methods. Otherwise a consumer setting wins over
    the provider's, defaulting to sending real requests.
    """
    if pact.kind == Pact.MESSAGE:
        return PactVerification.ANNOTATED_METHOD
    return consumer.verification_type or provider.verification_type or PactVerification.REQUEST_RESPONSE


def packages_to_scan(provider, consumer):
    return provider.packages_to_scan + consumer.packages_to_scan


def parse_spec_version(version):
    parts = str(version).split('.')
    parts.extend(['0'] * (3 - len(parts)))
    return semver.VersionInfo.parse('.'.join(parts[:3]))


class ProviderState:
    def __init__(self, name, params=None):
        self.name = name
        self.params = params or {}

    def __repr__(self):
        return f'<ProviderState {self.name!r} {self.params}>'

    @classmethod
    def from_interaction(cls, interaction):
        if interaction.get('providerState'):
            return [cls(interaction['providerState'])]
        states = interaction.get('providerStates') or []
        if isinstance(states, str):
            return [cls(states)]
        return [cls(state['name'], state.get('params')) for state in states]


class Request:
    def __init__(self, request):
        self.method = request.get('method', 'GET')
        self.path = request.get('path', '/')
        self.query = request.get('query')
        self.headers = request.get('headers') or {}
        self.body = request.get('body', MISSING)


class Response:
    def __init__(self, response, spec_version):
        self.status = response.get('status')
        self.headers = response.get('headers') or {}
        self.body = response.get('body', MISSING)
        self.matching_rules = response.get('matchingRules') or {}
        self.spec_version = spec_version


class BaseInteraction:
    kind = None

    def __init__(self, interaction):
        self.description = interaction['description']
        self.provider_states = ProviderState.from_interaction(interaction)

    @property
    def provider_state(self):
        if self.provider_states:
            return self.provider_states[0].name
        return None

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.description!r}>'

    def __str__(self):
        return self.description


class RequestResponseInteraction(BaseInteraction):
    kind = 'request_response'

    def __init__(self, interaction, spec_version):
        super().__init__(interaction)
        self.request = Request(interaction['request'])
        self.response = Response(interaction['response'], spec_version)


class Message(BaseInteraction):
    kind = 'message'

    def __init__(self, interaction, spec_version):
        super().__init__(interaction)
        self.contents = interaction.get('contents', MISSING)
        self.metadata = interaction.get('metaData') or interaction.get('metadata') or {}
        self.matching_rules = interaction.get('matchingRules') or {}
        self.spec_version = spec_version


class Pact:
    REQUEST_RESPONSE = RequestResponseInteraction.kind
    MESSAGE = Message.kind

    def __init__(self, document):
        self.document = document
        self.provider = document['provider']['name']
        self.consumer = document['consumer']['name']
        self.kind = self.MESSAGE if 'messages' in document else self.REQUEST_RESPONSE
        metadata = document.get('metadata') or {}
        if 'pactSpecification' in metadata:
            self.version = metadata['pactSpecification']['version']
        elif 'pact-specification' in metadata:
            # the Ruby implementation writes non-compliant metadata
            self.version = metadata['pact-specification']['version']
        elif self.kind == self.MESSAGE:
            self.version = MESSAGE_SPEC_VERSION
        else:
            self.version = DEFAULT_SPEC_VERSION
        self.semver = parse_spec_version(self.version)
        if self.kind == self.MESSAGE:
            self.interactions = [Message(m, self.semver) for m in document['messages']]
        else:
            self.interactions = [RequestResponseInteraction(i, self.semver) for i in document['interactions']]

    def __repr__(self):
        return f'<Pact consumer={self.consumer} provider={self.provider}>'

    def __str__(self):
        return f'Pact between consumer {self.consumer} and provider {self.provider}'
