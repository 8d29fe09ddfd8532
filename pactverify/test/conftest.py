import os
from unittest.mock import Mock

import pytest

from pactverify.verifier.config import VerifierConfig
from pactverify.verifier.model import ConsumerInfo, ProviderInfo
from pactverify.verifier.reporters import Reporter, Reporters


@pytest.fixture
def fake_interaction():
    return {
        'description': 'dummy',
        'request': {'method': 'GET', 'path': '/users-service/user/alex'},
        'response': {'headers': {}, 'status': 200}
    }


@pytest.fixture
def fake_pact(fake_interaction):
    return {
        'provider': {'name': 'SpamProvider'},
        'consumer': {'name': 'SpamConsumer'},
        'interactions': [fake_interaction],
        'metadata': {'pactSpecification': {'version': '2.0.0'}},
    }


@pytest.fixture
def fake_message_pact():
    return {
        'provider': {'name': 'SpamProvider'},
        'consumer': {'name': 'SpamConsumer'},
        'messages': [{
            'description': 'a spam event',
            'contents': {'id': 1, 'kind': 'spam'},
            'metaData': {'contentType': 'application/json'},
        }],
        'metadata': {'pactSpecification': {'version': '3.0.0'}},
    }


@pytest.fixture
def provider():
    return ProviderInfo('SpamProvider', url='http://provider.example/')


@pytest.fixture
def consumer(fake_pact):
    return ConsumerInfo('SpamConsumer', pact_source=fake_pact)


@pytest.fixture
def mock_reporter():
    return Mock(spec=Reporter)


@pytest.fixture
def reporters(mock_reporter):
    return Reporters([mock_reporter])


@pytest.fixture
def config():
    return VerifierConfig()


def fake_response(status=200, body=None, headers=None, reason='OK', text=None):
    """A stand-in for requests.Response with just what the verifier reads."""
    if headers is None:
        headers = {'Content-Type': 'application/json'}
    if text is None:
        text = '' if body is None else repr(body)
    return Mock(status_code=status, reason=reason, headers=headers, content=text.encode('utf-8'), text=text,
                json=Mock(return_value=body))


@pytest.fixture
def cleanup_environment_variables():
    saved = {k: v for k, v in os.environ.items() if k.startswith('PACT_')}
    yield
    for k in [k for k in os.environ if k.startswith('PACT_')]:
        del os.environ[k]
    os.environ.update(saved)


@pytest.fixture
def response_factory():
    return fake_response
