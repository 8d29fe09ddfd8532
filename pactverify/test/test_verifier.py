from unittest.mock import Mock

import pytest

from pactverify.verifier.client import ProviderClient, ProviderResponse
from pactverify.verifier.comparison import ResponseComparison
from pactverify.verifier.config import VerifierConfig
from pactverify.verifier.execution import NoVerificationMethodsFound
from pactverify.verifier.model import ConsumerInfo, PactVerification, ProviderInfo
from pactverify.verifier.pact_reader import PactLoadError
from pactverify.verifier.registry import VerificationRegistry
from pactverify.verifier.verifier import ProviderVerifier

PREFIX = 'Verifying a pact between SpamConsumer and SpamProvider - '


def make_interaction(description, status=200, state=None, **response):
    interaction = {
        'description': description,
        'request': {'method': 'GET', 'path': '/spam'},
        'response': dict(status=status, **response),
    }
    if state:
        interaction['providerState'] = state
    return interaction


def make_pact(*interactions, consumer='SpamConsumer'):
    return {
        'provider': {'name': 'SpamProvider'},
        'consumer': {'name': consumer},
        'interactions': list(interactions),
        'metadata': {'pactSpecification': {'version': '2.0.0'}},
    }


@pytest.fixture
def client():
    client = Mock(spec=ProviderClient)
    client.make_request.return_value = ProviderResponse(200, {}, None)
    return client


@pytest.fixture
def registry():
    return VerificationRegistry()


@pytest.fixture
def verifier_factory(mock_reporter, client, registry):
    def factory(**kwargs):
        kwargs.setdefault('reporters', [mock_reporter])
        kwargs.setdefault('client_factory', Mock(return_value=client))
        kwargs.setdefault('registry', registry)
        return ProviderVerifier(**kwargs)
    return factory


def test_successful_verification(verifier_factory, provider, consumer, mock_reporter):
    provider.has_pact_with(consumer)
    assert verifier_factory().verify_provider(provider) == {}
    mock_reporter.initialise.assert_called_once_with(provider)
    mock_reporter.report_verification_for_consumer.assert_called_once_with(consumer, provider)
    mock_reporter.verify_consumer_from_document.assert_called_once_with(consumer)
    mock_reporter.status_comparison_ok.assert_called_once_with(200)
    mock_reporter.body_comparison_ok.assert_called_once_with()


def test_request_is_sent_to_provider(verifier_factory, provider, consumer, client):
    provider.has_pact_with(consumer)
    verifier_factory().verify_provider(provider)
    request = client.make_request.call_args[0][0]
    assert (request.method, request.path) == ('GET', '/users-service/user/alex')


def test_status_failure(verifier_factory, provider, client):
    client.make_request.return_value = ProviderResponse(404, {}, None)
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=make_pact(make_interaction('spam'))))
    failures = verifier_factory().verify_provider(provider)
    assert failures == {
        PREFIX + 'spam returns a response which has status code 200': 'expected status of 200 but was 404'}


def test_header_failure(verifier_factory, provider):
    pact = make_pact(make_interaction('spam', headers={'X-Spam': '1'}))
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=pact))
    failures = verifier_factory().verify_provider(provider)
    assert list(failures) == [PREFIX + 'spam returns a response which includes headers "X-Spam" with value "1"']


def test_body_failure(verifier_factory, provider, client):
    client.make_request.return_value = ProviderResponse(200, {}, {'id': 2})
    pact = make_pact(make_interaction('spam', body={'id': 1}))
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=pact))
    failures = verifier_factory().verify_provider(provider)
    assert failures == {PREFIX + 'spam returns a response which has a matching body': {
        '$.id': ['Expected 1 but received 2']}}


def test_consumers_and_interactions_filtered(verifier_factory, provider, mock_reporter):
    for name in ('SpamConsumer', 'HamConsumer', 'EggsConsumer'):
        pact = make_pact(make_interaction('a wanted request'), make_interaction('an unwanted request'), consumer=name)
        provider.has_pact_with(ConsumerInfo(name, pact_source=pact))
    config = VerifierConfig.from_mapping({
        'pact.filter.consumers': 'SpamConsumer,HamConsumer',
        'pact.filter.description': 'a wanted.*',
    })

    assert verifier_factory(config=config).verify_provider(provider) == {}

    verified = [c[0][0].name for c in mock_reporter.report_verification_for_consumer.call_args_list]
    assert verified == ['SpamConsumer', 'HamConsumer']
    descriptions = [c[0][0].description for c in mock_reporter.interaction_description.call_args_list]
    assert descriptions == ['a wanted request', 'a wanted request']
    mock_reporter.warn_pact_file_has_no_interactions.assert_not_called()


def test_no_consumers(verifier_factory, provider, consumer, mock_reporter):
    provider.has_pact_with(consumer)
    config = VerifierConfig.from_mapping({'pact.filter.consumers': 'HamConsumer'})
    assert verifier_factory(config=config).verify_provider(provider) == {}
    mock_reporter.warn_provider_has_no_consumers.assert_called_once_with(provider)
    mock_reporter.report_verification_for_consumer.assert_not_called()


def test_all_interactions_filtered(verifier_factory, provider, consumer, mock_reporter):
    provider.has_pact_with(consumer)
    config = VerifierConfig.from_mapping({'pact.filter.description': 'nothing'})
    assert verifier_factory(config=config).verify_provider(provider) == {}
    mock_reporter.warn_pact_file_has_no_interactions.assert_called_once()


def test_failed_state_change_skips_interaction(verifier_factory, client, response_factory, mock_reporter):
    client.make_state_change_request.return_value = response_factory(status=500, reason='Server Error')
    comparison = Mock(spec=ResponseComparison)
    provider = ProviderInfo('SpamProvider', url='http://provider.example/',
                            state_change_url='http://provider.example/state')
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=make_pact(
        make_interaction('spam', state='spam exists'))))

    failures = verifier_factory(comparison=comparison).verify_provider(provider)

    assert failures == {PREFIX + 'spam': 'State Change Request Failed - 500 Server Error'}
    client.make_request.assert_not_called()
    comparison.compare_response.assert_not_called()
    mock_reporter.interaction_description.assert_not_called()


def test_successful_state_change_named_in_failures(verifier_factory, client):
    client.make_request.return_value = ProviderResponse(500, {}, None)
    provider = ProviderInfo('SpamProvider', url='http://provider.example/')
    consumer = ConsumerInfo('SpamConsumer', pact_source=make_pact(make_interaction('spam', state='spam exists')),
                            state_change=Mock(return_value=True))
    provider.has_pact_with(consumer)

    failures = verifier_factory().verify_provider(provider)

    assert list(failures) == [PREFIX + 'spam Given spam exists returns a response which has status code 200']
    consumer.state_change.assert_called_once_with('spam exists')


def test_state_change_teardown(verifier_factory, client, response_factory):
    client.make_state_change_request.return_value = response_factory(status=200)
    provider = ProviderInfo('SpamProvider', url='http://provider.example/',
                            state_change_url='http://provider.example/state', state_change_teardown=True)
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=make_pact(
        make_interaction('spam', state='spam exists'), make_interaction('ham'))))

    assert verifier_factory().verify_provider(provider) == {}

    phases = [c[0][3] for c in client.make_state_change_request.call_args_list]
    assert phases == [True, False]


def test_failing_interaction_does_not_stop_the_next(verifier_factory, provider, client, mock_reporter):
    error = ConnectionError('refused')
    client.make_request.side_effect = [error, ProviderResponse(200, {}, None)]
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=make_pact(
        make_interaction('spam'), make_interaction('ham'))))

    failures = verifier_factory().verify_provider(provider)

    assert failures == {PREFIX + 'spam': error}
    assert mock_reporter.request_failed.call_args[0][3] is error
    assert client.make_request.call_count == 2
    mock_reporter.status_comparison_ok.assert_called_once_with(200)


def test_missing_pact_stops_verification(verifier_factory, provider, mock_reporter):
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source='/no/such/pact.json'))
    with pytest.raises(PactLoadError):
        verifier_factory().verify_provider(provider)
    message = mock_reporter.pact_load_failure_for_consumer.call_args[0][1]
    assert message == "No pact file found for consumer 'SpamConsumer' at '/no/such/pact.json'"


def test_custom_load_failure_message(verifier_factory, provider, mock_reporter):
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=None))
    verifier = verifier_factory(pact_load_failure_message=lambda consumer: f'{consumer.name} has no pact')
    with pytest.raises(PactLoadError) as e:
        verifier.verify_provider(provider)
    assert str(e.value) == 'SpamConsumer has no pact'


def test_loader_failure_is_reported(verifier_factory, provider, consumer, mock_reporter):
    provider.has_pact_with(consumer)
    verifier = verifier_factory(pact_loader=Mock(side_effect=PactLoadError('broken pact')))
    with pytest.raises(PactLoadError):
        verifier.verify_provider(provider)
    mock_reporter.pact_load_failure_for_consumer.assert_called_once_with(consumer, 'broken pact')


def test_message_pact_verified_by_method(verifier_factory, provider, fake_message_pact, registry, client):
    registry.verify_provider('a spam event')(lambda: {'id': 1, 'kind': 'spam'})
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=fake_message_pact))
    assert verifier_factory().verify_provider(provider) == {}
    client.make_request.assert_not_called()


def test_message_pact_mismatch(verifier_factory, provider, fake_message_pact, registry, mock_reporter):
    registry.verify_provider('a spam event')(lambda: '{"id": 2, "kind": "spam"}')
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=fake_message_pact))
    failures = verifier_factory().verify_provider(provider)
    assert failures == {PREFIX + 'a spam event generates a message which has a matching body': {
        '$.id': ['Expected 1 but received 2']}}
    mock_reporter.generates_a_message_which.assert_called_once_with()


def test_message_pact_without_methods(verifier_factory, provider, fake_message_pact, mock_reporter):
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=fake_message_pact))
    failures = verifier_factory().verify_provider(provider)
    assert isinstance(failures[PREFIX + 'a spam event'], NoVerificationMethodsFound)
    mock_reporter.error_has_no_annotated_methods_found_for_interaction.assert_called_once()


def test_message_methods_limited_to_scanned_packages(verifier_factory, fake_message_pact, registry):
    registry.verify_provider('a spam event')(lambda: {'id': 1, 'kind': 'spam'})
    provider = ProviderInfo('SpamProvider', packages_to_scan=['somewhere.else'])
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=fake_message_pact))
    failures = verifier_factory().verify_provider(provider)
    assert isinstance(failures[PREFIX + 'a spam event'], NoVerificationMethodsFound)


def test_request_response_pact_verified_by_method(verifier_factory, provider, registry, client):
    registry.verify_provider('spam')(lambda: {'status': 200, 'headers': {}, 'body': {'id': 1}})
    pact = make_pact(make_interaction('spam', body={'id': 1}))
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=pact,
                                        verification_type=PactVerification.ANNOTATED_METHOD))
    assert verifier_factory().verify_provider(provider) == {}
    client.make_request.assert_not_called()


def test_method_returning_junk_fails(verifier_factory, provider, registry, mock_reporter):
    registry.verify_provider('spam')(lambda: 'spam')
    provider.verification_type = PactVerification.ANNOTATED_METHOD
    provider.has_pact_with(ConsumerInfo('SpamConsumer', pact_source=make_pact(make_interaction('spam'))))
    failures = verifier_factory().verify_provider(provider)
    assert isinstance(failures[PREFIX + 'spam'], TypeError)
    mock_reporter.verification_failed.assert_called_once()


def test_display_and_finalise(verifier_factory, mock_reporter):
    verifier = verifier_factory()
    verifier.display_failures({'spam': 'ham'})
    verifier.finalise_reports()
    mock_reporter.display_failures.assert_called_once_with({'spam': 'ham'})
    mock_reporter.finalise_report.assert_called_once_with()
