import logging

from .client import ProviderClient
from .comparison import ResponseComparison
from .config import VerifierConfig
from .execution import strategy_table
from .filters import filter_consumers, filter_interactions
from .model import verification_type
from .pact_reader import DOCUMENT, FILE, URL, PactLoadError, load_pact, pact_source_kind
from .reporters import AnsiConsoleReporter, Reporters
from .state_change import StateChange

log = logging.getLogger(__name__)


class ProviderVerifier:
    """Verify a provider against the pacts of its consumers.

    `verify_provider()` returns a dict of failures keyed by a description of what failed; an empty dict
    means every interaction verified. Consumers and interactions are processed one at a time, and a failing
    interaction never stops the others from being verified. Only a pact that can't be loaded stops the run.

    :param config: a VerifierConfig for the filter and stack trace properties
    :param reporters: reporters notified of every step, defaults to an AnsiConsoleReporter
    :param pact_loader: callable loading a pact given its source and authentication
    :param pact_load_failure_message: message (or callable given the consumer) used when a consumer's
        pact source doesn't exist
    :param task_executor: runs state change tasks referred to by name
    :param client_factory: builds the HTTP client for a provider
    :param registry: where provider verification methods are registered
    :param verification_modules: modules to import so their verification methods get registered
    :param comparison: compares actual outcomes to expected ones
    """
    def __init__(self, config=None, reporters=None, pact_loader=load_pact, pact_load_failure_message=None,
                 task_executor=None, client_factory=ProviderClient, registry=None, verification_modules=(),
                 comparison=None):
        self.config = config or VerifierConfig()
        self.reporters = Reporters([AnsiConsoleReporter()] if reporters is None else reporters)
        self.pact_loader = pact_loader
        self.pact_load_failure_message = pact_load_failure_message
        self.comparison = comparison or ResponseComparison()
        self.state_change = StateChange(self.reporters, self.config, task_executor, client_factory)
        self.strategies = strategy_table(self.reporters, self.config, self.comparison, client_factory, registry,
                                         verification_modules)

    def verify_provider(self, provider):
        failures = {}
        self.reporters.initialise(provider)
        consumers = [consumer for consumer in provider.consumers if filter_consumers(consumer, self.config)]
        if not consumers:
            self.reporters.warn_provider_has_no_consumers(provider)
        for consumer in consumers:
            self.run_verification_for_consumer(failures, provider, consumer)
        return failures

    def run_verification_for_consumer(self, failures, provider, consumer):
        self.reporters.report_verification_for_consumer(consumer, provider)
        pact = self.load_pact_for_consumer(consumer)
        strategy = self.strategies[verification_type(provider, consumer, pact)]
        interactions = [interaction for interaction in pact.interactions
                        if filter_interactions(interaction, self.config)]
        if not interactions:
            self.reporters.warn_pact_file_has_no_interactions(pact)
        for interaction in interactions:
            self.verify_interaction(provider, consumer, pact, failures, interaction, strategy)

    def load_pact_for_consumer(self, consumer):
        kind = pact_source_kind(consumer.pact_source)
        if kind == URL:
            self.reporters.verify_consumer_from_url(consumer)
        elif kind == FILE:
            self.reporters.verify_consumer_from_file(consumer)
        elif kind == DOCUMENT:
            self.reporters.verify_consumer_from_document(consumer)
        else:
            message = self.load_failure_message(consumer)
            self.reporters.pact_load_failure_for_consumer(consumer, message)
            raise PactLoadError(message)
        try:
            return self.pact_loader(consumer.pact_source, consumer.pact_source_authentication)
        except PactLoadError as e:
            self.reporters.pact_load_failure_for_consumer(consumer, str(e))
            raise

    def load_failure_message(self, consumer):
        if callable(self.pact_load_failure_message):
            return str(self.pact_load_failure_message(consumer))
        if self.pact_load_failure_message:
            return str(self.pact_load_failure_message)
        return f'No pact file found for consumer {consumer.name!r} at {consumer.pact_source!r}'

    def verify_interaction(self, provider, consumer, pact, failures, interaction, strategy):
        interaction_message = (f'Verifying a pact between {consumer.name} and {provider.name}'
                               f' - {interaction.description}')

        state_change_ok = True
        if interaction.provider_state:
            state_change_ok = self.state_change.setup(interaction.provider_state, provider, consumer)
            log.debug(f'State Change: {interaction.provider_state!r} -> {state_change_ok!r}')
            if state_change_ok is not True:
                failures[interaction_message] = state_change_ok
                state_change_ok = False
            else:
                interaction_message += f' Given {interaction.provider_state}'

        if state_change_ok:
            self.reporters.interaction_description(interaction)
            strategy.verify(provider, consumer, pact, interaction, interaction_message, failures)
            if provider.state_change_teardown and interaction.provider_state:
                self.state_change.teardown(interaction.provider_state, provider, consumer)

    def display_failures(self, failures):
        self.reporters.display_failures(failures)

    def finalise_reports(self):
        self.reporters.finalise_report()
