"""The two ways of finding out what a provider actually does for an interaction.

RequestResponseStrategy sends the interaction's request to the running provider. ProviderMethodStrategy
invokes the provider-side methods registered for the interaction's description, which is the only option
for message pacts. Either way the outcome is compared to the pact and every mismatch lands in the failure
map under a description of what was being checked.
"""
import logging

from .client import ProviderClient, ProviderResponse
from .model import Pact, PactVerification, packages_to_scan
from .registry import registry as default_registry

log = logging.getLogger(__name__)


class NoVerificationMethodsFound(Exception):
    pass


class VerificationStrategy:
    def __init__(self, reporters, config, comparison):
        self.reporters = reporters
        self.config = config
        self.comparison = comparison

    def verify(self, provider, consumer, pact, interaction, interaction_message, failures):
        raise NotImplementedError()

    def verify_request_response_pact(self, expected_response, actual_response, interaction_message, failures):
        comparison = self.comparison.compare_response(expected_response, actual_response.status_code,
                                                      actual_response.headers, actual_response.body)
        self.reporters.returns_a_response_which()
        description = interaction_message + ' returns a response which'
        self.display_status_result(failures, expected_response.status, comparison['method'], description)
        self.display_headers_result(failures, expected_response.headers, comparison['headers'], description)
        self.display_body_result(failures, comparison['body'], description)

    def display_status_result(self, failures, status, comparison, description):
        if comparison is True:
            self.reporters.status_comparison_ok(status)
        else:
            self.reporters.status_comparison_failed(status, comparison)
            failures[f'{description} has status code {status}'] = comparison

    def display_headers_result(self, failures, expected, comparison, description):
        if not comparison:
            return
        self.reporters.includes_headers()
        for key, header_comparison in comparison.items():
            expected_value = expected.get(key)
            if header_comparison is True:
                self.reporters.header_comparison_ok(key, expected_value)
            else:
                self.reporters.header_comparison_failed(key, expected_value, header_comparison)
                failures[f'{description} includes headers "{key}" with value "{expected_value}"'] = \
                    header_comparison

    def display_body_result(self, failures, comparison, description):
        if not comparison:
            self.reporters.body_comparison_ok()
        else:
            self.reporters.body_comparison_failed(comparison)
            failures[f'{description} has a matching body'] = comparison


class RequestResponseStrategy(VerificationStrategy):
    def __init__(self, reporters, config, comparison, client_factory=ProviderClient):
        super().__init__(reporters, config, comparison)
        self.client_factory = client_factory

    def verify(self, provider, consumer, pact, interaction, interaction_message, failures):
        log.debug('Verifying via request/response')
        try:
            client = self.client_factory(provider)
            actual_response = client.make_request(interaction.request)
            self.verify_request_response_pact(interaction.response, actual_response, interaction_message, failures)
        except Exception as e:
            failures[interaction_message] = e
            self.reporters.request_failed(provider, interaction, interaction_message, e,
                                          self.config.show_stacktrace)


class ProviderMethodStrategy(VerificationStrategy):
    def __init__(self, reporters, config, comparison, registry=None, modules=()):
        super().__init__(reporters, config, comparison)
        self.registry = registry or default_registry
        self.modules = modules

    def verify(self, provider, consumer, pact, interaction, interaction_message, failures):
        log.debug('Verifying via provider verification methods')
        try:
            methods = self.registry.find_verification_methods(self.modules, packages_to_scan(provider, consumer),
                                                              interaction.description)
            if not methods:
                self.reporters.error_has_no_annotated_methods_found_for_interaction(interaction)
                raise NoVerificationMethodsFound(
                    f'No annotated methods were found for interaction {interaction.description!r}')
            if pact.kind == Pact.MESSAGE:
                self.verify_message_pact(methods, interaction, interaction_message, failures)
            else:
                for method in methods:
                    actual_response = ProviderResponse.from_result(method.invoke())
                    self.verify_request_response_pact(interaction.response, actual_response, interaction_message,
                                                      failures)
        except Exception as e:
            failures[interaction_message] = e
            self.reporters.verification_failed(interaction, e, self.config.show_stacktrace)

    def verify_message_pact(self, methods, message, interaction_message, failures):
        for method in methods:
            self.reporters.generates_a_message_which()
            actual_message = method.invoke()
            comparison = self.comparison.compare_message(message, actual_message)
            self.display_body_result(failures, comparison, interaction_message + ' generates a message which')


def strategy_table(reporters, config, comparison, client_factory=ProviderClient, registry=None, modules=()):
    return {
        PactVerification.REQUEST_RESPONSE: RequestResponseStrategy(reporters, config, comparison, client_factory),
        PactVerification.ANNOTATED_METHOD: ProviderMethodStrategy(reporters, config, comparison, registry,
                                                                  modules),
    }
