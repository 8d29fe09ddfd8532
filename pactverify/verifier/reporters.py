"""Reporters observe a verification run and describe it to a person.

Every lifecycle event of the verifier is a method on Reporter; the base class ignores them all so a
reporter only implements what it cares about. Reporters never influence the outcome of a run.
"""
import logging
import traceback

from colorama import Fore, Style

log = logging.getLogger(__name__)


class Reporters(list):
    """Fan each event out to every reporter, in registration order."""
    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        def notify(*args, **kwargs):
            for reporter in self:
                getattr(reporter, name)(*args, **kwargs)
        return notify


class Reporter:
    def initialise(self, provider):
        pass

    def warn_provider_has_no_consumers(self, provider):
        pass

    def report_verification_for_consumer(self, consumer, provider):
        pass

    def verify_consumer_from_url(self, consumer):
        pass

    def verify_consumer_from_file(self, consumer):
        pass

    def verify_consumer_from_document(self, consumer):
        pass

    def pact_load_failure_for_consumer(self, consumer, message):
        pass

    def warn_pact_file_has_no_interactions(self, pact):
        pass

    def interaction_description(self, interaction):
        pass

    def state_for_interaction(self, state, provider, consumer, is_setup):
        pass

    def warn_state_change_ignored(self, state, provider, consumer):
        pass

    def state_change_request_failed_with_exception(self, state, provider, consumer, is_setup, exception,
                                                   show_stacktrace):
        pass

    def state_change_request_failed(self, state, provider, is_setup, status_line):
        pass

    def warn_state_change_ignored_due_to_invalid_url(self, state, provider, is_setup, url):
        pass

    def request_failed(self, provider, interaction, interaction_message, exception, show_stacktrace):
        pass

    def returns_a_response_which(self):
        pass

    def status_comparison_ok(self, status):
        pass

    def status_comparison_failed(self, status, comparison):
        pass

    def includes_headers(self):
        pass

    def header_comparison_ok(self, key, value):
        pass

    def header_comparison_failed(self, key, value, comparison):
        pass

    def body_comparison_ok(self):
        pass

    def body_comparison_failed(self, comparison):
        pass

    def error_has_no_annotated_methods_found_for_interaction(self, interaction):
        pass

    def verification_failed(self, interaction, exception, show_stacktrace):
        pass

    def generates_a_message_which(self):
        pass

    def display_failures(self, failures):
        pass

    def finalise_report(self):
        pass


def phase_name(is_setup):
    return 'setup' if is_setup else 'teardown'


def describe_failure(failure):
    """Turn a failure map value into printable lines."""
    if isinstance(failure, BaseException):
        return [f'{type(failure).__name__}: {failure}']
    if isinstance(failure, dict):
        lines = []
        for path, mismatches in failure.items():
            if isinstance(mismatches, list):
                lines.extend(f'{path} -> {mismatch}' for mismatch in mismatches)
            else:
                lines.append(f'{path} -> {mismatches}')
        return lines
    return [str(failure)]


class AnsiConsoleReporter(Reporter):
    """Coloured progress output on the terminal, indented to show the structure of the run."""
    def __init__(self, out=print):
        self.out = out

    def line(self, text, indent=0):
        self.out('  ' * indent + text + Style.RESET_ALL)

    def exception(self, exception, show_stacktrace, indent):
        if show_stacktrace:
            for text in traceback.format_exception(type(exception), exception, exception.__traceback__):
                self.line(text.rstrip(), indent)
        else:
            self.line(f'{Fore.RED}{type(exception).__name__}: {exception}', indent)

    def initialise(self, provider):
        self.line(f'{Style.BRIGHT}Verifying provider {provider.name}')

    def warn_provider_has_no_consumers(self, provider):
        self.line(f'{Fore.YELLOW}WARNING: There are no consumers to verify for provider {provider.name!r}')

    def report_verification_for_consumer(self, consumer, provider):
        self.line('')
        self.line(f'Verifying a pact between {Style.BRIGHT}{consumer.name}{Style.NORMAL} and '
                  f'{Style.BRIGHT}{provider.name}')

    def verify_consumer_from_url(self, consumer):
        self.line(f'[from URL {consumer.pact_source}]', 1)

    def verify_consumer_from_file(self, consumer):
        self.line(f'[Using file {consumer.pact_source}]', 1)

    def verify_consumer_from_document(self, consumer):
        self.line('[Using pre-loaded pact]', 1)

    def pact_load_failure_for_consumer(self, consumer, message):
        self.line(f'{Fore.RED}{message}', 1)

    def warn_pact_file_has_no_interactions(self, pact):
        self.line(f'{Fore.YELLOW}WARNING: {pact} has no interactions to verify', 1)

    def interaction_description(self, interaction):
        self.line(interaction.description, 1)

    def state_for_interaction(self, state, provider, consumer, is_setup):
        self.line(f'Given {Style.BRIGHT}{state}' if is_setup else f'Tearing down {Style.BRIGHT}{state}', 1)

    def warn_state_change_ignored(self, state, provider, consumer):
        self.line(f'{Fore.YELLOW}WARNING: State Change ignored as there is no state change URL', 2)

    def state_change_request_failed_with_exception(self, state, provider, consumer, is_setup, exception,
                                                   show_stacktrace):
        self.line(f'{Fore.RED}State change {phase_name(is_setup)} for {state!r} failed', 2)
        self.exception(exception, show_stacktrace, 3)

    def state_change_request_failed(self, state, provider, is_setup, status_line):
        self.line(f'{Fore.RED}State change {phase_name(is_setup)} request for {state!r} failed - {status_line}',
                  2)

    def warn_state_change_ignored_due_to_invalid_url(self, state, provider, is_setup, url):
        self.line(f'{Fore.YELLOW}WARNING: State Change ignored as the URL {url!r} is not valid', 2)

    def request_failed(self, provider, interaction, interaction_message, exception, show_stacktrace):
        self.line(f'{Fore.RED}Request Failed - {exception}', 2)
        if show_stacktrace:
            self.exception(exception, show_stacktrace, 3)

    def returns_a_response_which(self):
        self.line('returns a response which', 2)

    def status_comparison_ok(self, status):
        self.line(f'has status code {Style.BRIGHT}{status}{Style.NORMAL} ({Fore.GREEN}OK{Fore.RESET})', 3)

    def status_comparison_failed(self, status, comparison):
        self.line(f'has status code {Style.BRIGHT}{status}{Style.NORMAL} ({Fore.RED}FAILED{Fore.RESET})', 3)

    def includes_headers(self):
        self.line('includes headers', 3)

    def header_comparison_ok(self, key, value):
        self.line(f'"{Style.BRIGHT}{key}{Style.NORMAL}" with value "{Style.BRIGHT}{value}{Style.NORMAL}" '
                  f'({Fore.GREEN}OK{Fore.RESET})', 4)

    def header_comparison_failed(self, key, value, comparison):
        self.line(f'"{Style.BRIGHT}{key}{Style.NORMAL}" with value "{Style.BRIGHT}{value}{Style.NORMAL}" '
                  f'({Fore.RED}FAILED{Fore.RESET})', 4)

    def body_comparison_ok(self):
        self.line(f'has a matching body ({Fore.GREEN}OK{Fore.RESET})', 3)

    def body_comparison_failed(self, comparison):
        self.line(f'has a matching body ({Fore.RED}FAILED{Fore.RESET})', 3)

    def error_has_no_annotated_methods_found_for_interaction(self, interaction):
        self.line(f'{Fore.RED}No verification methods were found for interaction {interaction.description!r}', 2)

    def verification_failed(self, interaction, exception, show_stacktrace):
        self.line(f'{Fore.RED}Verification Failed - {exception}', 2)
        if show_stacktrace:
            self.exception(exception, show_stacktrace, 3)

    def generates_a_message_which(self):
        self.line('generates a message which', 2)

    def display_failures(self, failures):
        if not failures:
            return
        self.line('')
        self.line(f'{Style.BRIGHT}Failures:')
        for number, (description, failure) in enumerate(failures.items(), 1):
            self.line('')
            self.line(f'{number}) {description}')
            for text in describe_failure(failure):
                self.line(f'{Fore.RED}{text}', 2)

    def finalise_report(self):
        self.line('')


class LoggingReporter(Reporter):
    """Send the interesting events to the pactverify logger."""
    def report_verification_for_consumer(self, consumer, provider):
        log.info(f'Verifying a pact between {consumer.name} and {provider.name}')

    def warn_provider_has_no_consumers(self, provider):
        log.warning(f'There are no consumers to verify for provider {provider.name!r}')

    def pact_load_failure_for_consumer(self, consumer, message):
        log.error(message)

    def warn_pact_file_has_no_interactions(self, pact):
        log.warning(f'{pact} has no interactions to verify')

    def interaction_description(self, interaction):
        log.info(f'Verifying {interaction.description!r}')

    def warn_state_change_ignored(self, state, provider, consumer):
        log.warning(f'State change {state!r} ignored as there is no state change URL')

    def state_change_request_failed_with_exception(self, state, provider, consumer, is_setup, exception,
                                                   show_stacktrace):
        log.error(f'State change {phase_name(is_setup)} for {state!r} failed: {exception}',
                  exc_info=exception if show_stacktrace else None)

    def state_change_request_failed(self, state, provider, is_setup, status_line):
        log.error(f'State change {phase_name(is_setup)} request for {state!r} failed - {status_line}')

    def warn_state_change_ignored_due_to_invalid_url(self, state, provider, is_setup, url):
        log.warning(f'State change {state!r} ignored as the URL {url!r} is not valid')

    def request_failed(self, provider, interaction, interaction_message, exception, show_stacktrace):
        log.error(f'{interaction_message}: request failed - {exception}',
                  exc_info=exception if show_stacktrace else None)

    def status_comparison_failed(self, status, comparison):
        log.warning(f' status code: {comparison}')

    def header_comparison_failed(self, key, value, comparison):
        log.warning(f' header {key}: {comparison}')

    def body_comparison_failed(self, comparison):
        for text in describe_failure(comparison):
            log.warning(f' body: {text}')

    def error_has_no_annotated_methods_found_for_interaction(self, interaction):
        log.error(f'No verification methods were found for interaction {interaction.description!r}')

    def verification_failed(self, interaction, exception, show_stacktrace):
        log.error(f'Verification of {interaction.description!r} failed - {exception}',
                  exc_info=exception if show_stacktrace else None)

    def display_failures(self, failures):
        for description, failure in failures.items():
            log.warning(f'{description}: {"; ".join(describe_failure(failure))}')
