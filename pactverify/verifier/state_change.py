"""Put the provider into the state an interaction was recorded against, and take it out again afterwards.

A state change handler comes from the consumer if it has one, otherwise from the provider, and is one of:

* a callable, invoked with the state name (and "setup" or "teardown" when the provider has teardown
  enabled); if it returns a URL that URL is then called as below, otherwise its return value is the result
  (a handler that returns nothing, ie. None, is taken to have succeeded),
* a `BuildTask`, or the name of a task known to the task executor, which is run with the state name,
* a URL, which is POSTed the state.

Failures are never raised to the caller. The result is True on success or the failure value (a message or
the exception) otherwise.
"""
import logging
from urllib.parse import ParseResult, urlparse

from .client import ProviderClient
from .model import BuildTask

log = logging.getLogger(__name__)

SETUP = 'setup'
TEARDOWN = 'teardown'


class InvalidStateChangeUrl(ValueError):
    pass


class TaskExecutor:
    """Runs externally registered state change tasks, by name."""
    def __init__(self, tasks=None):
        self.tasks = dict(tasks or {})

    def register(self, name, task):
        self.tasks[name] = task

    def is_task(self, handler):
        if isinstance(handler, BuildTask):
            return True
        return isinstance(handler, str) and handler in self.tasks

    def run(self, handler, state):
        name = handler.name if isinstance(handler, BuildTask) else handler
        if name not in self.tasks:
            raise KeyError(f'no state change task registered as {name!r}')
        self.tasks[name](state)


def parse_state_change_url(handler):
    url = handler if isinstance(handler, ParseResult) else urlparse(str(handler))
    if url.scheme not in ('http', 'https') or not url.netloc:
        raise InvalidStateChangeUrl(f'{handler!r} is not a valid state change URL')
    return url.geturl()


def is_url(value):
    if not isinstance(value, (str, ParseResult)):
        return False
    try:
        parse_state_change_url(value)
    except InvalidStateChangeUrl:
        return False
    return True


def resolve_handler(provider, consumer):
    if consumer.state_change is not None:
        return consumer.state_change, consumer.state_change_uses_body
    return provider.state_change_url, provider.state_change_uses_body


class StateChange:
    def __init__(self, reporters, config, task_executor=None, client_factory=ProviderClient):
        self.reporters = reporters
        self.config = config
        self.task_executor = task_executor or TaskExecutor()
        self.client_factory = client_factory

    def setup(self, state, provider, consumer):
        return self.execute(state, provider, consumer, SETUP)

    def teardown(self, state, provider, consumer):
        return self.execute(state, provider, consumer, TEARDOWN)

    def execute(self, state, provider, consumer, phase):
        is_setup = phase == SETUP
        self.reporters.state_for_interaction(state, provider, consumer, is_setup)
        try:
            handler, uses_body = resolve_handler(provider, consumer)
            if handler is None or (isinstance(handler, str) and not handler.strip()):
                self.reporters.warn_state_change_ignored(state, provider, consumer)
                return True
            if callable(handler):
                if provider.state_change_teardown:
                    result = handler(state, phase)
                else:
                    result = handler(state)
                log.debug(f'Invoked state change callable -> {result!r}')
                if not is_url(result):
                    return True if result is None else result
                handler = result
            elif self.task_executor.is_task(handler):
                log.debug(f'Invoking state change task {handler}')
                self.task_executor.run(handler, state)
                return True
            return self.execute_http_state_change(handler, uses_body, state, provider, is_setup)
        except Exception as e:
            log.debug(f'State change {state!r} raised {e!r}')
            self.reporters.state_change_request_failed_with_exception(state, provider, consumer, is_setup, e,
                                                                      self.config.show_stacktrace)
            return e

    def execute_http_state_change(self, handler, uses_body, state, provider, is_setup):
        try:
            url = parse_state_change_url(handler)
        except InvalidStateChangeUrl:
            self.reporters.warn_state_change_ignored_due_to_invalid_url(state, provider, is_setup, handler)
            return True
        client = self.client_factory(provider)
        response = client.make_state_change_request(url, state, uses_body, is_setup, provider.state_change_teardown)
        if response is None:
            return True
        try:
            status_line = f'{response.status_code} {response.reason}'
            log.debug(f'Invoked state change {url} -> {status_line}')
            if response.status_code >= 400:
                self.reporters.state_change_request_failed(state, provider, is_setup, status_line)
                return f'State Change Request Failed - {status_line}'
        finally:
            response.close()
        return True
