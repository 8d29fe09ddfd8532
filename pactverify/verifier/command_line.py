import argparse
import logging

from colorama import init

from ..__version__ import __version__
from .broker import BrokerPacts, PactBrokerConfig
from .config import (PACT_FILTER_CONSUMERS, PACT_FILTER_DESCRIPTION, PACT_FILTER_PROVIDERSTATE,
                     PACT_SHOW_STACKTRACE, VerifierConfig)
from .model import ConsumerInfo, ProviderInfo
from .pact_reader import load_pact
from .reporters import AnsiConsoleReporter
from .verifier import ProviderVerifier

parser = argparse.ArgumentParser(description='Verify a provider against its consumer pacts')

parser.add_argument('provider_name', metavar='PROVIDER_NAME',
                    help='the name of the provider being verified')

parser.add_argument('provider_url', metavar='PROVIDER_URL',
                    help='the URL of the provider service')

parser.add_argument('-s', '--provider-state-url', default=None,
                    help='the URL the provider accepts provider state changes on')

parser.add_argument('--state-change-teardown', default=False, action='store_true',
                    help='also call the state change URL to tear down each provider state')

parser.add_argument('--state-change-as-query', default=False, action='store_true',
                    help='send the provider state as query parameters instead of a JSON body')

parser.add_argument('-b', '--broker-url', default=None,
                    help='the URL of the pact broker; may also be provided in PACT_BROKER_URL environment variable')

parser.add_argument('--broker-token', default=None,
                    help='pact broker bearer token; may also be provided in PACT_BROKER_TOKEN environment variable')

parser.add_argument('--consumer-tag', metavar='TAG', action='append',
                    help='limit broker pacts to those with this tag. May be specified multiple times.')

parser.add_argument('-l', '--local-pact-file', metavar='FILE', action='append',
                    help='path to a local pact file. May be specified multiple times.')

parser.add_argument('-c', '--consumer', default=None,
                    help='comma separated names of the consumers to verify')

parser.add_argument('--filter-description', default=None, metavar='REGEX',
                    help='only verify interactions whose description matches')

parser.add_argument('--filter-state', default=None, metavar='REGEX',
                    help='only verify interactions whose provider state matches')

parser.add_argument('--show-stacktrace', default=False, action='store_true',
                    help='show stack traces of errors raised during verification')

parser.add_argument('--custom-provider-header', metavar='PROVIDER_EXTRA_HEADER', action='append',
                    help='Header to add to provider state set up and pact verification requests. '
                         'eg "Authorization: Basic cGFjdDpwYWN0". May be specified multiple times.')

parser.add_argument('-v', '--verbose', default=False, action='store_true',
                    help='output more information about the verification')

parser.add_argument('-q', '--quiet', default=False, action='store_true',
                    help='output less information about the verification')

parser.add_argument('-V', '--version', default=False, action='version', version=f'%(prog)s {__version__}')


def main(argv=None):
    init(autoreset=True)
    args = parser.parse_args(argv)
    logging.basicConfig(format='%(message)s')
    logging.getLogger('pactverify').setLevel(get_log_level(args))
    provider = ProviderInfo(
        args.provider_name,
        url=args.provider_url,
        state_change_url=args.provider_state_url,
        state_change_uses_body=not args.state_change_as_query,
        state_change_teardown=args.state_change_teardown,
        custom_headers=get_custom_headers(args),
    )
    for consumer in get_consumers(args):
        provider.has_pact_with(consumer)
    verifier = ProviderVerifier(config=get_config(args), reporters=[AnsiConsoleReporter()])
    failures = verifier.verify_provider(provider)
    verifier.display_failures(failures)
    verifier.finalise_reports()
    return int(bool(failures))


def get_consumers(args):
    if args.local_pact_file:
        for filename in args.local_pact_file:
            # the consumer name lives in the pact itself
            pact = load_pact(filename)
            yield ConsumerInfo(pact.consumer, pact_source=filename)
    else:
        broker = PactBrokerConfig(args.broker_url, args.broker_token, args.consumer_tag)
        yield from BrokerPacts(args.provider_name, broker).consumers()


def get_config(args):
    return VerifierConfig.from_mapping({
        PACT_FILTER_CONSUMERS: args.consumer,
        PACT_FILTER_DESCRIPTION: args.filter_description,
        PACT_FILTER_PROVIDERSTATE: args.filter_state,
        PACT_SHOW_STACKTRACE: 'true' if args.show_stacktrace else None,
    })


def get_log_level(args):
    if args.quiet:
        return logging.WARNING
    if args.verbose:
        return logging.DEBUG
    return logging.INFO


def get_custom_headers(args):
    custom_headers = {}
    if args.custom_provider_header:
        for header in args.custom_provider_header:
            k, v = header.split(':', 1)
            custom_headers[k.strip()] = v.strip()
    return custom_headers


if __name__ == '__main__':
    import sys
    sys.exit(main())
