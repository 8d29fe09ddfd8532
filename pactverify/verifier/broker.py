"""Find the consumers of a provider, and their pacts, in a pact broker."""
import logging
import os
import urllib.parse

from restnavigator import Navigator

from .model import ConsumerInfo

log = logging.getLogger(__name__)


class PactBrokerConfig:
    def __init__(self, url=None, token=None, tags=None):
        url = url or os.environ.get('PACT_BROKER_URL')
        if not url:
            raise ValueError('pact broker URL must be specified')

        # basic auth may be embedded in the broker URL
        url_parts = urllib.parse.urlparse(url)
        host = netloc = url_parts.netloc
        self.auth = None
        if '@' in netloc:
            url_auth, host = netloc.split('@')
            self.auth = tuple(url_auth.split(':'))
        self.url = f'{url_parts.scheme}://{host}/'

        if not self.auth:
            auth = os.environ.get('PACT_BROKER_AUTH')
            if auth:
                self.auth = tuple(auth.split(':'))

        token = token or os.environ.get('PACT_BROKER_TOKEN')
        self.headers = None
        if token:
            self.headers = {'Authorization': f'Bearer {token}'}

        self.tags = tags or []

    def __repr__(self):
        return f'<PactBrokerConfig {self.url} tags={self.tags}>'

    def get_broker_navigator(self):
        return Navigator.hal(self.url, default_curie='pb', auth=self.auth, headers=self.headers)

    def get_pacts_for_provider(self, provider):
        nav = self.get_broker_navigator()
        if self.tags:
            relations = [('latest-provider-pacts-with-tag', dict(provider=provider, tag=tag)) for tag in self.tags]
        else:
            relations = [('latest-provider-pacts', dict(provider=provider))]
        # the same pact may be the latest for several tags, only verify it once
        seen = set()
        for relation, params in relations:
            try:
                broker_provider = nav[relation](**params)
                broker_provider.fetch()
            except Exception as e:
                raise ValueError(f'error fetching pacts from {self.url} for {provider}: {e}') from e
            for broker_pact in broker_provider['pacts']:
                content = broker_pact.fetch()
                key = str(content)
                if key in seen:
                    continue
                seen.add(key)
                yield content


class BrokerPacts:
    def __init__(self, provider_name, pact_broker=None):
        self.provider_name = provider_name
        self.pact_broker = pact_broker or PactBrokerConfig()

    def consumers(self):
        for content in self.pact_broker.get_pacts_for_provider(self.provider_name):
            name = content['consumer']['name']
            log.debug(f'Found pact for consumer {name} in {self.pact_broker.url}')
            yield ConsumerInfo(name, pact_source=content)
