import logging
from urllib.parse import parse_qs, urljoin

import requests
from requests.structures import CaseInsensitiveDict

from .model import MISSING

log = logging.getLogger(__name__)

SUPPORTED_METHODS = ('GET', 'HEAD', 'OPTIONS', 'POST', 'PUT', 'PATCH', 'DELETE')


class ProviderResponse:
    """The parts of a provider's HTTP response that get compared to a pact."""
    def __init__(self, status_code, headers=None, body=None, reason=''):
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body
        self.reason = reason

    def __repr__(self):
        return f'<ProviderResponse {self.status_code} headers={self.headers} body={self.body!r}>'

    @classmethod
    def from_requests(cls, response):
        content_type = CaseInsensitiveDict(response.headers).get('Content-Type', '')
        if not response.content:
            body = None
        elif 'json' in content_type:
            try:
                body = response.json()
            except ValueError:
                body = response.text
        else:
            body = response.text
        return cls(response.status_code, response.headers, body, response.reason)

    @classmethod
    def from_result(cls, result):
        """Coerce whatever a provider verification method returned into a ProviderResponse."""
        if isinstance(result, cls):
            return result
        if isinstance(result, requests.Response):
            return cls.from_requests(result)
        if isinstance(result, dict):
            return cls(result.get('status', result.get('statusCode')), result.get('headers'),
                       result.get('body', result.get('data')))
        raise TypeError(f'provider method returned {type(result).__name__}, expected a response')


class ProviderClient:
    def __init__(self, provider):
        self.provider = provider

    def make_request(self, request):
        method = request.method.upper()
        if method not in SUPPORTED_METHODS:
            raise ValueError(f'Request method {method} not implemented in verifier')
        headers = self.request_headers(request)
        kwargs = dict(headers=headers)
        if request.query:
            query = request.query
            if isinstance(query, str):
                # version 2 used strings, version 3 uses objects
                query = parse_qs(query)
            kwargs['params'] = query
        if request.body is not MISSING:
            if 'json' in CaseInsensitiveDict(headers).get('Content-Type', 'application/json'):
                kwargs['json'] = request.body
            else:
                kwargs['data'] = request.body
        url = self.url_for(request.path)
        log.debug(f'{method} {url} {kwargs}')
        send = getattr(requests, method.lower())
        return ProviderResponse.from_requests(send(url, **kwargs))

    def make_state_change_request(self, url, state, use_body, is_setup, teardown):
        payload = {'state': state}
        if teardown:
            payload['action'] = 'setup' if is_setup else 'teardown'
        kwargs = {}
        if self.provider.custom_headers:
            kwargs['headers'] = dict(self.provider.custom_headers)
        if use_body:
            kwargs['json'] = payload
        else:
            kwargs['params'] = payload
        log.debug(f'Setting up provider state {state!r} at {url}')
        return requests.post(url, **kwargs)

    def url_for(self, path):
        return urljoin(self.provider.url, path)

    def request_headers(self, request):
        headers = dict(self.provider.custom_headers)
        headers.update(request.headers)
        return headers
