"""Load pacts from URLs, files, or documents that were fetched some other way."""
import json
import logging
import os
import pathlib
from urllib.parse import urlparse

import requests

from .model import Pact

log = logging.getLogger(__name__)

URL = 'url'
FILE = 'file'
DOCUMENT = 'document'


class PactLoadError(ValueError):
    pass


def pact_source_kind(source):
    """Work out where a pact comes from, or None if it can't be loaded at all."""
    if isinstance(source, dict):
        return DOCUMENT
    if isinstance(source, str) and urlparse(source).scheme in ('http', 'https'):
        return URL
    if isinstance(source, (str, pathlib.Path)) and os.path.isfile(source):
        return FILE
    return None


def authentication_options(authentication):
    # a (user, password) pair is basic auth, a bare string is a bearer token
    if not authentication:
        return {}
    if isinstance(authentication, str):
        return {'headers': {'Authorization': f'Bearer {authentication}'}}
    return {'auth': tuple(authentication)}


def fetch_pact(url, authentication=None):
    log.debug(f'Fetching pact from {url}')
    try:
        r = requests.get(url, **authentication_options(authentication))
        r.raise_for_status()
        return r.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        raise PactLoadError(f'Unable to load pact from {url}: {e}') from e


def read_pact_file(filename):
    log.debug(f'Reading pact from {filename}')
    try:
        with open(filename) as file:
            return json.load(file)
    except (OSError, ValueError) as e:
        raise PactLoadError(f'Unable to load pact file {filename}: {e}') from e


def load_pact(source, authentication=None):
    kind = pact_source_kind(source)
    if kind == URL:
        document = fetch_pact(source, authentication)
    elif kind == FILE:
        document = read_pact_file(source)
    elif kind == DOCUMENT:
        document = source
    else:
        raise PactLoadError(f'No pact found at {source!r}')
    try:
        return Pact(document)
    except (KeyError, TypeError, ValueError) as e:
        raise PactLoadError(f'Invalid pact from {source if kind != DOCUMENT else "document"}: {e!r}') from e
