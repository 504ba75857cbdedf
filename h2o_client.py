""" http client for the H2O REST api (/3/...) """

import logging
from urllib.parse import urljoin

import requests

from h2o_form import encode_form
from h2o_settings import BASE_URL

LOGGER = logging.getLogger(__name__)

FORM_HEADERS = {'Content-Type': 'application/x-www-form-urlencoded'}


class H2OError(Exception):
    """ base error of the h2o command wrapper """


class H2OResponseError(H2OError):
    """ server answered with a non-success http status """

    def __init__(self, status_code, url, message=''):
        self.status_code = status_code
        self.url = url
        self.message = message
        text = f'{status_code} from {url}'
        if message:
            text += f': {message}'
        super().__init__(text)


def error_message(source):
    """ H2O puts its error text into msg / exception_msg of a json body """
    try:
        body = source.json()
    except ValueError:
        return source.text[:200]
    if not isinstance(body, dict):
        return ''
    return body.get('exception_msg') or body.get('msg') or ''


class H2OClient:
    """ POST form bodies and GET json from one H2O server """

    def __init__(self, base_url=BASE_URL, session=None, timeout=None):
        self.base_url = base_url
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    def url(self, endpoint):
        if '{endpoint}' in self.base_url:
            return self.base_url.replace('{endpoint}', endpoint)
        return self.base_url.rstrip('/') + '/' + endpoint

    def server_root(self):
        """ base URL without its api version segment, keeping any gateway prefix """
        root, _, _ = self.url('').rstrip('/').rpartition('/')
        return root

    def path_url(self, path):
        """ absolute paths handed out by the server (job keys) hang off the server root """
        if path.startswith('/'):
            return self.server_root() + path
        return urljoin(self.url(''), path)

    def post(self, endpoint, fields=None):
        url = self.url(endpoint)
        body = encode_form(fields or {})
        LOGGER.debug('POST %s %s', url, body)
        source = self.session.post(url, data=body, headers=FORM_HEADERS, timeout=self.timeout)
        return self._json(source, url)

    def get(self, endpoint):
        return self._get(self.url(endpoint))

    def get_path(self, path):
        return self._get(self.path_url(path))

    def _get(self, url):
        LOGGER.debug('GET %s', url)
        source = self.session.get(url, timeout=self.timeout)
        return self._json(source, url)

    def _json(self, source, url):
        if not source.ok:
            message = error_message(source)
            LOGGER.error('H2O returned %s for %s: %s', source.status_code, url, message)
            raise H2OResponseError(source.status_code, url, message)
        return source.json()
