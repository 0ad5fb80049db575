import base64
import json
import logging
import re
import time
from urllib.parse import urljoin

import requests
from requests.exceptions import ChunkedEncodingError

from .exceptions import APIError, BadResponse, Denied, NotFound, TargetRefused, UploadFailed

log = logging.getLogger(__name__)


def _query_value(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return value


class Transport(object):
    """
    HTTP transport to a target API, using a :class:`requests.Session`.

    Responses are decoded from JSON and target errors are raised as :mod:`cf_potion.exceptions`.

    :param str target: base URL of the target, e.g. ``"https://api.example.com"``
    :param str token: value of the ``Authorization`` header, e.g. ``"bearer <jwt>"``
    :param timeout: request timeout in seconds, passed on to :mod:`requests`
    :param verify: whether to verify TLS certificates, or a path to a CA bundle
    :param requests.Session session: optional session to send requests with
    """

    def __init__(self, target, token=None, timeout=None, verify=True, session=None):
        self.target = target.rstrip('/')
        self.token = token
        self.timeout = timeout
        self.verify = verify
        self.session = session or requests.Session()

    def url(self, path):
        if path.startswith(('http://', 'https://')):
            return path
        return urljoin(self.target + '/', path.lstrip('/'))

    @staticmethod
    def params_from(depth=None, where=None):
        """
        :return: query parameters for an embedding ``depth`` and equality filters ``where``, one ``q`` per filter
        """
        params = {}
        if depth is not None:
            params['inline-relations-depth'] = depth
        if where:
            params['q'] = ['{}:{}'.format(key, _query_value(value)) for key, value in where.items()]
        return params or None

    def request(self, method, path, payload=None, params=None, data=None, files=None):
        headers = {'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = self.token

        url = self.url(path)
        before = time.time()

        try:
            response = self.session.request(method, url,
                                            json=payload,
                                            params=params,
                                            data=data,
                                            files=files,
                                            headers=headers,
                                            timeout=self.timeout,
                                            verify=self.verify)
        except (requests.ConnectionError, requests.Timeout) as e:
            raise TargetRefused(str(e))

        log.debug('%6s -> %d  %s (%0.3fs)', method, response.status_code, response.url, time.time() - before)
        return self._handle_response(response)

    @staticmethod
    def _error_info(response):
        try:
            info = response.json()
        except ValueError:
            return None
        return info if isinstance(info, dict) else None

    def _handle_response(self, response):
        status = response.status_code

        if 200 <= status < 400:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                raise BadResponse(status, response.text)

        if status == 404:
            info = self._error_info(response) or {}
            raise NotFound(info.get('description'))

        if status in (401, 403):
            info = self._error_info(response) or {}
            raise Denied(info.get('code', status), info.get('description'))

        if status == 400 or status >= 500:
            info = self._error_info(response)
            if info is None:
                raise BadResponse(status, response.text)

            code = info.get('code', status)
            if code == 402:
                raise UploadFailed(info.get('description'))
            raise APIError(code, info.get('description'))

        raise BadResponse(status, response.text)

    def fetch(self, path, depth=None):
        return self.request('GET', path, params=self.params_from(depth))

    def list(self, path, depth=None, where=None):
        """
        Read all pages of a collection.

        Collections of the legacy API are a bare array and have no pages.

        :return: a ``{"total_results": ..., "resources": [...]}`` dictionary
        """
        response = self.request('GET', path, params=self.params_from(depth, where)) or {}
        if isinstance(response, list):
            return {'total_results': len(response), 'resources': response}

        resources = list(response.get('resources', []))

        while response.get('next_url'):
            response = self.request('GET', response['next_url']) or {}
            resources.extend(response.get('resources', []))

        return {'total_results': len(resources), 'resources': resources}

    def create(self, path, payload):
        return self.request('POST', path, payload=payload)

    def update(self, path, payload):
        return self.request('PUT', path, payload=payload)

    def delete(self, path):
        self.request('DELETE', path)
        return True

    def link(self, path):
        return self.request('PUT', path)

    def unlink(self, path):
        return self.request('DELETE', path)

    def _upload(self, path, fileobj, resources):
        if hasattr(fileobj, 'seek'):
            fileobj.seek(0)
        return self.request('PUT', path,
                            data={'resources': json.dumps(list(resources))},
                            files={'application': ('application.zip', fileobj, 'application/zip')})

    def upload(self, path, fileobj, resources=()):
        """
        Upload application bits as a zip file. An upload interrupted by the target is retried once.

        :param fileobj: file-like object with the zipped bits
        :param resources: fingerprints of files the target already has
        """
        try:
            return self._upload(path, fileobj, resources)
        except ChunkedEncodingError:
            log.warning('Upload to %s was interrupted; retrying once', path)
            return self._upload(path, fileobj, resources)

    def info(self):
        return self.request('GET', '/info')

    @property
    def token_data(self):
        """
        The claims of the bearer token, e.g. ``user_id`` and ``email``.

        The token is not verified. Anything that is not a well-formed JWT yields an empty dictionary.
        """
        if not self.token:
            return {}

        token = re.sub(r'^bearer\s+', '', self.token, flags=re.IGNORECASE)
        try:
            payload = token.split('.')[1]
            payload += '=' * (-len(payload) % 4)
            data = json.loads(base64.urlsafe_b64decode(payload.encode('ascii')).decode('utf-8'))
        except (IndexError, ValueError):
            return {}
        return data if isinstance(data, dict) else {}
