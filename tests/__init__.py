import copy
from pprint import pformat
from unittest import TestCase

from cf_potion import Client
from cf_potion.exceptions import NotFound


def envelope(guid, prefix='/v2/apps', **entity):
    return {
        "metadata": {
            "guid": guid,
            "url": '{}/{}'.format(prefix, guid),
            "created_at": "2013-03-28T17:02:11+00:00",
            "updated_at": None
        },
        "entity": entity
    }


class FakeTransport(object):
    """
    Stands in for :class:`cf_potion.transport.Transport`: records every call and answers with canned responses.

    Usage:
        transport.respond('fetch', '/v2/apps/a1', envelope('a1', name='web'))
        app.name
        transport.assert_count(1)

    Unanswered ``fetch`` calls raise :class:`NotFound`; unanswered ``list`` calls return an empty collection.
    """

    def __init__(self, target='http://api.example.com'):
        self.target = target
        self.token = None
        self.token_data = {}
        self.calls = []
        self.responses = {}

    def respond(self, method, path, response):
        self.responses[(method, path)] = response

    def _call(self, method, path, *args):
        self.calls.append((method, path) + args)
        response = self.responses.get((method, path))
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def fetch(self, path, depth=None):
        if ('fetch', path) not in self.responses:
            self.calls.append(('fetch', path, depth))
            raise NotFound()
        return self._call('fetch', path, depth)

    def list(self, path, depth=None, where=None):
        resources = self._call('list', path, depth, where) or []
        return {'total_results': len(resources), 'resources': resources}

    def create(self, path, payload):
        return self._call('create', path, payload)

    def update(self, path, payload):
        return self._call('update', path, payload)

    def delete(self, path):
        self._call('delete', path)
        return True

    def link(self, path):
        return self._call('link', path)

    def unlink(self, path):
        return self._call('unlink', path)

    def upload(self, path, fileobj, resources=()):
        return self._call('upload', path, list(resources))

    def info(self):
        return self._call('info', '/info')

    def reset(self):
        self.calls = []

    def get_count(self):
        return len(self.calls)

    def display_all(self):
        return 'Counted: {count}\n{calls}'.format(count=self.get_count(), calls=pformat(self.calls))

    def assert_count(self, expected):
        count = self.get_count()
        assert count == expected, self.display_all()


class BaseTestCase(TestCase):

    def setUp(self):
        super(BaseTestCase, self).setUp()
        self.transport = FakeTransport()
        self.client = self.create_client(self.transport)

    def create_client(self, transport):
        return Client(transport=transport)

    def last_call(self):
        return self.transport.calls[-1]
