from unittest import TestCase

from cf_potion import Client, v1, v2
from cf_potion.transport import Transport
from tests import BaseTestCase, envelope


class ClientConfigTestCase(TestCase):

    def test_defaults(self):
        client = Client()

        self.assertEqual({
            'POTION_DEFAULT_DEPTH': 1,
            'POTION_MANIFEST_DEPTH': 2,
            'POTION_TIMEOUT': None,
            'POTION_VERIFY': True
        }, client.config)
        self.assertIs(v2.api, client.api)
        self.assertIsInstance(client.transport, Transport)
        self.assertEqual('http://api.cloudfoundry.com', client.target)
        self.assertFalse(client.logged_in)

    def test_transport_config(self):
        client = Client('https://api.example.com/', token='bearer xyz',
                        config={'POTION_TIMEOUT': 30, 'POTION_VERIFY': False})

        self.assertEqual('https://api.example.com', client.transport.target)
        self.assertEqual(30, client.transport.timeout)
        self.assertFalse(client.transport.verify)
        self.assertEqual(1, client.config['POTION_DEFAULT_DEPTH'])

    def test_token(self):
        client = Client(token='bearer xyz')
        self.assertTrue(client.logged_in)
        self.assertEqual('bearer xyz', client.token)

        client.logout()
        self.assertFalse(client.logged_in)

        client.token = 'bearer abc'
        self.assertEqual('bearer abc', client.transport.token)


class ClientTestCase(BaseTestCase):

    def test_get(self):
        app = self.client.get('app', 'a1')

        self.assertIsInstance(app, v2.App)
        self.assertIs(self.client, app.client)
        self.assertEqual(app, self.client.app('a1'))
        self.assertIsNone(self.client.app().guid)
        self.transport.assert_count(0)

    def test_resource(self):
        self.assertIs(v2.ServiceBinding, self.client.resource('service_binding'))
        self.assertIs(v2.ServiceBinding, self.client.resource('service_bindings'))

        with self.assertRaises(KeyError):
            self.client.resource('stack')

        with self.assertRaises(AttributeError):
            self.client.stacks

        with self.assertRaises(AttributeError):
            self.client.stack_by_name

    def test_instances(self):
        self.transport.respond('list', '/v2/apps', [envelope('a1', name='web'), envelope('a2', name='worker')])

        apps = self.client.apps()

        self.assertEqual(['web', 'worker'], [app.name for app in apps])
        self.assertEqual(('list', '/v2/apps', 1, None), self.last_call())
        self.transport.assert_count(1)

        self.client.instances('app', depth=0, where={'name': 'web'})
        self.assertEqual(('list', '/v2/apps', 0, {'name': 'web'}), self.last_call())

    def test_instances_in_current_space(self):
        self.client.current_space = self.client.space('s1')

        self.client.apps()
        self.assertEqual(('list', '/v2/apps', 1, {'space_guid': 's1'}), self.last_call())

        self.client.apps(where={'space_guid': 's2'})
        self.assertEqual(('list', '/v2/apps', 1, {'space_guid': 's2'}), self.last_call())

        self.client.organizations()
        self.assertEqual(('list', '/v2/organizations', 1, None), self.last_call())

    def test_by_name(self):
        self.transport.respond('list', '/v2/organizations', [envelope('o1', prefix='/v2/organizations', name='acme')])

        organization = self.client.organization_by_name('acme')

        self.assertEqual(self.client.organization('o1'), organization)
        self.assertEqual(('list', '/v2/organizations', 1, {'name': 'acme'}), self.last_call())

        self.assertIsNone(self.client.space_by_name('production'))

    def test_by_name_in_current_space(self):
        self.transport.respond('list', '/v2/spaces/s1/apps', [envelope('a1', name='web')])
        self.client.current_space = self.client.space('s1')

        self.assertEqual(self.client.app('a1'), self.client.app_by_name('web'))
        self.assertEqual(('list', '/v2/spaces/s1/apps', 1, {'name': 'web'}), self.last_call())

    def test_first(self):
        self.transport.respond('list', '/v2/routes', [envelope('r1', prefix='/v2/routes', host='www'),
                                                      envelope('r2', prefix='/v2/routes', host='www')])

        self.assertEqual(self.client.route('r1'), self.client.first('route', host='www'))

    def test_make(self):
        space = self.client.make('space', envelope('s1', prefix='/v2/spaces', name='production'))

        self.assertEqual('s1', space.guid)
        self.assertEqual('production', space.name)
        self.transport.assert_count(0)

    def test_from_url(self):
        self.transport.respond('fetch', '/v2/spaces/s1', envelope('s1', prefix='/v2/spaces', name='production'))
        self.transport.respond('list', '/v2/spaces/s1/service_instances', [
            envelope('i1', prefix='/v2/service_instances', name='db')
        ])

        space = self.client.from_url('space', '/v2/spaces/s1', depth=0)
        self.assertEqual('production', space.name)
        self.assertEqual(('fetch', '/v2/spaces/s1', 0), self.last_call())

        instances = self.client.instances_from('service_instance', '/v2/spaces/s1/service_instances', depth=1)
        self.assertEqual(['db'], [instance.name for instance in instances])
        self.assertEqual(('list', '/v2/spaces/s1/service_instances', 1, None), self.last_call())

    def test_current_user(self):
        self.assertIsNone(self.client.current_user)

        self.transport.token_data = {'user_id': 'u1', 'email': 'dev@example.com'}
        user = self.client.current_user

        self.assertIsInstance(user, v2.User)
        self.assertEqual('u1', user.guid)
        self.assertEqual('dev@example.com', user.email)
        self.assertIsNone(self.client.user('u2').email)
        self.transport.assert_count(0)

    def test_info(self):
        self.transport.respond('info', '/info', {'name': 'vcap', 'version': 2})

        self.assertEqual({'name': 'vcap', 'version': 2}, self.client.info())

    def test_upload(self):
        self.transport.respond('upload', '/v2/apps/a1/bits', {'metadata': {'guid': 'a1'}})

        self.client.app('a1').upload(object(), resources=[{'sha1': 'abc'}])
        self.assertEqual(('upload', '/v2/apps/a1/bits', [{'sha1': 'abc'}]), self.last_call())


class LegacyClientTestCase(BaseTestCase):

    def create_client(self, transport):
        return Client(transport=transport, api=v1.api)

    def test_accessors(self):
        app = self.client.app('web')

        self.assertIsInstance(app, v1.App)
        self.assertEqual('/apps/web', app.manager.item_path(app.guid))
        self.assertIsInstance(self.client.user('dev@example.com'), v1.User)
        self.assertEqual('/users/dev%40example.com', v1.User.manager.item_path('dev@example.com'))

    def test_instances(self):
        self.transport.respond('list', '/apps', [{'name': 'web', 'state': 'STARTED'}])

        apps = self.client.apps()

        self.assertEqual([self.client.app('web')], apps)
        self.assertEqual('STARTED', apps[0].state)
        self.transport.assert_count(1)
