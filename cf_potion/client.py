from functools import partial

from .manager import FlatManager
from .transport import Transport


class Client(object):
    """
    Entry point for talking to a target: holds the transport, configuration and the scoping to a current
    organization and space.

    Resource types registered with the client's :class:`Api` are also available as attributes:

    .. code-block:: python

        client = Client('https://api.example.com', token='bearer ...')
        client.app(guid)            # lazy instance, no request
        client.apps(depth=1)        # list
        client.app_by_name('web')   # first match, or None

    :param str target: base URL of the target
    :param str token: value of the ``Authorization`` header
    :param cf_potion.Api api: registry of resource types, default: :data:`cf_potion.v2.api`
    :param dict config: configuration overrides
    :param Transport transport: optional transport to use instead of a :class:`Transport` to ``target``
    """

    def __init__(self, target='http://api.cloudfoundry.com', token=None, api=None, config=None, transport=None):
        self.config = config = dict(config or {})
        config.setdefault('POTION_DEFAULT_DEPTH', 1)
        config.setdefault('POTION_MANIFEST_DEPTH', 2)
        config.setdefault('POTION_TIMEOUT', None)
        config.setdefault('POTION_VERIFY', True)

        if api is None:
            from .v2 import api

        self.api = api
        self.transport = transport or Transport(target, token,
                                                timeout=config['POTION_TIMEOUT'],
                                                verify=config['POTION_VERIFY'])
        self.current_organization = None
        self.current_space = None

    @property
    def target(self):
        return self.transport.target

    @property
    def token(self):
        return self.transport.token

    @token.setter
    def token(self, token):
        self.transport.token = token

    @property
    def logged_in(self):
        return bool(self.transport.token)

    def logout(self):
        self.transport.token = None

    def info(self):
        return self.transport.info()

    @property
    def current_user(self):
        """
        The user the token was issued to, or ``None`` if there is no usable token.
        """
        token_data = self.transport.token_data
        user_id = token_data.get('user_id')
        if user_id is None:
            return None

        user = self.get('user', user_id)
        if 'email' not in type(user).schema:
            user.email = token_data.get('email')
        return user

    def resource(self, name):
        """
        :param str name: singular or plural resource name
        :raises KeyError: if no such resource is registered
        """
        resource = self.api.lookup(name)
        if resource is None:
            raise KeyError('No resource named "{}"'.format(name))
        return resource

    def get(self, name, guid=None):
        """
        :return: an instance for ``guid`` that is fetched on first use, or a draft if ``guid`` is ``None``
        """
        return self.resource(name)(guid, self)

    def make(self, name, manifest):
        resource = self.resource(name)
        return resource.manager.make(self, manifest)

    def _scope(self, resource, where):
        where = dict(where or {})
        if self.current_space is not None and 'space' in resource.schema.to_one:
            where.setdefault('space_guid', self.current_space.guid)
        return where or None

    def instances(self, name, depth=None, where=None):
        """
        List all instances of a resource, within the current space if the resource belongs to spaces.
        """
        resource = self.resource(name)
        if depth is None:
            depth = self.config['POTION_DEFAULT_DEPTH']
        return resource.manager.instances(self, depth, self._scope(resource, where))

    def first(self, resource_name, **where):
        """
        :return: the first instance matching all ``where`` filters, or ``None``
        """
        resource = self.resource(resource_name)
        depth = self.config['POTION_DEFAULT_DEPTH']

        space = self.current_space
        if space is not None and resource.meta.plural in type(space).schema.to_many:
            items = space.to_many(resource.meta.plural, depth=depth, where=where)
        else:
            items = self.instances(resource_name, depth, where)

        return items[0] if items else None

    def find(self, resource_name, identity):
        """
        Look up an instance by the attribute that identifies it, for resources addressed by one of their own
        attributes.

        :return: the hydrated instance, or ``None`` if the target does not know it
        """
        item = self.get(resource_name, identity)
        return item if item.exists() else None

    def from_url(self, name, path, depth=None):
        """
        Fetch a single instance from an arbitrary path or url of the target.
        """
        return self.make(name, self.transport.fetch(path, depth))

    def instances_from(self, name, path, depth=None, where=None):
        """
        List instances from an arbitrary collection path or url of the target.
        """
        response = self.transport.list(path, depth, where)
        return [self.make(name, manifest) for manifest in response['resources']]

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        api = self.__dict__.get('api')
        if api is not None:
            if '_by_' in name:
                singular, _, key = name.rpartition('_by_')
                resource = api.lookup(singular)
                if resource is not None:
                    identity = resource.schema.identity_field
                    if isinstance(resource.manager, FlatManager) and identity is not None and identity.name == key:
                        return partial(self.find, resource.meta.name)
                    if key == 'name':
                        return lambda value: self.first(resource.meta.name, name=value)

            resource = api.lookup(name)
            if resource is not None:
                if name == resource.meta.name:
                    return partial(self.get, name)
                return partial(self.instances, name)

        raise AttributeError("'{}' object has no attribute '{}'".format(type(self).__name__, name))

    def __repr__(self):
        return '<Client {}>'.format(self.target)
