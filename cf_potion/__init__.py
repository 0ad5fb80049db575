from .resource import Resource
from .client import Client

__all__ = (
    'Api',
    'Client',
    'Resource',
    'fields',
    'manager',
    'resolvers',
    'schema',
    'signals',
    'transport',
    'v1',
    'v2',
)


class Api(object):
    """
    A registry of resource types sharing one path prefix on the target.

    Relationship targets given by name are looked up in the :class:`Api` of the resource declaring them, so related
    resources must be registered with the same :class:`Api`.

    :param prefix: an optional path prefix. Must start with "/"
    :param str title: an optional title
    :param str description: an optional description
    """

    def __init__(self, prefix=None, title=None, description=None):
        self.prefix = prefix or ''
        self.title = title
        self.description = description
        self.resources = {}

    def add_resource(self, resource):
        """
        Add a :class:`Resource` class to the API.

        :param Resource resource: resource
        :return: the resource, so this can be used as a class decorator
        """
        # prevent resources from being added twice
        if resource in self.resources.values():
            return resource

        if resource.api is not None and resource.api != self:
            raise RuntimeError("Attempted to register a resource that is already registered with a different Api.")

        resource.api = self
        resource.route_prefix = ''.join((self.prefix, '/', resource.meta.plural))

        self.resources[resource.meta.name] = resource
        return resource

    def lookup(self, name):
        """
        :param str name: singular or plural resource name
        :return: the registered resource class, or ``None``
        """
        if name in self.resources:
            return self.resources[name]
        for resource in self.resources.values():
            if resource.meta.plural == name:
                return resource
        return None
