import copy
from importlib import import_module
import inspect


class ResourceReference(object):
    """
    A lazy pointer to a resource type, resolved on first use so that resource classes may refer to each other
    before all of them are defined.

    A reference value can be:

    - a :class:`Resource` class
    - ``"self"``, the resource the referring field is bound to
    - a singular or plural resource name registered with the binding's :class:`Api`, e.g. ``"space"``
    - a dotted ``module.ClassName`` path
    """

    def __init__(self, value):
        self.value = value

    def resolve(self, binding=None):
        value = self.value

        if value == 'self':
            return binding

        from .resource import Resource
        if inspect.isclass(value) and issubclass(value, Resource):
            return value

        api = getattr(binding, 'api', None)
        if api is not None:
            resource = api.lookup(value)
            if resource is not None:
                return resource

        if '.' in value:
            module_name, class_name = value.rsplit('.', 1)
            return getattr(import_module(module_name), class_name)

        if api is not None:
            raise RuntimeError('Resource named "{}" is not registered with the Api of {}.'.format(value, binding))
        raise RuntimeError('Resource named "{}" cannot be found; {} is not registered with an Api.'.format(value, binding))

    def __repr__(self):
        return "<ResourceReference '{}'>".format(self.value)


class ResourceBound(object):
    """
    Mixin for descriptors that belong to exactly one resource type. Descriptors inherited from a parent resource
    are copied when bound to a subclass.
    """
    resource = None

    def _on_bind(self, resource):
        pass

    def bind(self, resource):
        if self.resource is None:
            self.resource = resource
            self._on_bind(resource)
        elif self.resource is not resource:
            return self.rebind(resource)
        return self

    def rebind(self, resource):
        bound = copy.copy(self)
        bound.__dict__.pop('target', None)
        bound.resource = None
        return bound.bind(resource)
