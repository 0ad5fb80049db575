from collections import OrderedDict, namedtuple

from jsonschema import Draft4Validator, FormatChecker
from werkzeug.utils import cached_property

from .exceptions import TypeMismatch
from .reference import ResourceBound

Description = namedtuple('Description', ('attributes', 'to_one', 'to_many'))


class Schema(object):
    """
    The base class for all types with a schema. Has :attr:`response` and :attr:`request` attributes for the
    JSON-schemas of values read from and written to the target.

    Any class inheriting from schema needs to implement :meth:`schema`.
    """

    def schema(self):
        """
        Abstract method returning the JSON schema used by both :attr:`response` and :attr:`request`.

        :return: a JSON-schema or a tuple of JSON-schemas in the format ``(response_schema, request_schema)``
        """
        raise NotImplementedError()

    @cached_property
    def response(self):
        schema = self.schema()
        if isinstance(schema, tuple):
            return schema[0]
        return schema

    @cached_property
    def request(self):
        schema = self.schema()
        if isinstance(schema, tuple):
            return schema[1]
        return schema

    @cached_property
    def _validator(self):
        Draft4Validator.check_schema(self.request)
        return Draft4Validator(self.request, format_checker=FormatChecker())

    def validate(self, instance, root=None):
        """
        Validates a JSON value against :attr:`request`.

        :param instance: JSON value
        :param root: optional name prefixed to error paths
        :raises TypeMismatch: if validation failed
        """
        errors = sorted(self._validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
        if errors:
            raise TypeMismatch(errors, root=root)
        return instance


class FieldSet(ResourceBound):
    """
    The attribute and relationship registry of one resource type.

    Descriptors are registered once, when the resource class is created, and never change per instance.

    :param dict fields: a dictionary of :class:`fields.Raw` objects
    :param required_fields: a list or tuple of attribute names that must be present when read or created
    """

    def __init__(self, fields=None, required_fields=None):
        self.fields = OrderedDict()
        self.required = set(required_fields or ())
        self.identity = None

        for key, field in (fields or {}).items():
            self.set(key, field)

    def _on_bind(self, resource):
        for key, field in list(self.fields.items()):
            self.fields[key] = field.bind(resource)

    def set(self, key, field):
        if self.resource is not None:
            field = field.bind(self.resource)
        field.name = key

        if field.identity:
            if field.relationship is not None:
                raise RuntimeError('Relationship "{}" cannot be the identity of {}'.format(key, self.resource))
            if self.identity is not None and self.identity != key:
                raise RuntimeError('Multiple identity attributes defined for {}: "{}" and "{}"'.format(
                    self.resource, self.identity, key))
            self.identity = key

        self.fields[key] = field
        return field

    def define_attribute(self, name, field):
        if field.relationship is not None:
            raise RuntimeError('"{}" is a relationship; use define_relationship()'.format(name))
        return self.set(name, field)

    def define_relationship(self, name, field):
        if field.relationship not in ('to_one', 'to_many'):
            raise RuntimeError('"{}" is not a relationship'.format(name))
        return self.set(name, field)

    def _of_kind(self, kind):
        return OrderedDict((key, field) for key, field in self.fields.items() if field.relationship == kind)

    @property
    def attributes(self):
        return self._of_kind(None)

    @property
    def to_one(self):
        return self._of_kind('to_one')

    @property
    def to_many(self):
        return self._of_kind('to_many')

    @property
    def identity_field(self):
        if self.identity is None:
            return None
        return self.fields[self.identity]

    def is_required(self, key):
        return key in self.required or self.fields[key].required

    def describe(self):
        return Description(self.attributes, self.to_one, self.to_many)

    def __contains__(self, key):
        return key in self.fields

    def __getitem__(self, key):
        return self.fields[key]


def describe(resource):
    """
    :return: the :class:`Description` of all attributes and relationships registered for ``resource``
    """
    return resource.schema.describe()
