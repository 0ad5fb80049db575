import datetime
import logging

import aniso8601
from jsonschema import ValidationError
from werkzeug.utils import cached_property

from .exceptions import TypeMismatch
from .reference import ResourceReference, ResourceBound
from .schema import Schema
from .utils import to_path, singularize

log = logging.getLogger(__name__)


class Raw(Schema, ResourceBound):
    """
    This is the base class for all field types, can be given any JSON-schema.

    >>> f = fields.Raw({"type": "string"}, io="r")
    >>> f.response
    {'readOnly': True, 'type': 'string'}

    :param io: one or more of "r" (read), "c" (create), "u" (update) and "w" (write), default: "rw"
    :param schema: JSON-schema for field, or :class:`callable` resolving to a JSON-schema when called
    :param default: optional default value, must be JSON-convertible; may be a callable with no arguments
    :param attribute: key or path of the value in the manifest entity, used for both reading and writing;
        defaults to the field name. A path is a tuple or a dotted string.
    :param read: key or path to read from, overrides ``attribute``
    :param write: key or path to write to, overrides ``attribute``
    :param bool absolute: if ``True``, paths start at the manifest root instead of the entity, e.g. for
        ``metadata.created_at``
    :param bool identity: whether this attribute mirrors the resource guid
    :param bool required: whether reading a missing value is an error
    :param nullable: whether the field is nullable.
    :param title: optional title for JSON schema
    :param description: optional description for JSON schema
    """
    relationship = None
    name = None

    def __init__(self, schema, io="rw", default=None, attribute=None, read=None, write=None, identity=False,
                 required=False, nullable=False, title=None, description=None, absolute=False):
        self._schema = schema
        self._default = default
        self.attribute = attribute
        self.read = read
        self.write = write
        self.identity = identity
        self.required = required
        self.absolute = absolute
        self.nullable = nullable
        self.title = title
        self.description = description
        self.io = io

    def _finalize_schema(self, schema, io):
        """
        :return: new schema updated for field `nullable`, `title`, `description` and `default` attributes.
        """
        schema = dict(schema)

        if self.io == "r" and "r" in io:
            schema["readOnly"] = True

        if "null" in schema.get("type", []):
            self.nullable = True
        elif self.nullable:
            if "enum" in schema and None not in schema["enum"]:
                schema["enum"] = list(schema["enum"]) + [None]

            if "type" in schema:
                type_ = schema["type"]
                if isinstance(type_, (str, dict)):
                    schema["type"] = [type_, "null"]
                else:
                    schema["type"] = list(type_) + ["null"]

            if "anyOf" in schema:
                if not any("null" in choice.get("type", []) for choice in schema["anyOf"]):
                    schema["anyOf"] = list(schema["anyOf"]) + [{"type": "null"}]
            elif "oneOf" in schema:
                if not any("null" in choice.get("type", []) for choice in schema["oneOf"]):
                    schema["oneOf"] = list(schema["oneOf"]) + [{"type": "null"}]
            elif "type" not in schema:
                if len(schema) == 1 and "$ref" in schema:
                    schema = {"anyOf": [schema, {"type": "null"}]}
                else:
                    log.warning('%s is nullable but "null" type cannot be added', self)

        for attr in ("title", "description"):
            value = getattr(self, attr)
            if value is not None:
                schema[attr] = value

        if self._default is not None and not callable(self._default):
            schema["default"] = self._default
        return schema

    @property
    def io(self):
        return self._io

    @io.setter
    def io(self, value):
        io = ''
        if 'w' in value or 'c' in value:
            io += 'c'
        if 'r' in value:
            io += 'r'
        if 'w' in value or 'u' in value:
            io += 'u'
        self._io = io

    @property
    def read_only(self):
        return 'c' not in self.io and 'u' not in self.io

    @property
    def write_only(self):
        return 'r' not in self.io

    @property
    def default(self):
        if callable(self._default):
            return self._default()
        return self._default

    @default.setter
    def default(self, value):
        self._default = value

    @property
    def has_default(self):
        return self._default is not None

    def schema(self):
        """
        JSON schema representation
        """
        schema = self._schema
        if callable(schema):
            schema = schema()

        if isinstance(schema, Schema):
            read_schema, write_schema = schema.response, schema.request
        elif isinstance(schema, tuple):
            read_schema, write_schema = schema
        else:
            return self._finalize_schema(schema, "r"), self._finalize_schema(schema, "w")

        return self._finalize_schema(read_schema, "r"), self._finalize_schema(write_schema, "w")

    @property
    def entity_path(self):
        manager = getattr(self.resource, 'manager', None)
        if manager is None or self.absolute:
            return ()
        return manager.entity_path

    @property
    def read_path(self):
        return self.entity_path + to_path(self.read or self.attribute or self.name)

    @property
    def write_path(self):
        return self.entity_path + to_path(self.write or self.attribute or self.name)

    def format(self, value):
        """
        Format a Python value representation for the manifest. Noop by default.
        """
        if value is not None:
            return self.formatter(value)
        return value

    def convert(self, value):
        """
        Convert a manifest value to its Python representation. Noop by default.
        """
        if value is not None:
            return self.converter(value)
        return value

    def formatter(self, value):
        return value

    def converter(self, value):
        return value

    def validate(self, value):
        """
        Validates a Python value against :attr:`request` after formatting it.

        :raises TypeMismatch: if validation failed
        """
        try:
            instance = self.format(value)
        except (TypeError, ValueError, AttributeError) as e:
            raise TypeMismatch([ValidationError(str(e), validator='type', validator_value=self.request.get('type'))],
                               root=self.name)
        return super(Raw, self).validate(instance, root=self.name)

    def __repr__(self):
        return '{}(name={})'.format(self.__class__.__name__, repr(self.name))


class Any(Raw):
    """
    A field type that allows any value.
    """

    def __init__(self, **kwargs):
        super(Any, self).__init__({"type": ["null", "string", "number", "boolean", "object", "array"]}, **kwargs)


def _field_from_object(parent, cls_or_instance):
    if isinstance(cls_or_instance, type):
        container = cls_or_instance()
    else:
        container = cls_or_instance
    if not isinstance(container, Schema):
        raise RuntimeError('{} expected Raw or Schema, but got {}'.format(parent, container.__class__.__name__))
    if not isinstance(container, Raw):
        container = Raw(container)
    return container


class Array(Raw):
    """
    A field for an array of a given field type.

    :param Raw cls_or_instance: field class or instance
    :param int min_items: minimum number of items
    :param int max_items: maximum number of items
    :param bool unique: if ``True``, all values in the list must be unique
    """

    def __init__(self, cls_or_instance, min_items=None, max_items=None, unique=None, **kwargs):
        self.container = container = _field_from_object(self, cls_or_instance)

        schema_properties = [('type', 'array')]
        schema_properties += [(k, v) for k, v in [('minItems', min_items),
                                                  ('maxItems', max_items),
                                                  ('uniqueItems', unique)] if v is not None]
        schema = lambda s: dict([('items', s)] + schema_properties)

        super(Array, self).__init__(lambda: (schema(container.response), schema(container.request)),
                                    default=kwargs.pop('default', list), **kwargs)

    def formatter(self, value):
        return [self.container.format(v) for v in value]

    def converter(self, value):
        return [self.container.convert(v) for v in value]


List = Array


class Object(Raw):
    """
    A field for an object, containing either named properties matching some fields or properties all of a single
    type.

    :param properties: field class, instance, or dictionary of {property: field} pairs; if omitted, any value is
        accepted for any property.
    """

    def __init__(self, properties=None, **kwargs):
        self.properties = None
        self.additional_properties = None

        if isinstance(properties, dict):
            self.properties = {key: _field_from_object(self, field) for key, field in properties.items()}
        elif properties is not None:
            self.additional_properties = _field_from_object(self, properties)

        def schema():
            request = {"type": "object"}
            response = {"type": "object"}

            for schema, attr in ((request, "request"), (response, "response")):
                if self.properties:
                    schema["properties"] = {key: getattr(field, attr) for key, field in self.properties.items()}
                if self.additional_properties:
                    schema["additionalProperties"] = getattr(self.additional_properties, attr)

            return response, request

        super(Object, self).__init__(schema, default=kwargs.pop('default', dict), **kwargs)

    def formatter(self, value):
        if self.properties:
            return {key: self.properties[key].format(v) if key in self.properties else v for key, v in value.items()}
        if self.additional_properties:
            return {key: self.additional_properties.format(v) for key, v in value.items()}
        return dict(value)

    def converter(self, value):
        if self.properties:
            return {key: self.properties[key].convert(v) if key in self.properties else v for key, v in value.items()}
        if self.additional_properties:
            return {key: self.additional_properties.convert(v) for key, v in value.items()}
        return dict(value)


class String(Raw):
    """
    :param int min_length: minimum length of string
    :param int max_length: maximum length of string
    :param str pattern: regex pattern that the string must match
    :param list enum: list of strings with enumeration
    """

    def __init__(self, min_length=None, max_length=None, pattern=None, enum=None, format=None, **kwargs):
        schema = {"type": "string"}

        if enum is not None:
            enum = list(enum)

        for v, k in ((min_length, 'minLength'),
                     (max_length, 'maxLength'),
                     (pattern, 'pattern'),
                     (enum, 'enum'),
                     (format, 'format')):
            if v is not None:
                schema[k] = v

        super(String, self).__init__(schema, **kwargs)


class UUID(String):
    """
    A field for UUID strings in canonical form.
    """
    UUID_REGEX = "^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"

    def __init__(self, **kwargs):
        super(UUID, self).__init__(min_length=36, max_length=36, pattern=self.UUID_REGEX, **kwargs)


class Uri(String):
    def __init__(self, **kwargs):
        super(Uri, self).__init__(format="uri", **kwargs)


class Email(String):
    def __init__(self, **kwargs):
        super(Email, self).__init__(format="email", **kwargs)


class DateString(Raw):
    """
    A field for ISO8601-formatted date strings.
    """

    def __init__(self, **kwargs):
        super(DateString, self).__init__({"type": "string", "format": "date"}, **kwargs)

    def formatter(self, value):
        if isinstance(value, str):
            return value
        return value.strftime('%Y-%m-%d')

    def converter(self, value):
        return aniso8601.parse_date(value)


class DateTimeString(Raw):
    """
    A field for ISO8601-formatted date-time strings.
    """

    def __init__(self, **kwargs):
        super(DateTimeString, self).__init__({"type": "string", "format": "date-time"}, **kwargs)

    def formatter(self, value):
        if isinstance(value, str):
            return value
        if not isinstance(value, datetime.datetime):
            raise TypeError('{!r} is not a datetime'.format(value))
        return value.isoformat()

    def converter(self, value):
        return aniso8601.parse_datetime(value)


class Boolean(Raw):
    def __init__(self, **kwargs):
        super(Boolean, self).__init__({"type": "boolean"}, **kwargs)


class Integer(Raw):

    def __init__(self, minimum=None, maximum=None, default=None, **kwargs):
        schema = {"type": "integer"}

        if minimum is not None:
            schema['minimum'] = minimum
        if maximum is not None:
            schema['maximum'] = maximum

        super(Integer, self).__init__(schema, default=default, **kwargs)


class PositiveInteger(Integer):
    """
    A :class:`Integer` field that only accepts integers >=1.
    """

    def __init__(self, maximum=None, **kwargs):
        super(PositiveInteger, self).__init__(minimum=1, maximum=maximum, **kwargs)


class Number(Raw):
    def __init__(self,
                 minimum=None,
                 maximum=None,
                 exclusive_minimum=False,
                 exclusive_maximum=False,
                 **kwargs):

        schema = {"type": "number"}

        if minimum is not None:
            schema['minimum'] = minimum
            if exclusive_minimum:
                schema['exclusiveMinimum'] = True

        if maximum is not None:
            schema['maximum'] = maximum
            if exclusive_maximum:
                schema['exclusiveMaximum'] = True

        super(Number, self).__init__(schema, **kwargs)


class ToOne(Raw):
    """
    A reference to a single resource of another type.

    In a manifest the reference is either embedded as ``<name>`` (when the owner was fetched with a depth of 1 or
    more), or left as a ``<name>_url`` to fetch on demand. Writing it sets ``<name>_guid``.

    Resource references can be one of the following:

    - :class:`Resource` class
    - a string with a resource name
    - a string with a module name and class name of a resource
    - ``"self"`` --- which resolves to the resource this field is bound to

    :param resource: a resource reference
    :param int depth: embedding depth requested when the reference has to be fetched, default: 1
    """
    relationship = 'to_one'

    def __init__(self, resource, depth=1, **kwargs):
        self.target_reference = ResourceReference(resource)
        self.depth = depth
        super(ToOne, self).__init__({"type": "string"}, **kwargs)

    @cached_property
    def target(self):
        return self.target_reference.resolve(self.resource)

    @property
    def url_path(self):
        return self.entity_path + ('{}_url'.format(self.name),)

    @property
    def write_path(self):
        return self.entity_path + ('{}_guid'.format(self.name),)

    def _check_instance(self, value):
        if value is not None and not isinstance(value, self.target):
            raise TypeMismatch([ValidationError('{!r} is not a {}'.format(value, self.target.__name__),
                                                validator='type',
                                                validator_value=self.target.meta.name)],
                               root=self.name)

    def validate(self, value):
        self._check_instance(value)
        return self.format(value)

    def formatter(self, item):
        return item.guid


class ToMany(ToOne):
    """
    Like :class:`ToOne`, but for collections of references. Writing it sets ``<singular>_guids``.

    :param resource: a resource reference
    :param int depth: embedding depth requested when the collection has to be fetched; ``None`` leaves the depth
        to the target
    :param str singular: singular form of the relation name, default: the name without a trailing ``s``
    """
    relationship = 'to_many'

    def __init__(self, resource, depth=None, singular=None, **kwargs):
        self._singular = singular
        super(ToMany, self).__init__(resource, depth=depth, default=kwargs.pop('default', list), **kwargs)

    @property
    def singular(self):
        return self._singular or singularize(self.name)

    @property
    def write_path(self):
        return self.entity_path + ('{}_guids'.format(self.singular),)

    def validate(self, value):
        if not isinstance(value, (list, tuple)):
            raise TypeMismatch([ValidationError('{!r} is not a list'.format(value),
                                                validator='type',
                                                validator_value='array')],
                               root=self.name)
        for item in value:
            self._check_instance(item)
        return self.format(value)

    def format(self, value):
        if value is None:
            return []
        return [item.guid for item in value]
