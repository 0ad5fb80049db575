import logging

from . import resolvers
from .exceptions import ImmutableAttribute, MissingAttribute, NotFound, StaleReference
from .fields import ToMany, ToOne
from .manager import EntityManager
from .schema import FieldSet
from .utils import AttributeDict, _missing, find_path, pop_path, put_path, to_snake_case

log = logging.getLogger(__name__)


class ResourceMeta(type):

    def __new__(mcs, name, bases, members):
        class_ = super(ResourceMeta, mcs).__new__(mcs, name, bases, members)
        class_.meta = meta = AttributeDict(getattr(class_, 'meta', {}) or {})

        for base in bases:
            if hasattr(base, 'Meta'):
                meta.update(base.Meta.__dict__)

        changes = {}
        if 'Meta' in members:
            changes = members['Meta'].__dict__
            for k, v in changes.items():
                if not k.startswith('__'):
                    meta[k] = v

        if not changes.get('name', None):
            meta['name'] = to_snake_case(name)
        if not changes.get('plural', None):
            meta['plural'] = meta['name'] + 's'

        schema = {}
        for base in reversed(class_.__mro__[1:]):
            if 'Schema' in base.__dict__:
                schema.update(base.__dict__['Schema'].__dict__)

        if 'Schema' in members:
            schema.update(members['Schema'].__dict__)

        class_.schema = fs = FieldSet(required_fields=meta.get('required_fields', None)).bind(class_)

        for key, field in schema.items():
            if key.startswith('__'):
                continue
            if hasattr(class_, key) and not (key == 'guid' and field.identity):
                raise RuntimeError('Field "{}" of {} collides with a member of Resource'.format(key, name))
            if field.relationship is None:
                fs.define_attribute(key, field)
            else:
                fs.define_relationship(key, field)

        for key in meta.get('read_only_fields', None) or ():
            if key in fs.fields:
                fs.fields[key].io = "r"

        for key in meta.get('write_only_fields', None) or ():
            if key in fs.fields:
                fs.fields[key].io = "w"

        id_attribute = meta.get('id_attribute', None)
        if id_attribute:
            if id_attribute not in fs.fields:
                raise RuntimeError('id_attribute "{}" is not a field of {}'.format(id_attribute, name))
            field = fs.fields[id_attribute]
            field.identity = True
            fs.set(id_attribute, field)

        if meta.get('manager', None) is not None:
            meta.manager(class_)

        return class_


class Resource(object, metaclass=ResourceMeta):
    """
    A proxy for one remote object of some resource type.

    A resource type is configured using the `Schema` and `Meta` attributes. Fields in `Schema` become attributes and
    relationships that can be read and written on instances, either through :meth:`get` and :meth:`set` or as
    regular Python attributes.

    An instance is in one of four states:

    - *draft* --- no guid and no manifest; everything is local until :meth:`create`
    - *hydrating* --- a guid but no manifest; the manifest is fetched on first use
    - *hydrated* --- a guid and a manifest
    - *deleted* --- after :meth:`delete`; reads fail but the local values are kept, so it may be created again

    :class:`Meta` class attributes:

    =====================  ==============================  ==============================================================
    Attribute name         Default                         Description
    =====================  ==============================  ==============================================================
    name                   ---                             Singular name; defaults to the snake case of the class name
    plural                 ---                             Plural name used in paths; defaults to ``name + 's'``
    manager                :class:`EntityManager`          :class:`Manager` class with the lifecycle operations
    id_attribute           ``None``                        Name of the attribute that mirrors the guid
    manifest_depth         ``None``                        Embedding depth for hydration; defaults to the client's
                                                           ``POTION_MANIFEST_DEPTH``
    required_fields        ``()``                          Attributes that must be present when read or created
    read_only_fields       ``()``                          Attributes that can be read but never written
    write_only_fields      ``()``                          Attributes that can be written but are never read back
    =====================  ==============================  ==============================================================

    Usage example:

    .. code-block:: python

        class App(Resource):
            class Schema:
                name = fields.String()
                memory = fields.PositiveInteger(default=256)
                space = fields.ToOne('space')
                routes = fields.ToMany('route')

    .. attribute:: api

        Back reference to the :class:`Api` this resource is registered on.

    .. attribute:: meta

        A :class:`AttributeDict` of configuration attributes collected from the :class:`Meta` attributes of the base
        classes.

    .. attribute:: schema

        A :class:`FieldSet` containing fields collected from the :class:`Schema` attributes of the base classes.

    .. attribute:: manager

        The :class:`Manager` instance of this resource type.

    .. attribute:: route_prefix

        The collection path of this resource; includes the API prefix.

    :param str guid: server identity, if known
    :param client: the :class:`Client` this instance talks through
    :param dict manifest: a manifest already read from the target
    """
    api = None
    meta = None
    schema = None
    manager = None
    route_prefix = None

    class Meta:
        name = None
        plural = None
        manager = EntityManager
        id_attribute = None
        manifest_depth = None
        required_fields = None
        read_only_fields = ()
        write_only_fields = ()

    def __init__(self, guid=None, client=None, manifest=None):
        self._guid = guid
        self._client = client
        self._manifest = manifest
        self._cache = {}
        self._changes = {}
        self._deleted = False

    @classmethod
    def define_attribute(cls, name, field):
        """
        Register an attribute after the class was created.

        :param str name:
        :param fields.Raw field: field instance, or a field class instantiated without arguments
        """
        if isinstance(field, type):
            field = field()
        if hasattr(cls, name):
            raise RuntimeError('Field "{}" of {} collides with a member of Resource'.format(name, cls.__name__))
        return cls.schema.define_attribute(name, field)

    @classmethod
    def define_relationship(cls, name, kind, resource, **kwargs):
        """
        Register a relationship after the class was created.

        :param str name:
        :param str kind: ``"to_one"`` or ``"to_many"``
        :param resource: a resource reference
        """
        try:
            field_class = {'to_one': ToOne, 'to_many': ToMany}[kind]
        except KeyError:
            raise RuntimeError('Unknown relationship kind "{}"'.format(kind))
        if hasattr(cls, name):
            raise RuntimeError('Field "{}" of {} collides with a member of Resource'.format(name, cls.__name__))
        return cls.schema.define_relationship(name, field_class(resource, **kwargs))

    @property
    def guid(self):
        return self._guid

    @property
    def client(self):
        return self._client

    @property
    def deleted(self):
        return self._deleted

    @property
    def cache(self):
        return self._cache

    @property
    def local_manifest(self):
        """
        The manifest as currently known, without hydrating; ``None`` if there is none yet.
        """
        return self._manifest

    @property
    def manifest(self):
        """
        The manifest of this instance, fetched from the target on first use.

        :raises StaleReference: if the instance was deleted
        """
        if self._deleted:
            raise StaleReference(self, 'read')
        if self._manifest is None:
            if self._guid is None:
                self._manifest = {}
            else:
                self._manifest = self._read()
        return self._manifest

    def _read(self):
        if self._client is None:
            raise RuntimeError('{!r} is not bound to a client'.format(self))
        return self.manager.read(self)

    @property
    def changes(self):
        """
        A dictionary of ``{name: (old_value, new_value)}`` pairs for all attributes and relationships written since
        the manifest was read. ``old_value`` is ``None`` if the target had no value.
        """
        return {key: (None if old is _missing else old, new) for key, (old, new) in self._changes.items()}

    @property
    def changed(self):
        return bool(self._changes)

    def _field(self, name):
        try:
            return self.schema.fields[name]
        except KeyError:
            raise AttributeError('{} has no attribute or relationship "{}"'.format(type(self).__name__, name))

    def get(self, name):
        """
        Read an attribute or relationship.

        :raises MissingAttribute: if a required attribute is absent and has no default
        :raises StaleReference: if the instance was deleted
        """
        field = self._field(name)

        if field.relationship == 'to_one':
            return self.to_one(name)
        if field.relationship == 'to_many':
            return self.to_many(name)

        if self._deleted:
            raise StaleReference(self, 'read "{}" of'.format(name))

        if name in self._cache:
            return self._cache[name]

        if field.identity and self._guid is not None:
            return self._guid

        if field.write_only:
            raise MissingAttribute(self, name)

        found, value = find_path(self.manifest, field.read_path)
        if found:
            value = field.convert(value)
        elif field.has_default:
            value = field.default
        elif self.schema.is_required(name):
            raise MissingAttribute(self, name)
        else:
            value = None

        self._cache[name] = value
        return value

    def _writable_manifest(self):
        if self._manifest is None:
            if self._guid is None:
                self._manifest = {}
            else:
                try:
                    self._manifest = self._read()
                except NotFound:
                    log.debug('%r is not known to the target yet; writing to an empty manifest', self)
                    self._manifest = {}
        return self._manifest

    def set(self, name, value):
        """
        Write an attribute or relationship locally; the change is submitted by :meth:`update` or :meth:`create`.

        :raises ImmutableAttribute: if the field is read-only
        :raises TypeMismatch: if the value does not validate
        :raises StaleReference: if the instance was deleted
        """
        field = self._field(name)

        if self._deleted:
            raise StaleReference(self, 'write "{}" of'.format(name))
        if field.read_only:
            raise ImmutableAttribute(self, name)

        if field.has_default and value == field.default:
            json_value = field.format(value)
        else:
            json_value = field.validate(value)

        manifest = self._writable_manifest()

        if name in self._changes:
            old = self._changes[name][0]
        else:
            if field.relationship is None:
                found, old = self.manager.attribute_value(self, field)
            else:
                found, old = self.manager.reference_value(self, field)
            if not found:
                old = _missing

        if field.identity:
            self._guid = value

        put_path(manifest, field.write_path, json_value)
        if field.relationship is not None:
            pop_path(manifest, field.read_path)
        self._cache[name] = value

        if old is not _missing and old == json_value:
            self._changes.pop(name, None)
        else:
            self._changes[name] = (old, json_value)

    def to_one(self, name, depth=None):
        return resolvers.resolve_to_one(self, self._field(name), depth)

    def to_many(self, name, depth=None, where=None):
        return resolvers.resolve_to_many(self, self._field(name), depth, where)

    def relation_url(self, name):
        """
        :return: the url the target gave for a relationship, or ``None``
        """
        field = self._field(name)
        if field.relationship is None:
            raise AttributeError('"{}" of {} is not a relationship'.format(name, type(self).__name__))
        found, url = find_path(self.manifest, field.url_path)
        return url if found else None

    def add_relation(self, name, target):
        resolvers.add_relation(self, self._field(name), target)

    def remove_relation(self, name, target):
        resolvers.remove_relation(self, self._field(name), target)

    def create(self):
        """
        Submit the complete local state as a new remote object and adopt the manifest returned by the target.
        """
        return self.manager.create(self)

    def update(self, changes=None):
        """
        Submit local changes.

        :param dict changes: extra values to submit, keyed by their location in the entity
        """
        if self._guid is None:
            raise StaleReference(self, 'update')
        return self.manager.update(self, changes)

    def delete(self):
        if self._guid is None:
            raise StaleReference(self, 'delete')
        self.manager.delete(self)

    def exists(self):
        """
        Invalidates the local state and checks whether the target still knows this instance.
        """
        if self._guid is None:
            raise StaleReference(self, 'look up')
        self.invalidate()
        try:
            self.manifest
        except NotFound:
            return False
        return True

    def invalidate(self):
        """
        Drop the manifest, cached values and pending changes; the next read fetches a fresh manifest.
        """
        self._manifest = None
        self._cache = {}
        self._changes = {}

    def adopt(self, manifest):
        self._manifest = manifest
        guid = self.manager.identity_of(manifest)
        if guid is not None:
            self._guid = guid
        self._deleted = False
        self._cache = {}
        self._changes = {}

    def forget(self):
        self._guid = None
        self._deleted = True
        self._cache = {}
        self._changes = {}
        if self._manifest is not None:
            self.manager.forget_identity(self._manifest)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)

        fields = type(self).schema.fields
        if name in fields:
            return self.get(name)
        if name.endswith('_url') and name[:-4] in fields and fields[name[:-4]].relationship is not None:
            return self.relation_url(name[:-4])

        raise AttributeError("'{}' object has no attribute '{}'".format(type(self).__name__, name))

    def __setattr__(self, name, value):
        if not name.startswith('_') and name in type(self).schema.fields:
            self.set(name, value)
        else:
            super(Resource, self).__setattr__(name, value)

    def __eq__(self, other):
        if not isinstance(other, Resource):
            return NotImplemented
        if self._guid is None or other.guid is None:
            return self is other
        return self.api is other.api and self.meta.name == other.meta.name and self._guid == other.guid

    def __hash__(self):
        if self._guid is None:
            return id(self)
        return hash((self.meta.name, self._guid))

    def __repr__(self):
        if self._guid is None:
            return '<{}>'.format(type(self).__name__)
        return "<{} '{}'>".format(type(self).__name__, self._guid)
