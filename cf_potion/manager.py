import logging
from urllib.parse import quote

from . import signals
from .exceptions import MissingAttribute
from .utils import find_path, put_path

log = logging.getLogger(__name__)


class Manager(object):
    """
    A :class:`Manager` holds the lifecycle operations of one resource type: the shape of its manifests, how they are
    read from the target, and how local state is written back.

    Managers are instantiated once per resource class, from ``Meta.manager``.

    :param cf_potion.resource.Resource resource: resource class
    """
    entity_path = ()

    def __init__(self, resource):
        self.resource = resource
        resource.manager = self

    @property
    def collection_path(self):
        return self.resource.route_prefix

    def item_path(self, guid):
        return '{}/{}'.format(self.collection_path, quote(str(guid), safe=''))

    def relation_path(self, item, field, target=None):
        path = '{}/{}'.format(self.item_path(item.guid), field.name)
        if target is not None:
            path = '{}/{}'.format(path, quote(str(target.guid), safe=''))
        return path

    def identity_of(self, manifest):
        """
        :return: the guid contained in a manifest, or ``None``
        """
        raise NotImplementedError()

    def forget_identity(self, manifest):
        """
        Strip the server identity from a manifest of a deleted item. Noop by default.
        """
        pass

    def make(self, client, manifest):
        """
        Build a hydrated item from a manifest returned by the target.
        """
        return self.resource(self.identity_of(manifest), client, manifest)

    def manifest_depth(self, client):
        return None

    def read(self, item, depth=None):
        """
        :param int depth: embedding depth, default: :meth:`manifest_depth`
        :return: a fresh manifest for ``item``
        :raises cf_potion.exceptions.NotFound: if the target does not know the item
        """
        if depth is None:
            depth = self.manifest_depth(item.client)
        log.debug('Fetching %r (depth=%s)', item, depth)
        return item.client.transport.fetch(self.item_path(item.guid), depth)

    def instances(self, client, depth=None, where=None):
        """
        :param client:
        :param int depth: embedding depth of the listed items
        :param dict where: equality filters
        :return: list of items
        """
        response = client.transport.list(self.collection_path, depth, where)
        return [self.make(client, manifest) for manifest in response['resources']]

    def attribute_value(self, item, field):
        """
        :return: a ``(found, value)`` tuple with the manifest value of an attribute of ``item``
        """
        manifest = item.local_manifest
        for path in (field.write_path, field.read_path):
            found, value = find_path(manifest, path)
            if found:
                return True, value
        if field.name in item.cache:
            return True, field.format(item.cache[field.name])
        return False, None

    def reference_value(self, item, field):
        """
        :return: a ``(found, guid_or_guids)`` tuple for a relationship of ``item``
        """
        manifest = item.local_manifest

        found, value = find_path(manifest, field.write_path)
        if found:
            return True, value

        found, embedded = find_path(manifest, field.read_path)
        if not found:
            return False, None

        target_manager = field.target.manager
        if field.relationship == 'to_one':
            return True, target_manager.identity_of(embedded) if isinstance(embedded, dict) else None
        return True, [target_manager.identity_of(e) if isinstance(e, dict) else e for e in embedded]

    def write_view(self, item, create=False):
        """
        :return: the payload representing all writable state of ``item``
        """
        raise NotImplementedError()

    def update_payload(self, item, changes=None):
        """
        :return: the payload submitted by :meth:`update`, or an empty dictionary if there is nothing to submit
        """
        raise NotImplementedError()

    def create(self, item):
        payload = self.write_view(item, create=True)

        signals.before_create.send(self.resource, item=item, payload=payload)

        manifest = item.client.transport.create(self.collection_path, payload)
        if not manifest or self.identity_of(manifest) is None:
            manifest = item.local_manifest
        item.adopt(manifest)

        log.debug('Created %r', item)
        signals.after_create.send(self.resource, item=item)
        return item

    def update(self, item, changes=None):
        payload = self.update_payload(item, changes)

        if not payload:
            log.debug('No changes to submit for %r', item)
            return item

        signals.before_update.send(self.resource, item=item, changes=payload)

        item.client.transport.update(self.item_path(item.guid), payload)
        item.invalidate()

        signals.after_update.send(self.resource, item=item, changes=payload)
        return item

    def delete(self, item):
        signals.before_delete.send(self.resource, item=item)

        item.client.transport.delete(self.item_path(item.guid))
        item.forget()

        log.debug('Deleted %r', item)
        signals.after_delete.send(self.resource, item=item)

    def relation_add(self, item, field, target):
        signals.before_add_to_relation.send(self.resource, item=item, attribute=field.name, child=target)
        item.client.transport.link(self.relation_path(item, field, target))
        signals.after_add_to_relation.send(self.resource, item=item, attribute=field.name, child=target)

    def relation_remove(self, item, field, target):
        signals.before_remove_from_relation.send(self.resource, item=item, attribute=field.name, child=target)
        item.client.transport.unlink(self.relation_path(item, field, target))
        signals.after_remove_from_relation.send(self.resource, item=item, attribute=field.name, child=target)


class EntityManager(Manager):
    """
    Manager for resources wrapped in a ``{"metadata": {"guid": ...}, "entity": {...}}`` envelope.

    Updates submit only the attributes changed since the manifest was read.
    """
    entity_path = ('entity',)
    identity_path = ('metadata', 'guid')

    def identity_of(self, manifest):
        found, guid = find_path(manifest, self.identity_path)
        return guid if found else None

    def forget_identity(self, manifest):
        manifest.pop('metadata', None)

    def manifest_depth(self, client):
        depth = self.resource.meta.get('manifest_depth')
        if depth is None:
            depth = client.config['POTION_MANIFEST_DEPTH']
        return depth

    def _relative(self, path):
        return path[len(self.entity_path):]

    def write_view(self, item, create=False):
        fields = self.resource.schema.fields
        declared = set()
        for field in fields.values():
            for path in (field.read_path, field.write_path):
                relative = self._relative(path)
                if path[:len(self.entity_path)] == self.entity_path and relative:
                    declared.add(relative[0])

        # keys the target sent that no field describes are passed on as-is
        found, entity = find_path(item.local_manifest, self.entity_path)
        payload = {key: value for key, value in (entity if found and isinstance(entity, dict) else {}).items()
                   if key not in declared and not key.endswith('_url')}

        for key, field in fields.items():
            if field.relationship is not None:
                found, value = self.reference_value(item, field)
            elif ('c' if create else 'u') not in field.io:
                continue
            else:
                found, value = self.attribute_value(item, field)
                if not found and field.has_default:
                    found, value = True, field.format(field.default)

            if found:
                put_path(payload, self._relative(field.write_path), value)
            elif self.resource.schema.is_required(key):
                raise MissingAttribute(item, key)

        return payload

    def update_payload(self, item, changes=None):
        payload = {}
        fields = self.resource.schema.fields

        for key, (old, new) in item.changes.items():
            put_path(payload, self._relative(fields[key].write_path), new)

        payload.update(changes or {})
        return payload


class FlatManager(Manager):
    """
    Manager for resources represented as a flat attribute map, identified by one of their own attributes
    (``Meta.id_attribute`` or a field with ``identity=True``).

    Updates submit the complete write view.
    """

    def identity_of(self, manifest):
        field = self.resource.schema.identity_field
        if field is None:
            return None
        found, value = find_path(manifest, field.read_path)
        return value if found else None

    def write_view(self, item, create=False):
        payload = {}
        identity = self.resource.schema.identity_field

        if identity is not None and item.guid is not None:
            put_path(payload, identity.write_path, identity.format(item.guid))

        for key, field in self.resource.schema.attributes.items():
            if ('c' if create else 'u') not in field.io:
                continue

            found, value = self.attribute_value(item, field)
            if found:
                put_path(payload, field.write_path, value)
            elif create and self.resource.schema.is_required(key) and not field.has_default:
                raise MissingAttribute(item, key)

        return payload

    def update_payload(self, item, changes=None):
        # hydrate first: the write view must describe every attribute, not only the local ones
        item.manifest
        payload = self.write_view(item)
        payload.update(changes or {})
        return payload
