"""
Navigation of relationships: embedded manifests are used when present, otherwise the related resources are fetched
from the target.
"""
import logging

from .exceptions import StaleReference
from .utils import find_path, pop_path, to_path

log = logging.getLogger(__name__)


def _make(item, field, manifest):
    return field.target.manager.make(item.client, manifest)


def resolve_to_one(item, field, depth=None):
    """
    :param item: owner instance
    :param fields.ToOne field:
    :param int depth: embedding depth for the fetched target; an explicit depth bypasses the cache
    :return: the target instance, or ``None`` if the relationship is not set
    """
    if depth is None and field.name in item.cache:
        return item.cache[field.name]

    manifest = item.manifest
    found, embedded = find_path(manifest, field.read_path)

    if found and (embedded is None or isinstance(embedded, dict)):
        target = None if embedded is None else _make(item, field, embedded)
    else:
        found, url = find_path(manifest, field.url_path)
        if not found or url is None:
            target = None
        else:
            log.debug('Resolving %s of %r from %s', field.name, item, url)
            target = _make(item, field, item.client.transport.fetch(url, field.depth if depth is None else depth))

    if depth is None:
        item.cache[field.name] = target
    return target


def filter_embedded(field, manifests, where):
    """
    Apply equality filters to embedded manifests of the target type of ``field``.

    Filter keys are attribute names of the target type; unknown keys are looked up in the target entity as-is.
    """
    target = field.target

    def _path(key):
        if key in target.schema.fields:
            return target.schema.fields[key].read_path
        return target.manager.entity_path + to_path(key)

    paths = [(_path(key), value) for key, value in where.items()]

    def matches(manifest):
        for path, value in paths:
            found, actual = find_path(manifest, path)
            if not found or actual != value:
                return False
        return True

    return [manifest for manifest in manifests if matches(manifest)]


def resolve_to_many(item, field, depth=None, where=None):
    """
    Resolving a collection never hydrates the owner: the embedded collection is only used if the owner already has
    a manifest that contains it.

    :param item: owner instance
    :param fields.ToMany field:
    :param int depth: embedding depth of the fetched targets; an explicit depth always fetches
    :param dict where: equality filters
    :return: list of target instances
    """
    if item.deleted:
        raise StaleReference(item, 'list "{}" of'.format(field.name))

    if depth is None and not where and field.name in item.cache:
        return item.cache[field.name]

    if depth is None:
        found, embedded = find_path(item.local_manifest, field.read_path)
        if found and isinstance(embedded, list):
            if where:
                embedded = filter_embedded(field, embedded, where)
            targets = [_make(item, field, manifest) for manifest in embedded]
            if not where:
                item.cache[field.name] = targets
            return targets

    if item.guid is None:
        return []

    path = item.manager.relation_path(item, field)
    response = item.client.transport.list(path, field.depth if depth is None else depth, where)
    targets = [_make(item, field, manifest) for manifest in response['resources']]

    if depth is None and not where:
        item.cache[field.name] = targets
    return targets


def _forget_relation(item, field):
    item.cache.pop(field.name, None)
    if item.local_manifest:
        pop_path(item.local_manifest, field.read_path)


def _check_link(item, field, target, operation):
    if field.relationship != 'to_many':
        raise ValueError('"{}" of {} is not a to-many relationship'.format(field.name, item))
    if item.guid is None:
        raise StaleReference(item, operation)
    if target.guid is None:
        raise StaleReference(target, operation)
    field.validate([target])


def add_relation(item, field, target):
    """
    Link ``target`` into the to-many relationship ``field`` of ``item`` and drop the locally known collection.
    """
    _check_link(item, field, target, 'link')
    item.manager.relation_add(item, field, target)
    _forget_relation(item, field)


def remove_relation(item, field, target):
    """
    Unlink ``target`` from the to-many relationship ``field`` of ``item`` and drop the locally known collection.
    """
    _check_link(item, field, target, 'unlink')
    item.manager.relation_remove(item, field, target)
    _forget_relation(item, field)
