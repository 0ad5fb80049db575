import re

_missing = object()


def to_path(value):
    """
    Normalize an attribute location to a tuple of keys.

    >>> to_path('staging.model')
    ('staging', 'model')
    >>> to_path(('meta', 'created'))
    ('meta', 'created')
    """
    if isinstance(value, (tuple, list)):
        return tuple(value)
    return tuple(value.split('.'))


def find_path(obj, path):
    """
    Walk ``path`` through nested dictionaries.

    :return: a ``(found, value)`` tuple; ``found`` is ``False`` as soon as a segment is missing.
    """
    for key in path:
        if not isinstance(obj, dict) or key not in obj:
            return False, None
        obj = obj[key]
    return True, obj


def put_path(obj, path, value):
    """
    Write ``value`` at ``path``, creating intermediate objects as needed.
    """
    *parents, last = path
    for key in parents:
        child = obj.get(key)
        if not isinstance(child, dict):
            obj[key] = child = {}
        obj = child
    obj[last] = value
    return obj


def pop_path(obj, path):
    found, parent = find_path(obj, path[:-1])
    if found and isinstance(parent, dict):
        return parent.pop(path[-1], None)
    return None


def to_snake_case(s):
    return re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', s).lower()


def singularize(s):
    return s[:-1] if s.endswith('s') else s


class AttributeDict(dict):
    __getattr__ = dict.__getitem__
    __setattr__ = dict.__setitem__
