"""
Signals sent by :class:`cf_potion.manager.Manager` around every request that changes remote state.

The sender is always the resource class, so receivers can subscribe to one type only:

.. code-block:: python

    @signals.before_update.connect_via(v2.App)
    def log_scaling(sender, item, changes):
        ...

=============================== ======================================
Signal                          Keyword arguments
=============================== ======================================
``before_create``               ``item``, ``payload``
``after_create``                ``item``
``before_update``               ``item``, ``changes`` (the payload)
``after_update``                ``item``, ``changes``
``before_delete``               ``item``
``after_delete``                ``item``
``before_add_to_relation``      ``item``, ``attribute``, ``child``
``after_add_to_relation``       ``item``, ``attribute``, ``child``
``before_remove_from_relation`` ``item``, ``attribute``, ``child``
``after_remove_from_relation``  ``item``, ``attribute``, ``child``
=============================== ======================================

An exception raised by a ``before_*`` receiver aborts the request.
"""
from blinker import Namespace

_lifecycle = Namespace()

before_create = _lifecycle.signal('before-create')
after_create = _lifecycle.signal('after-create')

before_update = _lifecycle.signal('before-update')
after_update = _lifecycle.signal('after-update')

before_delete = _lifecycle.signal('before-delete')
after_delete = _lifecycle.signal('after-delete')

before_add_to_relation = _lifecycle.signal('before-add-to-relation')
after_add_to_relation = _lifecycle.signal('after-add-to-relation')

before_remove_from_relation = _lifecycle.signal('before-remove-from-relation')
after_remove_from_relation = _lifecycle.signal('after-remove-from-relation')
