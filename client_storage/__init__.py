"""
Per-user key-value store shared by a user's open clients.

Usage:
    from client_storage.services import client_store

    client_store.set(user.pk, 'theme', 'dark')
    client_store.get(user.pk, 'theme')      # 'dark'
    client_store.remove(user.pk, 'theme')

Every set/remove is broadcast as ``storage_sync`` to the user's other
WebSocket connections on ``ws/storage/``.
"""
