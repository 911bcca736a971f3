"""
rotator.py — Round-robin key container

Keys are held in an ``OrderedDict`` keyed by ``kid``. Order is the rotation
order: the head is served next, and every served or (re)inserted key moves
to the tail. With N keys, N consecutive unkeyed ``next()`` calls visit each
key exactly once.

Not thread-safe. Callers sharing one instance across threads must serialize
access themselves.
"""

from __future__ import annotations
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from .key_types import public_members

JWK = Dict[str, Any]


class KeyRotator:
    """Ordered, kid-indexed key collection with round-robin retrieval."""

    def __init__(self) -> None:
        self._keys: "OrderedDict[str, JWK]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, kid: object) -> bool:
        return kid in self._keys

    def add(self, key: JWK) -> Optional[JWK]:
        """
        Insert ``key`` at the tail, replacing any key with the same ``kid``.

        Returns the replaced key, or None if the kid was new.
        """
        kid = key["kid"]
        replaced = self._keys.pop(kid, None)
        self._keys[kid] = key
        return replaced

    def next(self, kid: Optional[str] = None) -> Optional[JWK]:
        """
        Return the next key and move it to the tail.

        Without ``kid`` the head key is served. With ``kid`` only the key
        bearing that identifier is considered. Returns None if the store is
        empty or no key matches.
        """
        if not self._keys:
            return None

        if kid is None:
            kid = next(iter(self._keys))
        elif kid not in self._keys:
            return None

        self._keys.move_to_end(kid)
        return self._keys[kid]

    def to_json(self, include_private_fields: bool) -> Dict[str, List[JWK]]:
        """Return a JWK Set of the stored keys without touching rotation order."""
        if include_private_fields:
            keys = [dict(key) for key in self._keys.values()]
        else:
            keys = [public_members(key) for key in self._keys.values()]
        return {"keys": keys}
