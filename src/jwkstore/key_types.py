"""
key_types.py — JWK member layout per key type (RFC 7518 §6)

Each ``kty`` is a variant with a fixed set of public and private members on
top of the members every JWK shares (``kid``, ``kty``, ``alg``, ``use``).
Redaction to a publishable JWK copies the shared public members plus the
variant's public members, and nothing else.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

# Shared members that are safe to publish (``alg`` is not among them).
COMMON_PUBLIC_MEMBERS: Tuple[str, ...] = ("kid", "kty", "use")


@dataclass(frozen=True)
class KeyType:
    kty: str
    public_members: Tuple[str, ...]
    private_members: Tuple[str, ...]


RSA = KeyType(
    kty="RSA",
    public_members=("n", "e"),
    private_members=("d", "p", "q", "dp", "dq", "qi", "oth"),
)
EC = KeyType(
    kty="EC",
    public_members=("crv", "x", "y"),
    private_members=("d",),
)
OKP = KeyType(
    kty="OKP",
    public_members=("crv", "x"),
    private_members=("d",),
)

KEY_TYPES: Dict[str, KeyType] = {kt.kty: kt for kt in (RSA, EC, OKP)}


def key_type_of(jwk: Mapping[str, Any]) -> Optional[KeyType]:
    """Return the variant for ``jwk["kty"]``, or None for unknown types."""
    return KEY_TYPES.get(jwk.get("kty"))


def public_members(jwk: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Return the publishable subset of a JWK.

    Members absent from ``jwk`` are omitted rather than emitted as null.
    Keys of an unknown ``kty`` keep only the shared public members.
    """
    kt = key_type_of(jwk)
    names = COMMON_PUBLIC_MEMBERS + (kt.public_members if kt else ())
    return {name: jwk[name] for name in names if name in jwk}
