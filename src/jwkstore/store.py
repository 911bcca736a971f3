"""
store.py — Rotating JWK store

``KeyStore`` is the public entry point: it generates keys through
``jwkstore.jwk``, ingests externally supplied JWKs or PEM files, normalizes
``kid``/``alg`` and hands keys to a ``KeyRotator`` for round-robin serving.

Example:
    store = KeyStore()
    store.generate("RS256", kid="signing-1")
    store.generate("EdDSA", crv="Ed448")

    key = store.get()            # next key in rotation
    jwks = store.to_json()       # publishable JWK Set, no private members
"""

from __future__ import annotations
import logging
import secrets
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import DEFAULT_CONFIG, StoreConfig
from .errors import (
    MissingAlgorithmError,
    UnsupportedAlgorithmError,
    UnsupportedKeyTypeError,
)
from .jwk import (
    ALGORITHM_KEY_TYPES,
    EC_ALGORITHMS,
    export_private_key_as_jwk,
    generate_key_pair,
    load_pem_private_key_as_jwk,
)
from .rotator import JWK, KeyRotator

logger = logging.getLogger(__name__)


def generate_random_kid(num_bytes: int = DEFAULT_CONFIG.kid_bytes) -> str:
    """Return a random hex key identifier drawn from the OS CSPRNG."""
    return secrets.token_hex(num_bytes)


class KeyStore:
    """Key store serving its keys in a round-robin fashion."""

    def __init__(self, config: Optional[StoreConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._rotator = KeyRotator()

    def __len__(self) -> int:
        return len(self._rotator)

    def __contains__(self, kid: object) -> bool:
        return kid in self._rotator

    def generate(
        self,
        alg: str,
        kid: Optional[str] = None,
        crv: Optional[str] = None,
    ) -> JWK:
        """Generate a new random key and add it to this store.

        Args:
            alg: JWS algorithm, e.g. ``RS256``, ``ES384`` or ``EdDSA``.
            kid: Key identifier to use. A random one is assigned if omitted.
            crv: Curve for ``EdDSA`` (``Ed25519`` or ``Ed448``). Ignored for
                other algorithms.

        Returns:
            JWK: The stored key, private members included.

        Raises:
            UnsupportedAlgorithmError: If ``alg`` is not supported.
            UnsupportedCurveError: If ``crv`` is not a supported EdDSA curve.
        """
        if crv is not None and alg != "EdDSA":
            logger.debug("Ignoring crv=%s for alg=%s", crv, alg)

        private_key = generate_key_pair(alg, crv=crv, config=self.config)
        jwk = export_private_key_as_jwk(private_key)
        self._normalize(jwk, alg=alg, kid=kid)

        if jwk["kid"] in self._rotator:
            logger.warning("Generated key replaces existing key kid=%s", jwk["kid"])
        self._insert(jwk)
        return jwk

    def add(self, jwk: Mapping[str, Any]) -> JWK:
        """Add a serialized JWK to this store.

        The mapping is shallow-copied; the caller's object is never modified.
        The key material itself is not validated, only ``alg`` is required.
        ``kid`` is expected to be a string; its type is not checked either.

        Args:
            jwk: JWK members, typically parsed from a JSON file.

        Returns:
            JWK: The normalized copy held by the store.

        Raises:
            MissingAlgorithmError: If the key has no ``alg`` member.
            TypeError: If ``kid`` is unhashable (e.g. a JSON array). The
                store is left unchanged.
        """
        jwk_use = dict(jwk)
        self._normalize(jwk_use)
        self._insert(jwk_use)
        return jwk_use

    def add_pem(
        self,
        pem: Union[str, bytes],
        alg: str,
        kid: Optional[str] = None,
        password: Optional[bytes] = None,
    ) -> JWK:
        """Add a PEM-encoded private key to this store.

        Args:
            pem: PEM text (PKCS#1, PKCS#8 or SEC1).
            alg: JWS algorithm the key will be used with.
            kid: Key identifier to use. A random one is assigned if omitted.
            password: Passphrase for encrypted PEM files.

        Returns:
            JWK: The stored key, private members included.

        Raises:
            UnsupportedAlgorithmError: If ``alg`` is not supported.
            UnsupportedKeyTypeError: If the key does not fit ``alg``.
            InvalidKeyMaterialError: If the PEM cannot be loaded.
        """
        expected_kty = ALGORITHM_KEY_TYPES.get(alg)
        if expected_kty is None:
            raise UnsupportedAlgorithmError(f"alg={alg!r}")

        jwk = load_pem_private_key_as_jwk(pem, password=password)
        if jwk["kty"] != expected_kty:
            raise UnsupportedKeyTypeError(f"{jwk['kty']} key cannot be used with alg={alg}")
        if alg in EC_ALGORITHMS and jwk["crv"] != EC_ALGORITHMS[alg][0]:
            raise UnsupportedKeyTypeError(f"curve {jwk['crv']} cannot be used with alg={alg}")

        self._normalize(jwk, alg=alg, kid=kid)
        self._insert(jwk)
        return jwk

    def get(self, kid: Optional[str] = None) -> Optional[JWK]:
        """Get a key from the store in a round-robin fashion.

        If ``kid`` is given, only the key bearing that identifier is
        considered. The returned key moves to the back of the rotation.

        Returns:
            Optional[JWK]: The key, or None if the store is empty or no key
            matches ``kid``.
        """
        return self._rotator.next(kid)

    def to_json(self, include_private_fields: bool = False) -> Dict[str, List[JWK]]:
        """Return a JWK Set (RFC 7517 §5) describing the stored keys.

        Args:
            include_private_fields: Include private key members when True.
                Defaults to False, which is safe to publish on a JWKS
                endpoint.
        """
        return self._rotator.to_json(include_private_fields)

    def _normalize(
        self,
        jwk: JWK,
        alg: Optional[str] = None,
        kid: Optional[str] = None,
    ) -> None:
        if not jwk.get("alg"):
            if alg is None:
                raise MissingAlgorithmError(f"kid={jwk['kid']}" if jwk.get("kid") else None)
            jwk["alg"] = alg

        if not jwk.get("kid"):
            jwk["kid"] = kid or generate_random_kid(self.config.kid_bytes)

    def _insert(self, jwk: JWK) -> None:
        replaced = self._rotator.add(jwk)
        if replaced is not None:
            logger.debug("Replaced key kid=%s (kty %s -> %s)", jwk["kid"], replaced.get("kty"), jwk.get("kty"))
        else:
            logger.debug("Added key kid=%s alg=%s", jwk["kid"], jwk["alg"])
