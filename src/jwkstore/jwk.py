"""
jwk.py — Key pair generation and JWK export

Wraps the ``cryptography`` primitives the store needs:
  - private key generation for every supported JWS algorithm (RFC 7518 §3)
  - private key -> JWK conversion with all private members populated
  - PEM private key loading

Member encoding (unpadded base64url, fixed-width EC members) is done by
jwcrypto.

Dependencies:
  - cryptography >= 41.0 (pip install cryptography)
  - jwcrypto >= 1.5 (pip install jwcrypto)
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key
from jwcrypto.jwk import JWK

from .config import DEFAULT_CONFIG, StoreConfig
from .errors import (
    InvalidKeyMaterialError,
    UnsupportedAlgorithmError,
    UnsupportedCurveError,
    UnsupportedKeyTypeError,
)

PrivateKey = Union[
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
]

RSA_ALGORITHMS = ("RS256", "RS384", "RS512", "PS256", "PS384", "PS512")

# alg -> (JWK crv, cryptography curve class)
EC_ALGORITHMS = {
    "ES256": ("P-256", ec.SECP256R1),
    "ES384": ("P-384", ec.SECP384R1),
    "ES512": ("P-521", ec.SECP521R1),
}

EDDSA_CURVES = ("Ed25519", "Ed448")
DEFAULT_EDDSA_CURVE = "Ed25519"

SUPPORTED_ALGORITHMS = RSA_ALGORITHMS + tuple(EC_ALGORITHMS) + ("EdDSA",)

# alg -> kty
ALGORITHM_KEY_TYPES: Dict[str, str] = {
    **{alg: "RSA" for alg in RSA_ALGORITHMS},
    **{alg: "EC" for alg in EC_ALGORITHMS},
    "EdDSA": "OKP",
}

_CURVE_NAMES = {curve_cls.name: crv for crv, curve_cls in EC_ALGORITHMS.values()}

_EXPORTABLE_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
)


# ---------------------------------------------------------------------------
# Key pair generation
# ---------------------------------------------------------------------------

def generate_key_pair(
    alg: str,
    crv: Optional[str] = None,
    config: Optional[StoreConfig] = None,
) -> PrivateKey:
    """
    Generate a fresh private key for a JWS algorithm.

    ``crv`` only selects the curve for ``EdDSA`` (default Ed25519); the curve
    of every other algorithm is fixed by the algorithm itself.

    RSA generation is CPU-bound and can take a noticeable fraction of a
    second; callers on latency-sensitive paths should run it elsewhere.

    Raises:
        UnsupportedAlgorithmError: ``alg`` is not a supported JWS algorithm.
        UnsupportedCurveError: ``crv`` is not Ed25519 or Ed448 for EdDSA.
    """
    cfg = config or DEFAULT_CONFIG

    if alg in RSA_ALGORITHMS:
        return rsa.generate_private_key(
            public_exponent=cfg.rsa_public_exponent,
            key_size=cfg.rsa_key_size,
        )

    if alg in EC_ALGORITHMS:
        _, curve_cls = EC_ALGORITHMS[alg]
        return ec.generate_private_key(curve_cls())

    if alg == "EdDSA":
        curve = DEFAULT_EDDSA_CURVE if crv is None else crv
        if curve == "Ed25519":
            return ed25519.Ed25519PrivateKey.generate()
        if curve == "Ed448":
            return ed448.Ed448PrivateKey.generate()
        raise UnsupportedCurveError(f"crv={curve!r}")

    raise UnsupportedAlgorithmError(f"alg={alg!r}")


# ---------------------------------------------------------------------------
# JWK export
# ---------------------------------------------------------------------------

def export_private_key_as_jwk(private_key: PrivateKey) -> Dict[str, Any]:
    """
    Serialize a private key into a JWK dict with every private member set.

    The result has no ``kid``, ``alg`` or ``use``; those are assigned by the
    store.

    Raises:
        UnsupportedKeyTypeError: The key is not RSA, EC (P-256/384/521),
            Ed25519 or Ed448.
    """
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        if private_key.curve.name not in _CURVE_NAMES:
            raise UnsupportedKeyTypeError(f"EC curve {private_key.curve.name}")
    elif not isinstance(private_key, _EXPORTABLE_KEY_TYPES):
        raise UnsupportedKeyTypeError(type(private_key).__name__)

    jwk = JWK.from_pyca(private_key).export(private_key=True, as_dict=True)
    # kid is assigned by the store
    jwk.pop("kid", None)
    return jwk


def load_pem_private_key_as_jwk(
    pem: Union[str, bytes],
    password: Optional[bytes] = None,
) -> Dict[str, Any]:
    """
    Load a PEM-encoded private key (PKCS#1, PKCS#8 or SEC1) as a JWK dict.

    Raises:
        InvalidKeyMaterialError: The PEM cannot be parsed or decrypted.
        UnsupportedKeyTypeError: The PEM holds an unsupported key type.
    """
    data = pem.encode("ascii") if isinstance(pem, str) else pem
    try:
        private_key = load_pem_private_key(data, password=password)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidKeyMaterialError(str(e)) from e
    return export_private_key_as_jwk(private_key)
