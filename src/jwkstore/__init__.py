"""jwkstore public API.

A rotating store of asymmetric JOSE signing keys (RSA, EC, OKP/EdDSA) that
serves keys round-robin or by ``kid`` and publishes them as a JWK Set.

Example:
    from jwkstore import KeyStore

    store = KeyStore()
    store.generate("RS256")
    signing_key = store.get()
    print(store.to_json())
"""

from .config import StoreConfig
from .errors import (
    JwkStoreError,
    UnsupportedAlgorithmError,
    UnsupportedCurveError,
    UnsupportedKeyTypeError,
    MissingAlgorithmError,
    InvalidKeyMaterialError,
)
from .jwk import (
    SUPPORTED_ALGORITHMS,
    EDDSA_CURVES,
    generate_key_pair,
    export_private_key_as_jwk,
    load_pem_private_key_as_jwk,
)
from .rotator import KeyRotator
from .store import KeyStore, generate_random_kid


__version__ = "1.0.0"
__all__ = [
    "KeyStore",
    "KeyRotator",
    "StoreConfig",
    "generate_random_kid",
    "generate_key_pair",
    "export_private_key_as_jwk",
    "load_pem_private_key_as_jwk",
    "SUPPORTED_ALGORITHMS",
    "EDDSA_CURVES",
    "JwkStoreError",
    "UnsupportedAlgorithmError",
    "UnsupportedCurveError",
    "UnsupportedKeyTypeError",
    "MissingAlgorithmError",
    "InvalidKeyMaterialError",
]
