"""
errors.py — jwkstore Error Taxonomy

Standardized error codes for key generation and ingestion failures.
Every error carries a stable code so callers (CLI, HTTP layers) can report
it without parsing messages.
"""

from typing import Optional

__all__ = [
    "JwkStoreError",
    "UnsupportedAlgorithmError",
    "UnsupportedCurveError",
    "UnsupportedKeyTypeError",
    "MissingAlgorithmError",
    "InvalidKeyMaterialError",
]

class JwkStoreError(Exception):
    """Base class for all jwkstore errors."""
    def __init__(
        self,
        code: str,
        message: str,
        context: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.context = context

        full_msg = f"[{code}] {message}"
        if context:
            full_msg += f" Context: {context}"

        super().__init__(full_msg)

# Algorithm Errors (E1xx)
class UnsupportedAlgorithmError(JwkStoreError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JWKSTORE_E100", 'unsupported or invalid JWK "alg" (Algorithm) Parameter value', context)

class UnsupportedCurveError(JwkStoreError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JWKSTORE_E101", "invalid or unsupported crv option provided, supported values are Ed25519 and Ed448", context)

class UnsupportedKeyTypeError(JwkStoreError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JWKSTORE_E102", "The key is not an RSA, EC, Ed25519 or Ed448 private key usable with the requested algorithm.", context)

# Key Material Errors (E2xx)
class MissingAlgorithmError(JwkStoreError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JWKSTORE_E200", "Unspecified alg", context)

class InvalidKeyMaterialError(JwkStoreError):
    def __init__(self, context: Optional[str] = None):
        super().__init__("JWKSTORE_E201", "The supplied key material could not be parsed as a private key.", context)
