"""
config.py — Key generation settings

Defaults follow common JOSE practice: 2048-bit RSA moduli with exponent
65537, and 40-byte (320-bit) random key identifiers.

Every setting can be overridden from the environment:
  JWKSTORE_RSA_KEY_SIZE         RSA modulus size in bits (>= 2048)
  JWKSTORE_RSA_PUBLIC_EXPONENT  RSA public exponent (65537 or 3)
  JWKSTORE_KID_BYTES            random bytes per generated kid (>= 20)
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

MIN_RSA_KEY_SIZE = 2048
MIN_KID_BYTES = 20  # 160 bits

_ENV_PREFIX = "JWKSTORE_"


@dataclass(frozen=True)
class StoreConfig:
    rsa_key_size: int = 2048
    rsa_public_exponent: int = 65537
    kid_bytes: int = 40

    def __post_init__(self) -> None:
        if self.rsa_key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(
                f"rsa_key_size must be at least {MIN_RSA_KEY_SIZE} bits, got {self.rsa_key_size}"
            )
        if self.rsa_public_exponent not in (3, 65537):
            raise ValueError(
                f"rsa_public_exponent must be 65537 or 3, got {self.rsa_public_exponent}"
            )
        if self.kid_bytes < MIN_KID_BYTES:
            raise ValueError(
                f"kid_bytes must be at least {MIN_KID_BYTES}, got {self.kid_bytes}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        """Build a config from ``JWKSTORE_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            StoreConfig: Defaults overridden by any variables that are set.

        Raises:
            ValueError: If a variable is not an integer or is out of range.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for field_name in ("rsa_key_size", "rsa_public_exponent", "kid_bytes"):
            raw = env.get(_ENV_PREFIX + field_name.upper())
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[field_name] = int(raw)
            except ValueError:
                raise ValueError(
                    f"{_ENV_PREFIX}{field_name.upper()} must be an integer, got {raw!r}"
                ) from None
        return cls(**overrides)


DEFAULT_CONFIG = StoreConfig()
