"""
test_store.py — KeyStore behaviour

Properties tested:
  - generate(): kty per algorithm family, kid charset, EdDSA curves,
    unsupported alg/crv rejection, private members present
  - add(): copy semantics, kid/alg normalization, replace-on-same-kid
  - add_pem(): alg hint, key type / curve mismatch
  - get(): lookup by kid, round robin, absence signal
  - to_json(): public/private member filtering
"""

import logging
import re

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed448, rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)

from jwkstore import KeyStore, StoreConfig
from jwkstore.errors import (
    InvalidKeyMaterialError,
    MissingAlgorithmError,
    UnsupportedAlgorithmError,
    UnsupportedCurveError,
    UnsupportedKeyTypeError,
)
from jwkstore.jwk import export_private_key_as_jwk

KID_PATTERN = re.compile(r"^[\w-]+$")
RSA_PRIVATE_MEMBERS = ["d", "p", "q", "dp", "dq", "qi"]


def _test_key(kty):
    """Build a serialized private JWK like those read from key files."""
    if kty == "RSA":
        key, alg, kid = rsa.generate_private_key(public_exponent=65537, key_size=2048), "RS256", "test-rs256"
    elif kty == "EC":
        key, alg, kid = ec.generate_private_key(ec.SECP256R1()), "ES256", "test-es256"
    else:
        key, alg, kid = ed448.Ed448PrivateKey.generate(), "EdDSA", "test-eddsa"
    jwk = export_private_key_as_jwk(key)
    jwk.update({"kid": kid, "alg": alg, "use": "sig"})
    return jwk


def _pem(private_key):
    return private_key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())


# ---------------------------------------------------------------------------
# generate()
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("alg, expected_kty", [
    ("RS256", "RSA"),
    ("RS384", "RSA"),
    ("RS512", "RSA"),
    ("PS256", "RSA"),
    ("PS384", "RSA"),
    ("PS512", "RSA"),
    ("ES256", "EC"),
    ("ES384", "EC"),
    ("ES512", "EC"),
    ("EdDSA", "OKP"),
])
def test_generate_key_type_per_algorithm(alg, expected_kty):
    store = KeyStore()
    key = store.generate(alg)
    assert key["alg"] == alg
    assert key["kty"] == expected_kty
    assert KID_PATTERN.match(key["kid"])
    assert len(store) == 1

@pytest.mark.parametrize("crv", ["Ed25519", "Ed448"])
def test_generate_eddsa_curves(crv):
    store = KeyStore()
    key = store.generate("EdDSA", crv=crv)
    assert key["alg"] == "EdDSA"
    assert key["kty"] == "OKP"
    assert key["crv"] == crv
    assert KID_PATTERN.match(key["kid"])

@pytest.mark.parametrize("alg", ["RS123", "dunno"])
def test_generate_unsupported_alg(alg):
    store = KeyStore()
    with pytest.raises(UnsupportedAlgorithmError, match=r'unsupported or invalid JWK "alg" \(Algorithm\) Parameter value'):
        store.generate(alg)
    assert len(store) == 0

@pytest.mark.parametrize("crv", ["Ed007", "dunno"])
def test_generate_unsupported_crv(crv):
    store = KeyStore()
    with pytest.raises(UnsupportedCurveError, match="supported values are Ed25519 and Ed448"):
        store.generate("EdDSA", crv=crv)
    assert len(store) == 0

def test_generate_returns_private_members():
    store = KeyStore()
    jwk = store.generate("RS256")
    for member in ["e", "n"] + RSA_PRIVATE_MEMBERS:
        assert member in jwk

def test_generate_uses_given_kid():
    store = KeyStore()
    key = store.generate("ES256", kid="signing-1")
    assert key["kid"] == "signing-1"
    assert "signing-1" in store

def test_generated_kids_are_unique_and_sized():
    store = KeyStore()
    kids = {store.generate("EdDSA")["kid"] for _ in range(20)}
    assert len(kids) == 20
    assert all(len(kid) == 80 for kid in kids)

def test_kid_length_follows_config():
    store = KeyStore(StoreConfig(kid_bytes=20))
    assert len(store.generate("EdDSA")["kid"]) == 40

def test_generate_with_existing_kid_replaces_and_warns(caplog):
    store = KeyStore()
    store.generate("ES256", kid="dup")
    with caplog.at_level(logging.WARNING, logger="jwkstore.store"):
        second = store.generate("EdDSA", kid="dup")
    assert len(store) == 1
    assert store.get("dup") is second
    assert "replaces existing key kid=dup" in caplog.text


# ---------------------------------------------------------------------------
# add()
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("kty", ["RSA", "EC", "OKP"])
def test_add_key(kty):
    store = KeyStore()
    test_key = _test_key(kty)
    key = store.add(test_key)
    assert key["kty"] == kty
    assert key["kid"] == test_key["kid"]
    assert store.get(test_key["kid"]) is key

def test_add_does_not_mutate_or_alias_input():
    store = KeyStore()
    test_key = _test_key("EC")
    del test_key["kid"]
    snapshot = dict(test_key)

    key = store.add(test_key)

    assert test_key == snapshot
    assert key is not test_key
    assert KID_PATTERN.match(key["kid"])
    assert len(key["kid"]) == 80

def test_add_without_alg_fails():
    store = KeyStore()
    jwk = _test_key("RSA")
    del jwk["alg"]
    with pytest.raises(MissingAlgorithmError, match="Unspecified alg"):
        store.add(jwk)
    assert len(store) == 0

def test_missing_alg_context_names_only_supplied_kid():
    store = KeyStore()
    jwk = _test_key("RSA")
    del jwk["alg"]
    with pytest.raises(MissingAlgorithmError) as exc:
        store.add(jwk)
    assert exc.value.context == "kid=test-rs256"

    del jwk["kid"]
    with pytest.raises(MissingAlgorithmError) as exc:
        store.add(jwk)
    assert exc.value.context is None

def test_add_with_empty_alg_fails():
    store = KeyStore()
    jwk = _test_key("OKP")
    jwk["alg"] = ""
    with pytest.raises(MissingAlgorithmError):
        store.add(jwk)

def test_add_overwrites_existing_kid():
    store = KeyStore()

    one = _test_key("RSA")
    assert one["kty"] == "RSA"
    one["kid"] = "new_id"
    store.add(one)

    retrieved_one = store.get("new_id")
    assert retrieved_one is not None
    assert retrieved_one["kty"] == one["kty"]

    two = _test_key("EC")
    assert two["kty"] == "EC"
    two["kid"] = "new_id"
    store.add(two)

    retrieved_two = store.get("new_id")
    assert retrieved_two is not None
    assert retrieved_two["kty"] == two["kty"]
    assert len(store) == 1
    assert len(store.to_json()["keys"]) == 1

def test_add_does_not_validate_key_material():
    store = KeyStore()
    key = store.add({"kid": "weird", "kty": "RSA", "alg": "RS256", "n": "not-a-modulus"})
    assert store.get("weird") is key


def test_add_unhashable_kid_leaves_store_unchanged():
    store = KeyStore()
    with pytest.raises(TypeError):
        store.add({"kid": ["x"], "kty": "RSA", "alg": "RS256"})
    assert len(store) == 0
    assert store.to_json() == {"keys": []}

# ---------------------------------------------------------------------------
# add_pem()
# ---------------------------------------------------------------------------

def test_add_pem_rsa():
    store = KeyStore()
    key = store.add_pem(_pem(rsa.generate_private_key(public_exponent=65537, key_size=2048)), "PS256", kid="pem-1")
    assert key["kid"] == "pem-1"
    assert key["alg"] == "PS256"
    assert key["kty"] == "RSA"
    for member in RSA_PRIVATE_MEMBERS:
        assert member in key
    assert store.get("pem-1") is key

def test_add_pem_assigns_random_kid():
    store = KeyStore()
    key = store.add_pem(_pem(ed448.Ed448PrivateKey.generate()), "EdDSA")
    assert key["crv"] == "Ed448"
    assert KID_PATTERN.match(key["kid"])

def test_add_pem_unsupported_alg():
    store = KeyStore()
    with pytest.raises(UnsupportedAlgorithmError):
        store.add_pem(_pem(ed448.Ed448PrivateKey.generate()), "HS256")

def test_add_pem_key_type_mismatch():
    store = KeyStore()
    with pytest.raises(UnsupportedKeyTypeError):
        store.add_pem(_pem(ed448.Ed448PrivateKey.generate()), "RS256")
    assert len(store) == 0

def test_add_pem_curve_mismatch():
    store = KeyStore()
    with pytest.raises(UnsupportedKeyTypeError, match="P-256"):
        store.add_pem(_pem(ec.generate_private_key(ec.SECP256R1())), "ES384")

def test_add_pem_invalid():
    store = KeyStore()
    with pytest.raises(InvalidKeyMaterialError):
        store.add_pem("not a pem", "RS256")


# ---------------------------------------------------------------------------
# get()
# ---------------------------------------------------------------------------

def test_get_by_kid():
    store = KeyStore()
    key1 = store.generate("RS256", kid="key-one")
    key2 = store.generate("RS256", kid="key-two")

    assert key1["kid"] != key2["kid"]

    assert store.get("key-one") is key1
    assert store.get("key-two") is key2
    assert store.get("key-two") is key2
    assert store.get("non-existing-kid") is None

def test_get_round_robin():
    store = KeyStore()
    for kid in ("a", "b", "c"):
        store.generate("ES256", kid=kid)

    assert [store.get()["kid"] for _ in range(4)] == ["a", "b", "c", "a"]

def test_get_by_kid_demotes_key():
    store = KeyStore()
    for kid in ("a", "b", "c"):
        store.generate("EdDSA", kid=kid)

    store.get("a")
    assert [store.get()["kid"] for _ in range(3)] == ["b", "c", "a"]

def test_get_on_empty_store():
    store = KeyStore()
    assert store.get() is None
    assert store.get("non-existing-kid") is None


# ---------------------------------------------------------------------------
# to_json()
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("include_private", [None, True, False])
def test_to_json(include_private):
    store = KeyStore()
    for kid in ("key-one", "key-two", "key-three"):
        store.generate("RS256", kid=kid)

    jwks = store.to_json() if include_private is None else store.to_json(include_private)
    assert set(jwks) == {"keys"}
    keys = jwks["keys"]
    assert len(keys) == 3
    assert sorted(k["kid"] for k in keys) == ["key-one", "key-three", "key-two"]

    for jwk in keys:
        assert store.get(jwk["kid"]) is not None
        for member in ("kty", "e", "n"):
            assert member in jwk
        for member in RSA_PRIVATE_MEMBERS:
            if include_private is True:
                assert member in jwk
            else:
                assert member not in jwk

def test_to_json_mixed_key_types_public():
    store = KeyStore()
    store.generate("ES384", kid="ec")
    store.generate("EdDSA", kid="okp")

    keys = {k["kid"]: k for k in store.to_json()["keys"]}
    assert set(keys["ec"]) == {"kid", "kty", "crv", "x", "y"}
    assert set(keys["okp"]) == {"kid", "kty", "crv", "x"}

def test_to_json_keeps_use():
    store = KeyStore()
    store.add(_test_key("OKP"))
    (key,) = store.to_json()["keys"]
    assert key["use"] == "sig"
    assert "d" not in key
