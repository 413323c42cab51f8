"""
Shared test fixtures for Auth Platform JWX tests.

Provides generated keys for every supported key family, a sample key set
document and a codec configuration with telemetry disabled.
"""

import copy
import json
import os
from typing import Any

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa

from auth_platform_jwx.config import JWXConfig, TelemetryConfig
from auth_platform_jwx.jwk import USE_ENC, USE_SIG, Key
from auth_platform_jwx.jwks import KeySet

EC_SAMPLE_KID = "772c06ee-c745-4c20-b9ba-99c36937311c"
RSA_SAMPLE_KID = "b64e1881-07b9-4ff1-b040-1ae75c537785"

SAMPLE_JWKS: dict[str, Any] = {
    "keys": [
        {
            "use": "sig",
            "kty": "EC",
            "kid": EC_SAMPLE_KID,
            "crv": "P-256",
            "alg": "ES256",
            "x": "EsH2MPOm5_FifOAZcVr2f-u8YOBec7j3NeDyw_LrZQ8",
            "y": "9YBU9FDc9Z23yvQNx7Mm9Ca2Hu9FAD--VjaZvTv-WyQ",
            "d": "slzLInxpfESdp1WnHiic53k92Exnt2DNkiHoB39Eq0Y",
        },
        {
            "use": "sig",
            "kty": "RSA",
            "kid": RSA_SAMPLE_KID,
            "alg": "RS256",
            "n": "mhX8N9gOQD0ZjYJppK-KKJyHJR4jKt1Vcfrs9qeIxBKBSQQ9su3olr_B2fPiAvH6EmOKiEq2SGUKbwh_GSoAryiaxJKGZZCvzsYM6LAERHh8VMYDqaGHMHzIwIv4S_H6SJ38R84mZx-Z-nT3GMwOmau1LO8JCpoeUurj0GgsjN7-f7AdIzj7kxeQE4JjdRdc2iFRu5-75an2U-Hx68ovHitIwmnR5wWtWzU4t7u-cuk4xNUTgH_ScYbHFNzEut3zECCVT7KECVkGy4LIZGk9U5-feaiiax41gy4g5fi6kCKKJ9rfX4gzCLDtGBxWiB0XZs-_I54IqdNOeXlcPjmiWw",
            "e": "AQAB",
            "d": "diO1Jfv5sTcniGAdL6-HdmvNEqBwxkS9Zo7FcLgzHGIzzg_6Xl4anrqXnsxm1WtCGSdI6AagjBEsVsVk7Z5Ot_2h7GWLtgOhSCCBdUa_fuACM90-oai_RmXmZfrrfQ8intrCuytMNnT8UhOsAM8zwo7scm8zt3VDGsANu5Sj071VH0nz9wAJwR5If0Oob13C7D0-c6TyeZ8Of5zFHdFfywtr-dYpbOiBQBjA5cGH70XTtk9vvHeY5qsfNmOdQCLtVvcEDk4Y7o2zywgP5eRygCBQXdwJHxsJLH3_qTen9sjPZRUCIAtaz3Ntl9DMIZUkCsjnlAXfnN799YzddEBNwQ",
            "p": "zOTbmi86kZdd-zqnj1FChAV5RHCPBq_bN2qUQptUNQ8jpF659Dv5M3uylVYOUSisWUAO52dEkH2R1LpNvOhbf9Y3Zyd6BQZamjxTqliVe2Ha_7dg7UMSjmLlYkDIiJtRolUP9pcHsMM6ruBPIrmnnmFxQJxt0ROJA8DvkpDKH0U",
            "q": "wITdyanA3aXt8nCIyOAZ4Q23cdaaUN8mDGYWWjLg2yRKADsUznMo7zY7l5wxfnxXL_6K4SpvRy3Fjl33zOh6Jfr_04Z7i_LxNOFfe2RfMCvK-tI8GMsYsaTfpluK1aXSyimVmiK2QQD0-Wb3crl2TMyReGOpFhxj_uNcPvkNhR8",
            "dp": "ECNukKRrrpAHnQQvsoAqBxAPTy62dUZgs-q3Js_pQAyjOA0mBHC83is-E7klg4r6mEUNZ3ig0-iwFdteyCRdIKKU1pErcT3g4QkjZeV4ULGSeFXPUqDX01NC0gxcPzZMpcahbUDUID4gXynX0dphs33lV7t6gt9RCXSm6hpxcSk",
            "dq": "VYbxbRTQDOgZVLpv2iXM-XF5jMZVGhZ4tctopLuzr0do5L9al_kLN3J1eP438sRUi4resfeDJjEMchoG625gTZ07qAI3ws20INT68Tt_GkxqSZG6hx07JDhl72b9v7qCcbOVtbs0Ep7VNjNrPPltt-Ktwbksthj4x5TEN2m3eus",
            "qi": "rfN9IuzcMjQNBjvKhvFigXgW8qxeYAjQi_5NLhDcjTTn7JghbelDkwpmdpd2ZJiibfmWyCbDhwOu0T8jpIUnzV80WXODyHKjIaSdKAbuaDW4PEMFmw6lhkED0uHbC78_F_kY2Qay7DPq8JDDXWVNLREca6LPTHnV7s7W01FhlNk",
        },
    ]
}


@pytest.fixture
def sample_jwks() -> dict[str, Any]:
    """Provide a fresh copy of the sample key set document."""
    return copy.deepcopy(SAMPLE_JWKS)


@pytest.fixture(scope="session")
def sample_jwks_json() -> str:
    """Provide the sample key set document as JSON text."""
    return json.dumps(SAMPLE_JWKS)


@pytest.fixture(scope="session")
def sample_key_set() -> KeySet:
    """Provide the sample key set: one ES256 and one RS256 signing key."""
    return KeySet.from_dict(SAMPLE_JWKS)


@pytest.fixture(scope="session")
def rsa_private_key() -> rsa.RSAPrivateKey:
    """Provide a generated 2048-bit RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_private_key() -> rsa.RSAPrivateKey:
    """Provide a second, unrelated RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """Provide a generated P-256 private key."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture(scope="session")
def ec_signing_key(ec_private_key: ec.EllipticCurvePrivateKey) -> Key:
    """Provide an ES256 signing key."""
    return Key(ec_private_key, kid="ec-sig-1", use=USE_SIG, alg="ES256")


@pytest.fixture(scope="session")
def rsa_signing_key(rsa_private_key: rsa.RSAPrivateKey) -> Key:
    """Provide an RS256 signing key."""
    return Key(rsa_private_key, kid="rsa-sig-1", use=USE_SIG, alg="RS256")


@pytest.fixture(scope="session")
def hmac_signing_key() -> Key:
    """Provide an HS256 signing key with a 32-byte secret."""
    return Key(os.urandom(32), kid="hs-sig-1", use=USE_SIG, alg="HS256")


@pytest.fixture(scope="session")
def eddsa_signing_key() -> Key:
    """Provide an EdDSA signing key."""
    return Key(ed25519.Ed25519PrivateKey.generate(), kid="ed-sig-1", use=USE_SIG, alg="EdDSA")


@pytest.fixture(scope="session")
def rsa_encryption_key(rsa_private_key: rsa.RSAPrivateKey) -> Key:
    """Provide an RSA-OAEP-256 encryption key."""
    return Key(rsa_private_key, kid="rsa-enc-1", use=USE_ENC, alg="RSA-OAEP-256")


@pytest.fixture(scope="session")
def ec_encryption_key() -> Key:
    """Provide an ECDH-ES+A256KW encryption key."""
    return Key(
        ec.generate_private_key(ec.SECP256R1()),
        kid="ec-enc-1",
        use=USE_ENC,
        alg="ECDH-ES+A256KW",
    )


@pytest.fixture(scope="session")
def aes_kw_key() -> Key:
    """Provide an A256KW encryption key."""
    return Key(os.urandom(32), kid="aes-kw-1", use=USE_ENC, alg="A256KW")


@pytest.fixture(scope="session")
def signing_key_set(ec_signing_key: Key, rsa_signing_key: Key, hmac_signing_key: Key) -> KeySet:
    """Provide a key set holding the generated signing keys."""
    return KeySet(ec_signing_key, rsa_signing_key, hmac_signing_key)


@pytest.fixture(scope="session")
def encryption_key_set(rsa_encryption_key: Key, ec_encryption_key: Key, aes_kw_key: Key) -> KeySet:
    """Provide a key set holding the generated encryption keys."""
    return KeySet(rsa_encryption_key, ec_encryption_key, aes_kw_key)


@pytest.fixture
def jwx_config() -> JWXConfig:
    """Provide a codec configuration with telemetry disabled."""
    return JWXConfig(telemetry=TelemetryConfig(enabled=False, service_name="test-jwx"))
