"""Compact JWE encryption and decryption (RFC 7516, single recipient).

Key management and content encryption are built directly on ``cryptography``
primitives. PBES2 key management and compressed (``zip``) payloads are not
supported.
"""

from __future__ import annotations

import json
import os
import struct
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import constant_time, hashes, hmac
from cryptography.hazmat.primitives.asymmetric import ec, padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.concatkdf import ConcatKDFHash
from cryptography.hazmat.primitives.keywrap import InvalidUnwrap, aes_key_unwrap, aes_key_wrap
from cryptography.hazmat.primitives.padding import PKCS7
from jwt import algorithms as jwt_algorithms
from jwt.exceptions import InvalidKeyError as PyJWTInvalidKeyError
from jwt.utils import base64url_decode, base64url_encode

from .errors import DecryptionError, EncryptionError, MalformedTokenError, UnsupportedAlgorithmError
from .jwa import ContentEncryption, KeyManagementAlgorithm
from .jwk import Key

JWE_SEGMENTS = 5

GCM_IV_SIZE = 12
GCM_TAG_SIZE = 16
CBC_IV_SIZE = 16

# Content encryption key sizes in bytes
CEK_SIZES: dict[ContentEncryption, int] = {
    ContentEncryption.A128GCM: 16,
    ContentEncryption.A192GCM: 24,
    ContentEncryption.A256GCM: 32,
    ContentEncryption.A128CBC_HS256: 32,
    ContentEncryption.A192CBC_HS384: 48,
    ContentEncryption.A256CBC_HS512: 64,
}

_CBC_HASHES: dict[ContentEncryption, type[hashes.HashAlgorithm]] = {
    ContentEncryption.A128CBC_HS256: hashes.SHA256,
    ContentEncryption.A192CBC_HS384: hashes.SHA384,
    ContentEncryption.A256CBC_HS512: hashes.SHA512,
}

# Key encryption key sizes in bytes for the wrapping algorithms
KEK_SIZES: dict[KeyManagementAlgorithm, int] = {
    KeyManagementAlgorithm.A128KW: 16,
    KeyManagementAlgorithm.A192KW: 24,
    KeyManagementAlgorithm.A256KW: 32,
    KeyManagementAlgorithm.A128GCMKW: 16,
    KeyManagementAlgorithm.A192GCMKW: 24,
    KeyManagementAlgorithm.A256GCMKW: 32,
    KeyManagementAlgorithm.ECDH_ES_A128KW: 16,
    KeyManagementAlgorithm.ECDH_ES_A192KW: 24,
    KeyManagementAlgorithm.ECDH_ES_A256KW: 32,
}

_AES_KW = {
    KeyManagementAlgorithm.A128KW,
    KeyManagementAlgorithm.A192KW,
    KeyManagementAlgorithm.A256KW,
}

_AES_GCM_KW = {
    KeyManagementAlgorithm.A128GCMKW,
    KeyManagementAlgorithm.A192GCMKW,
    KeyManagementAlgorithm.A256GCMKW,
}

_ECDH_ES = {
    KeyManagementAlgorithm.ECDH_ES,
    KeyManagementAlgorithm.ECDH_ES_A128KW,
    KeyManagementAlgorithm.ECDH_ES_A192KW,
    KeyManagementAlgorithm.ECDH_ES_A256KW,
}

_RSA = {
    KeyManagementAlgorithm.RSA1_5,
    KeyManagementAlgorithm.RSA_OAEP,
    KeyManagementAlgorithm.RSA_OAEP_256,
}


def _key_algorithm(alg: str) -> KeyManagementAlgorithm:
    try:
        algorithm = KeyManagementAlgorithm(alg)
    except ValueError as e:
        raise UnsupportedAlgorithmError(alg) from e
    if algorithm.value.startswith("PBES2"):
        raise UnsupportedAlgorithmError(alg)
    return algorithm


def _content_encryption(enc: str) -> ContentEncryption:
    try:
        return ContentEncryption(enc)
    except ValueError as e:
        raise UnsupportedAlgorithmError(enc) from e


def _b64(data: bytes) -> str:
    return base64url_encode(data).decode("ascii")


def _rsa_padding(algorithm: KeyManagementAlgorithm) -> padding.AsymmetricPadding:
    if algorithm == KeyManagementAlgorithm.RSA1_5:
        return padding.PKCS1v15()
    digest: hashes.HashAlgorithm = (
        hashes.SHA256() if algorithm == KeyManagementAlgorithm.RSA_OAEP_256 else hashes.SHA1()
    )
    return padding.OAEP(mgf=padding.MGF1(algorithm=digest), algorithm=digest, label=None)


def _concat_kdf(
    shared_secret: bytes,
    algorithm_id: str,
    key_length: int,
    apu: bytes = b"",
    apv: bytes = b"",
) -> bytes:
    """Concat KDF (RFC 7518 section 4.6.2)."""
    algorithm_id_bytes = algorithm_id.encode("ascii")
    other_info = (
        struct.pack(">I", len(algorithm_id_bytes))
        + algorithm_id_bytes
        + struct.pack(">I", len(apu))
        + apu
        + struct.pack(">I", len(apv))
        + apv
        + struct.pack(">I", key_length * 8)
    )
    ckdf = ConcatKDFHash(algorithm=hashes.SHA256(), length=key_length, otherinfo=other_info)
    return ckdf.derive(shared_secret)


def _ecdh_key_length(algorithm: KeyManagementAlgorithm, encryption: ContentEncryption) -> tuple[str, int]:
    if algorithm == KeyManagementAlgorithm.ECDH_ES:
        return encryption.value, CEK_SIZES[encryption]
    return algorithm.value, KEK_SIZES[algorithm]


def _symmetric_key(key: Key, size: int, algorithm: str) -> bytes:
    if not key.is_symmetric:
        raise EncryptionError(f"{algorithm} requires a symmetric key")
    if len(key.raw) != size:
        raise EncryptionError(f"{algorithm} requires a {size}-byte key")
    return key.raw


def _wrap_key(
    key: Key,
    algorithm: KeyManagementAlgorithm,
    encryption: ContentEncryption,
) -> tuple[bytes, bytes, dict[str, Any]]:
    """Produce (cek, encrypted_key, extra header fields) for the recipient key."""
    cek_size = CEK_SIZES[encryption]

    if algorithm == KeyManagementAlgorithm.DIRECT:
        return _symmetric_key(key, cek_size, algorithm.value), b"", {}

    if algorithm in _AES_KW:
        kek = _symmetric_key(key, KEK_SIZES[algorithm], algorithm.value)
        cek = os.urandom(cek_size)
        return cek, aes_key_wrap(kek, cek), {}

    if algorithm in _AES_GCM_KW:
        kek = _symmetric_key(key, KEK_SIZES[algorithm], algorithm.value)
        cek = os.urandom(cek_size)
        iv = os.urandom(GCM_IV_SIZE)
        sealed = AESGCM(kek).encrypt(iv, cek, None)
        header = {"iv": _b64(iv), "tag": _b64(sealed[-GCM_TAG_SIZE:])}
        return cek, sealed[:-GCM_TAG_SIZE], header

    if algorithm in _RSA:
        if not isinstance(key.raw, rsa.RSAPublicKey):
            raise EncryptionError(f"{algorithm.value} requires an RSA public key")
        cek = os.urandom(cek_size)
        return cek, key.raw.encrypt(cek, _rsa_padding(algorithm)), {}

    if algorithm in _ECDH_ES:
        if not isinstance(key.raw, ec.EllipticCurvePublicKey):
            raise EncryptionError(f"{algorithm.value} requires an EC public key")
        ephemeral = ec.generate_private_key(key.raw.curve)
        shared = ephemeral.exchange(ec.ECDH(), key.raw)
        algorithm_id, length = _ecdh_key_length(algorithm, encryption)
        derived = _concat_kdf(shared, algorithm_id, length)
        header = {"epk": jwt_algorithms.ECAlgorithm.to_jwk(ephemeral.public_key(), as_dict=True)}
        header["epk"].pop("key_ops", None)
        if algorithm == KeyManagementAlgorithm.ECDH_ES:
            return derived, b"", header
        cek = os.urandom(cek_size)
        return cek, aes_key_wrap(derived, cek), header

    raise UnsupportedAlgorithmError(algorithm.value)


def _unwrap_key(
    key: Key,
    algorithm: KeyManagementAlgorithm,
    encryption: ContentEncryption,
    encrypted_key: bytes,
    header: dict[str, Any],
) -> bytes:
    """Recover the content encryption key with the recipient's private key."""
    cek_size = CEK_SIZES[encryption]

    if algorithm == KeyManagementAlgorithm.DIRECT:
        if not key.is_symmetric or len(key.raw) != cek_size:
            raise DecryptionError(f"dir requires a {cek_size}-byte key", kid=key.id or None)
        if encrypted_key:
            raise DecryptionError("dir requires an empty encrypted key", kid=key.id or None)
        return key.raw

    if algorithm in _AES_KW:
        if not key.is_symmetric:
            raise DecryptionError(f"{algorithm.value} requires a symmetric key", kid=key.id or None)
        return aes_key_unwrap(key.raw, encrypted_key)

    if algorithm in _AES_GCM_KW:
        if not key.is_symmetric:
            raise DecryptionError(f"{algorithm.value} requires a symmetric key", kid=key.id or None)
        try:
            iv = base64url_decode(header["iv"])
            tag = base64url_decode(header["tag"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedTokenError(f"Invalid {algorithm.value} header: {e}") from e
        return AESGCM(key.raw).decrypt(iv, encrypted_key + tag, None)

    if algorithm in _RSA:
        if not isinstance(key.raw, rsa.RSAPrivateKey):
            raise DecryptionError(f"{algorithm.value} requires an RSA private key", kid=key.id or None)
        return key.raw.decrypt(encrypted_key, _rsa_padding(algorithm))

    if algorithm in _ECDH_ES:
        if not isinstance(key.raw, ec.EllipticCurvePrivateKey):
            raise DecryptionError(f"{algorithm.value} requires an EC private key", kid=key.id or None)
        try:
            epk = jwt_algorithms.ECAlgorithm.from_jwk(header["epk"])
            apu = base64url_decode(header["apu"]) if "apu" in header else b""
            apv = base64url_decode(header["apv"]) if "apv" in header else b""
        except (KeyError, TypeError, ValueError, PyJWTInvalidKeyError) as e:
            raise MalformedTokenError(f"Invalid {algorithm.value} header: {e}") from e
        if not isinstance(epk, ec.EllipticCurvePublicKey) or epk.curve.name != key.raw.curve.name:
            raise DecryptionError("Ephemeral key does not match recipient curve", kid=key.id or None)
        shared = key.raw.exchange(ec.ECDH(), epk)
        algorithm_id, length = _ecdh_key_length(algorithm, encryption)
        derived = _concat_kdf(shared, algorithm_id, length, apu, apv)
        if algorithm == KeyManagementAlgorithm.ECDH_ES:
            return derived
        return aes_key_unwrap(derived, encrypted_key)

    raise UnsupportedAlgorithmError(algorithm.value)


def _cbc_mac(mac_key: bytes, aad: bytes, iv: bytes, ciphertext: bytes, encryption: ContentEncryption) -> bytes:
    al = struct.pack(">Q", len(aad) * 8)
    h = hmac.HMAC(mac_key, _CBC_HASHES[encryption]())
    h.update(aad + iv + ciphertext + al)
    return h.finalize()[: len(mac_key)]


def _encrypt_content(
    plaintext: bytes,
    cek: bytes,
    aad: bytes,
    encryption: ContentEncryption,
) -> tuple[bytes, bytes, bytes]:
    """Return (iv, ciphertext, tag)."""
    if encryption in _CBC_HASHES:
        half = len(cek) // 2
        mac_key, enc_key = cek[:half], cek[half:]
        iv = os.urandom(CBC_IV_SIZE)
        padder = PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return iv, ciphertext, _cbc_mac(mac_key, aad, iv, ciphertext, encryption)

    iv = os.urandom(GCM_IV_SIZE)
    sealed = AESGCM(cek).encrypt(iv, plaintext, aad)
    return iv, sealed[:-GCM_TAG_SIZE], sealed[-GCM_TAG_SIZE:]


def _decrypt_content(
    ciphertext: bytes,
    tag: bytes,
    cek: bytes,
    iv: bytes,
    aad: bytes,
    encryption: ContentEncryption,
) -> bytes:
    if len(cek) != CEK_SIZES[encryption]:
        raise DecryptionError("content encryption key has the wrong size")

    if encryption in _CBC_HASHES:
        half = len(cek) // 2
        mac_key, enc_key = cek[:half], cek[half:]
        if not constant_time.bytes_eq(tag, _cbc_mac(mac_key, aad, iv, ciphertext, encryption)):
            raise DecryptionError("authentication tag mismatch")
        decryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = PKCS7(algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()

    return AESGCM(cek).decrypt(iv, ciphertext + tag, aad)


def encrypt(
    plaintext: bytes,
    key: Key,
    alg: str,
    enc: str,
    *,
    content_type: str | None = None,
) -> str:
    """Encrypt plaintext for the recipient ``key`` and return the compact serialization.

    Args:
        plaintext: Bytes to encrypt.
        key: Recipient key; public (or symmetric) material.
        alg: Key management algorithm.
        enc: Content encryption algorithm.
        content_type: Optional ``cty`` header, e.g. ``"JWT"`` for a nested token.

    Raises:
        UnsupportedAlgorithmError: If ``alg`` or ``enc`` is not implemented.
        EncryptionError: If the key does not fit the algorithm.
    """
    algorithm = _key_algorithm(alg)
    encryption = _content_encryption(enc)

    try:
        cek, encrypted_key, extra = _wrap_key(key, algorithm, encryption)
    except ValueError as e:
        raise EncryptionError(f"Failed to wrap content key with {alg}: {e}") from e

    header: dict[str, Any] = {"alg": algorithm.value, "enc": encryption.value}
    if key.id:
        header["kid"] = key.id
    if content_type:
        header["cty"] = content_type
    header.update(extra)

    header_b64 = _b64(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    iv, ciphertext, tag = _encrypt_content(plaintext, cek, header_b64.encode("ascii"), encryption)

    return ".".join(
        [
            header_b64,
            _b64(encrypted_key),
            _b64(iv),
            _b64(ciphertext),
            _b64(tag),
        ]
    )


def parse_header(token: str) -> dict[str, Any]:
    """Return the protected header of a compact JWE.

    Raises:
        MalformedTokenError: If the token is not a five-segment compact JWE.
    """
    parts = token.split(".")
    if len(parts) != JWE_SEGMENTS:
        raise MalformedTokenError(
            "invalid jwt/jwe token",
            details={"reason": f"expected {JWE_SEGMENTS} segments, got {len(parts)}"},
        )
    try:
        header = json.loads(base64url_decode(parts[0]))
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedTokenError(f"Invalid JWE header: {e}") from e
    if not isinstance(header, dict):
        raise MalformedTokenError("JWE header must be a JSON object")
    return header


def decrypt(token: str, key: Key) -> bytes:
    """Decrypt a compact JWE with the recipient's private (or symmetric) key.

    Raises:
        MalformedTokenError: If the token cannot be parsed.
        UnsupportedAlgorithmError: If the header names an unimplemented algorithm.
        DecryptionError: If the key is wrong or the ciphertext was tampered with.
    """
    header = parse_header(token)
    if "zip" in header:
        raise UnsupportedAlgorithmError(f"zip={header['zip']}")

    algorithm = _key_algorithm(str(header.get("alg", "")))
    encryption = _content_encryption(str(header.get("enc", "")))

    header_b64, encrypted_key_b64, iv_b64, ciphertext_b64, tag_b64 = token.split(".")
    try:
        encrypted_key = base64url_decode(encrypted_key_b64)
        iv = base64url_decode(iv_b64)
        ciphertext = base64url_decode(ciphertext_b64)
        tag = base64url_decode(tag_b64)
    except ValueError as e:
        raise MalformedTokenError(f"Invalid JWE segment encoding: {e}") from e

    try:
        cek = _unwrap_key(key, algorithm, encryption, encrypted_key, header)
        return _decrypt_content(ciphertext, tag, cek, iv, header_b64.encode("ascii"), encryption)
    except (InvalidTag, InvalidUnwrap, ValueError) as e:
        raise DecryptionError(f"Decryption failed: {str(e) or type(e).__name__}", kid=key.id or None) from e
