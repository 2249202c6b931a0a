"""
Encryption of patient-identifying profile fields at rest.
AES-256-GCM with a random 96-bit nonce per value; the key comes from
PHI_ENCRYPTION_KEY (base64, 32 bytes).
"""
import os
import base64
import hashlib
import hmac
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

NONCE_SIZE = 12


def _load_key() -> bytes:
    key_b64 = os.getenv('PHI_ENCRYPTION_KEY')
    if not key_b64:
        raise ValueError("PHI_ENCRYPTION_KEY environment variable not set")
    key = base64.b64decode(key_b64)
    if len(key) != 32:
        raise ValueError("PHI_ENCRYPTION_KEY must be 32 bytes (256 bits)")
    return key


class PHIEncryptor:
    """Encrypts and decrypts PHI strings and derives lookup hashes."""

    def __init__(self, key: bytes = None):
        self._key = key or _load_key()
        self._aesgcm = AESGCM(self._key)

    def encrypt(self, plaintext: str) -> str:
        """Return base64(nonce + ciphertext)."""
        if not plaintext:
            return plaintext
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode('utf-8'), None)
        return base64.b64encode(nonce + ciphertext).decode('utf-8')

    def decrypt(self, encrypted_b64: str) -> str:
        if not encrypted_b64:
            return encrypted_b64
        raw = base64.b64decode(encrypted_b64)
        plaintext = self._aesgcm.decrypt(raw[:NONCE_SIZE], raw[NONCE_SIZE:], None)
        return plaintext.decode('utf-8')

    def lookup_hash(self, value: str) -> str:
        """Deterministic HMAC-SHA256 of a normalized value, for equality lookups."""
        normalized = value.strip().lower().encode('utf-8')
        return hmac.new(self._key, normalized, hashlib.sha256).hexdigest()


_encryptor = None


def get_encryptor() -> PHIEncryptor:
    """Get or create the PHI encryptor singleton."""
    global _encryptor
    if _encryptor is None:
        _encryptor = PHIEncryptor()
    return _encryptor


def encrypt_phi(value: str) -> str:
    return get_encryptor().encrypt(value)


def decrypt_phi(value: str) -> str:
    return get_encryptor().decrypt(value)


def hash_email(email: str) -> str:
    return get_encryptor().lookup_hash(email)
