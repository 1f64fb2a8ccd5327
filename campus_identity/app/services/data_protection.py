"""
Data Protection Layer

Deterministic field encryption and search hashes for Protected Fields.

Every value is encrypted with AES-SIV under a key derived (HKDF-SHA256) from
the process secret and the value's classification; the classification is also
bound as associated data. The search hash is an HMAC-SHA256 under a second
derived key. The same plaintext therefore produces different ciphertexts and
hashes under different classifications, and decrypting with the wrong
classification fails authentication.
"""

import base64
import binascii
import hmac
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESSIV
from cryptography.hazmat.primitives.kdf.hkdf import HKDF


class ProtectionError(Exception):
    """Encryption or decryption of a protected field failed"""


class Classification(str, Enum):
    """Tag scoping both encryption and hashing of a protected field"""

    NAME = "name"
    PHONE = "phone"
    EMAIL = "email"
    GOVERNMENT_ID = "government_id"
    LOCATION = "location"
    PASSWORD = "password"


@dataclass(frozen=True)
class ProtectedValue:
    """Ciphertext plus its paired search hash (both None for empty input)"""

    ciphertext: Optional[str]
    search_hash: Optional[str]


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_email(email: str) -> str:
    """j***n@e*****e.com style masking for log lines"""
    if not email or "@" not in email:
        return "unknown"

    user, domain = email.split("@", 1)
    if len(user) <= 2:
        masked_user = user[:1] + "*"
    else:
        masked_user = user[0] + "*" * (len(user) - 2) + user[-1]

    head, _, rest = domain.partition(".")
    if len(head) > 2:
        masked_head = head[0] + "*" * (len(head) - 2) + head[-1]
    else:
        masked_head = head[:1] + "*"

    return f"{masked_user}@{masked_head}.{rest}" if rest else f"{masked_user}@{masked_head}"


class DataProtector:
    """Encrypts, decrypts and search-hashes classified fields"""

    _ENCRYPTION_INFO = b"campus-identity/field-encryption/"
    _SEARCH_INFO = b"campus-identity/search-hash/"

    def __init__(self, secret: Optional[str]):
        self._secret = secret.encode("utf-8") if secret else None
        self._cipher_cache: Dict[Classification, AESSIV] = {}
        self._search_key_cache: Dict[Classification, bytes] = {}

    @staticmethod
    def normalize(plaintext: str, classification: Classification) -> str:
        """Canonical form hashed and encrypted for a classification"""
        if classification == Classification.EMAIL:
            return normalize_email(plaintext)
        return plaintext.strip()

    def protect(self, plaintext: Optional[str], classification: Classification) -> ProtectedValue:
        """
        Encrypt a value and compute its search hash.

        Raises:
            ProtectionError: secret unavailable or encryption failed
        """
        if not plaintext or not plaintext.strip():
            return ProtectedValue(ciphertext=None, search_hash=None)

        value = self.normalize(plaintext, classification).encode("utf-8")
        cipher = self._cipher(classification)
        try:
            encrypted = cipher.encrypt(value, [classification.value.encode("utf-8")])
        except (ValueError, OverflowError) as exc:
            raise ProtectionError(f"Encryption failed for {classification.value}") from exc

        return ProtectedValue(
            ciphertext=base64.urlsafe_b64encode(encrypted).decode("ascii"),
            search_hash=self._digest(value, classification),
        )

    def unprotect(self, ciphertext: Optional[str], classification: Classification) -> str:
        """
        Decrypt a value produced by protect() with the same classification.

        Raises:
            ProtectionError: tampered ciphertext, wrong classification, or no secret
        """
        if not ciphertext:
            return ""

        cipher = self._cipher(classification)
        try:
            raw = base64.urlsafe_b64decode(ciphertext.encode("ascii"))
            plaintext = cipher.decrypt(raw, [classification.value.encode("utf-8")])
            return plaintext.decode("utf-8")
        except (InvalidTag, binascii.Error, ValueError) as exc:
            raise ProtectionError(f"Decryption failed for {classification.value}") from exc

    def search_hash(self, plaintext: Optional[str], classification: Classification) -> Optional[str]:
        """Lookup-side digest; matches the search_hash stored by protect()"""
        if not plaintext or not plaintext.strip():
            return None
        value = self.normalize(plaintext, classification).encode("utf-8")
        return self._digest(value, classification)

    def _digest(self, value: bytes, classification: Classification) -> str:
        key = self._search_key(classification)
        message = classification.value.encode("utf-8") + b"\x00" + value
        return hmac.new(key, message, hashlib.sha256).hexdigest()

    def _cipher(self, classification: Classification) -> AESSIV:
        cipher = self._cipher_cache.get(classification)
        if cipher is None:
            key = self._derive(self._ENCRYPTION_INFO, classification, length=64)
            cipher = AESSIV(key)
            self._cipher_cache[classification] = cipher
        return cipher

    def _search_key(self, classification: Classification) -> bytes:
        key = self._search_key_cache.get(classification)
        if key is None:
            key = self._derive(self._SEARCH_INFO, classification, length=32)
            self._search_key_cache[classification] = key
        return key

    def _derive(self, info: bytes, classification: Classification, length: int) -> bytes:
        if self._secret is None:
            raise ProtectionError("Data protection secret is not configured")
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=length,
            salt=None,
            info=info + classification.value.encode("utf-8"),
        )
        return hkdf.derive(self._secret)
