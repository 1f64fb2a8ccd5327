"""
Secure Link Codec

Builds and parses the three query parameters carried by verification and
reset links:

    e  URL-safe base64 of the identifier, padding stripped
    t  the single-use token
    h  integrity stamp: short digest of the current time window and the secret

The stamp only flags gross tampering or very old links; the token is what
authorizes the redemption.
"""

import base64
import binascii
import hashlib
import re
from dataclasses import dataclass
from datetime import UTC
from typing import Mapping, Optional
from urllib.parse import urlencode

from .clock import Clock

_URLSAFE_ALPHABET = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class LinkParams:
    identifier: str
    token: str
    stamp: str


class LinkCodec:
    def __init__(self, secret: Optional[str], clock: Clock, stamp_window_seconds: int = 3600):
        self._secret = secret or ""
        self.clock = clock
        self.stamp_window_seconds = stamp_window_seconds

    @staticmethod
    def encode_identifier(identifier: str) -> str:
        encoded = base64.urlsafe_b64encode(identifier.encode("utf-8")).decode("ascii")
        return encoded.rstrip("=")

    @staticmethod
    def decode_identifier(encoded: str) -> str:
        """
        Inverse of encode_identifier.

        Raises:
            ValueError: not URL-safe base64 or not UTF-8
        """
        if not encoded:
            return ""
        if not _URLSAFE_ALPHABET.match(encoded) or len(encoded) % 4 == 1:
            raise ValueError("Malformed encoded identifier")
        padded = encoded + "=" * (-len(encoded) % 4)
        try:
            return base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ValueError("Malformed encoded identifier") from exc

    def integrity_stamp(self) -> str:
        return self._stamp_for_window(self._current_window())

    def stamp_is_fresh(self, stamp: str) -> bool:
        """Accepts stamps from the current or the previous window"""
        window = self._current_window()
        return stamp in (self._stamp_for_window(window), self._stamp_for_window(window - 1))

    def build_params(self, identifier: str, token: str) -> str:
        return urlencode(
            {
                "e": self.encode_identifier(identifier),
                "t": token,
                "h": self.integrity_stamp(),
            }
        )

    def parse_link_params(self, params: Mapping[str, str]) -> Optional[LinkParams]:
        """Returns None for any missing parameter or decode failure"""
        encoded = params.get("e")
        token = params.get("t")
        stamp = params.get("h")
        if not encoded or not token or not stamp:
            return None
        try:
            identifier = self.decode_identifier(encoded)
        except ValueError:
            return None
        if not identifier:
            return None
        return LinkParams(identifier=identifier, token=token, stamp=stamp)

    def _current_window(self) -> int:
        seconds = self.clock.now().replace(tzinfo=UTC).timestamp()
        return int(seconds) // self.stamp_window_seconds

    def _stamp_for_window(self, window: int) -> str:
        digest = hashlib.sha256(f"{window}{self._secret}".encode("utf-8")).hexdigest()
        return digest[:16]
