"""HMAC verification of SonarQube webhook bodies.

SonarQube signs each delivery with the project's webhook secret and sends the
lowercase hex HMAC-SHA256 of the raw body in ``X-Sonar-Webhook-HMAC-SHA256``.
"""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Sonar-Webhook-HMAC-SHA256"


def sign(body: bytes, secret: str) -> str:
    """Return the hex HMAC-SHA256 of *body* under *secret*."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify(body: bytes, secret: str, signature: str | None) -> bool:
    """Return True if *signature* matches *body*.

    Must be given the raw request bytes, before any JSON decoding. A missing
    signature or secret never verifies.
    """
    if not signature or not secret:
        return False
    expected = sign(body, secret).encode("ascii")
    return hmac.compare_digest(expected, signature.encode("utf-8", "surrogateescape"))
