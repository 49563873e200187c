"""VAPID key loading and generation."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VapidKeys:
    """Application server keys, base64url encoded (raw EC point / scalar)."""

    public_key: str
    private_key: str
    subject: str


def generate_vapid_keys() -> tuple[str, str]:
    """Generate a P-256 key pair in the encoding browsers and pywebpush expect.

    Returns:
        Tuple of (public_key, private_key)
    """
    vapid = Vapid()
    vapid.generate_keys()
    public_raw = vapid.public_key.public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    private_raw = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return b64urlencode(public_raw), b64urlencode(private_raw)


def get_vapid_keys(
    keys_path: Path,
    subject: str,
    public_key: str = "",
    private_key: str = "",
) -> VapidKeys:
    """Resolve the VAPID keys.

    Explicit keys (environment) win. Otherwise the key file is read, or
    created on first run. Platforms with ephemeral storage must use
    environment variables or every restart invalidates all subscriptions.
    """
    if public_key and private_key:
        return VapidKeys(public_key=public_key, private_key=private_key, subject=subject)

    if keys_path.exists():
        with open(keys_path, encoding="utf-8") as f:
            data = json.load(f)
        return VapidKeys(
            public_key=data["publicKey"], private_key=data["privateKey"], subject=subject
        )

    public_key, private_key = generate_vapid_keys()
    keys_path.parent.mkdir(parents=True, exist_ok=True)
    with open(keys_path, "w", encoding="utf-8") as f:
        json.dump({"publicKey": public_key, "privateKey": private_key}, f, indent=2)
    os.chmod(keys_path, 0o600)
    logger.warning(
        f"Generated new VAPID keys at {keys_path}. "
        "For production, set VAPID_PUBLIC_KEY and VAPID_PRIVATE_KEY env vars."
    )
    return VapidKeys(public_key=public_key, private_key=private_key, subject=subject)
