# src/wg_hub/keys.py
from __future__ import annotations
import base64
import binascii

from cryptography.hazmat.primitives.asymmetric import x25519
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from .log_config import get_logger
from .models import InvalidKeyMaterial, UnsupportedKeySource

logger = get_logger(__name__)

KEY_LEN = 32


def resolve_private_key(source) -> str:
    """
    Retourne la clé privée brute (base64) à partir de sa source.
    Chaque type de source porte sa propre méthode resolve().
    """
    resolve = getattr(source, "resolve", None)
    if not callable(resolve):
        raise UnsupportedKeySource(
            f"unknown private key store: {type(source).__name__}"
        )
    key = resolve()
    logger.debug("Private key resolved from %s", source)
    return key


def _decode(key: str) -> bytes:
    try:
        raw = base64.b64decode(key.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidKeyMaterial(f"key is not valid base64: {e}") from e
    if len(raw) != KEY_LEN:
        raise InvalidKeyMaterial(
            f"key must decode to {KEY_LEN} bytes, got {len(raw)}"
        )
    return raw


def derive_public_key(private_key: str) -> str:
    """Équivalent de `wg pubkey`."""
    priv = x25519.X25519PrivateKey.from_private_bytes(_decode(private_key))
    pub = priv.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
    return base64.b64encode(pub).decode("ascii")


def generate_private_key() -> str:
    priv = x25519.X25519PrivateKey.generate()
    raw = priv.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())
    return base64.b64encode(raw).decode("ascii")


def generate_keypair() -> tuple[str, str]:
    priv = generate_private_key()
    pub = derive_public_key(priv)
    return priv, pub
