# src/wg_hub/models.py
from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


# ---------- Erreurs ----------

class WgHubError(Exception):
    """Base class for all errors raised by wg_hub"""


class ConfigLoadError(WgHubError):
    pass


class KeyResolutionError(WgHubError):
    pass


class KeyNotFound(KeyResolutionError):
    pass


class UnsupportedKeySource(KeyResolutionError):
    pass


class InvalidKeyMaterial(KeyResolutionError):
    pass


class AddressError(WgHubError):
    pass


class InvalidCIDR(AddressError):
    pass


class AddressExhausted(AddressError):
    pass


class DuplicatePublicKey(WgHubError):
    pass


class OutputError(WgHubError):
    pass


# ---------- Sources de clé privée ----------

@dataclass(frozen=True)
class EnvVarKeySource:
    name: str  # ex "WG_PRIVATE_KEY"

    def resolve(self) -> str:
        val = os.environ.get(self.name, "").strip()
        if val == "":
            raise KeyNotFound(f"env var {self.name} is empty")
        return val


@dataclass(frozen=True)
class FileKeySource:
    path: str  # ex "/run/secrets/wg0.key"

    def resolve(self) -> str:
        try:
            val = Path(self.path).read_text(encoding="utf-8").strip()
        except OSError as e:
            raise KeyNotFound(f"key file {self.path} is unreadable: {e}") from e
        if val == "":
            raise KeyNotFound(f"key file {self.path} is empty")
        return val


# ---------- Description du réseau (entrée) ----------

@dataclass(frozen=True)
class Member:
    public_key: str
    revoked: bool = False


@dataclass(frozen=True)
class Routes:
    accept: Tuple[str, ...] = ()  # ex ("10.1.0.0/16",)


@dataclass(frozen=True)
class NetworkSpec:
    private_key_source: object     # EnvVarKeySource | FileKeySource
    listen_port: int               # ex: 51820
    cidr: str                      # ex: "10.0.0.0/24"
    endpoint: str                  # ex: "vpn.example.com"
    routes: Optional[Routes] = None
    dns: Tuple[str, ...] = ()
    users: Tuple[Member, ...] = ()  # l'ordre détermine les adresses


# ---------- Nœuds générés (sortie) ----------

@dataclass(frozen=True)
class PeerDescriptor:
    public_key: str
    allowed_ips: str               # ex "10.0.0.2/32"
    endpoint: Optional[str] = None  # ex "vpn.example.com:51820"


@dataclass(frozen=True)
class InterfaceDescriptor:
    address: str                   # ex "10.0.0.1/24"
    listen_port: Optional[int] = None
    private_key: Optional[str] = None
    dns: Optional[str] = None
    pre_up: Optional[str] = None
    post_up: Optional[str] = None
    pre_down: Optional[str] = None
    post_down: Optional[str] = None


@dataclass(frozen=True)
class NodeDescriptor:
    interface: InterfaceDescriptor
    peers: Tuple[PeerDescriptor, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class MemberNode:
    index: int                     # position dans la liste d'origine
    public_key: str
    node: NodeDescriptor
