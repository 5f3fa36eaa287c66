# src/wg_hub/wireguard.py
from __future__ import annotations
from pathlib import Path
from typing import Iterable, List, Optional

import qrcode

from .log_config import get_logger
from .models import MemberNode, NodeDescriptor, OutputError

logger = get_logger(__name__)

DEFAULT_CONF_DIR = Path("/etc/wireguard")

# Ordre fixe des directives optionnelles de [Interface]
_INTERFACE_FIELDS = (
    ("ListenPort", "listen_port"),
    ("PrivateKey", "private_key"),
    ("DNS", "dns"),
    ("PreUp", "pre_up"),
    ("PostUp", "post_up"),
    ("PreDown", "pre_down"),
    ("PostDown", "post_down"),
)


# ---------- Rendu des configs ----------

def render_node(node: NodeDescriptor) -> str:
    """
    Rend un nœud au format wg-quick.
    Une directive optionnelle est écrite dès qu'elle est présente (non None),
    même si sa valeur est vide.
    """
    i = node.interface

    lines = [
        "[Interface]",
        f"Address = {i.address}",
    ]

    for directive, attr in _INTERFACE_FIELDS:
        value = getattr(i, attr)
        if value is not None:
            lines.append(f"{directive} = {value}")

    lines.append("")  # blank line

    for p in node.peers:
        lines.append("[Peer]")
        lines.append(f"PublicKey = {p.public_key}")
        if p.endpoint is not None:
            lines.append(f"Endpoint = {p.endpoint}")
        lines.append(f"AllowedIPs = {p.allowed_ips}")
        lines.append("")  # blank

    return "\n".join(lines).rstrip("\n") + "\n"


def member_conf_name(member: MemberNode) -> str:
    return f"member-{member.index}"


# ---------- Écriture des fichiers ----------

def server_conf_path(interface: str = "wg0") -> Path:
    return DEFAULT_CONF_DIR / f"{interface}.conf"


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Attention aux permissions : la config contient la clé privée
        with path.open("w", encoding="utf-8") as f:
            f.write(text)
        path.chmod(0o600)
    except OSError as e:
        raise OutputError(f"failed to write {path}: {e}") from e


def write_server_conf(node: NodeDescriptor, path: Optional[Path] = None) -> Path:
    """
    Écrit /etc/wireguard/wg0.conf (ou `path`)
    """
    if path is None:
        path = server_conf_path()

    _write_text(path, render_node(node))
    logger.info("Server config written to %s", path)
    return path


def write_member_confs(members: Iterable[MemberNode], directory: Path) -> List[Path]:
    paths = []
    for m in members:
        path = directory / f"{member_conf_name(m)}.conf"
        _write_text(path, render_node(m.node))
        paths.append(path)
    logger.info("%d member config(s) written to %s", len(paths), directory)
    return paths


def write_member_qr(members: Iterable[MemberNode], directory: Path) -> List[Path]:
    paths = []
    for m in members:
        path = directory / f"{member_conf_name(m)}.png"
        img = qrcode.make(render_node(m.node))
        try:
            directory.mkdir(parents=True, exist_ok=True)
            img.save(str(path))
        except OSError as e:
            raise OutputError(f"failed to write {path}: {e}") from e
        paths.append(path)
    logger.info("%d QR code(s) written to %s", len(paths), directory)
    return paths
