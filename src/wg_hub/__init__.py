"""Generate WireGuard hub-and-spoke configurations from a network description."""

from .topology import build_nodes
from .wireguard import render_node

__all__ = ["build_nodes", "render_node"]
