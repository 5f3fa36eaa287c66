# src/wg_hub/firewall.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List


# -----------------------------
# Data
# -----------------------------

CH_ROUTE = "wgroute"
WG_IFACE = "wg0"
UPLINK_IFACE = "eth0"

SEPARATOR = "; "


@dataclass
class Script:
    """Liste ordonnée de commandes shell, rendue en une ou plusieurs lignes."""

    lines: List[str] = field(default_factory=list)

    def add_line(self, line: str) -> None:
        self.lines.append(line)

    def to_multiline(self) -> str:
        return "\n".join(self.lines)

    def to_one_line(self) -> str:
        return SEPARATOR.join(self.lines)


# -----------------------------
# Low-level helpers
# -----------------------------

def _ensure_chain(chain: str) -> str:
    return f'iptables -N {chain} || echo "{chain} chain already exists"'


def _ensure_jump(parent: str, wg_iface: str, jump_chain: str) -> str:
    rule = f"{parent} -i {wg_iface} -j {jump_chain}"
    return f"iptables -C {rule} || iptables -A {rule}"


def _masquerade(uplink_iface: str) -> str:
    return f"iptables -t nat -A POSTROUTING -o {uplink_iface} -j MASQUERADE"


def _flush_chain(chain: str) -> str:
    return f"iptables -F {chain}"


def _accept(chain: str, dest: str, wg_iface: str, uplink_iface: str) -> str:
    return f"iptables -A {chain} -d {dest} -i {wg_iface} -o {uplink_iface} -j ACCEPT"


def _reject(chain: str) -> str:
    return f"iptables -A {chain} -j REJECT --reject-with icmp-host-prohibited"


# -----------------------------
# Public API
# -----------------------------

def build_route_script(
    accept: Iterable[str],
    wg_iface: str = WG_IFACE,
    uplink_iface: str = UPLINK_IFACE,
    chain: str = CH_ROUTE,
) -> Script:
    """
    Tout le trafic venant du tunnel passe par `chain` :
    on accepte les destinations listées, le reste est rejeté.
    Le script est rejoué à chaque `wg-quick up`, l'ordre doit être conservé.
    """
    s = Script()

    s.add_line(_ensure_chain(chain))
    s.add_line(_ensure_jump("FORWARD", wg_iface, chain))
    s.add_line(_masquerade(uplink_iface))

    # idempotent: on reconstruit la chaîne à chaque fois
    s.add_line(_flush_chain(chain))

    for dest in accept:
        s.add_line(_accept(chain, dest, wg_iface, uplink_iface))

    # fallback: reject
    s.add_line(_reject(chain))
    s.add_line('echo "Done"')

    return s


def build_route_commands(
    accept: Iterable[str],
    wg_iface: str = WG_IFACE,
    uplink_iface: str = UPLINK_IFACE,
    chain: str = CH_ROUTE,
) -> List[str]:
    return list(build_route_script(accept, wg_iface, uplink_iface, chain).lines)
