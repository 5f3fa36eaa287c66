# src/wg_hub/topology.py
from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .firewall import UPLINK_IFACE, WG_IFACE, build_route_script
from .ipam import member_address, parse_network, server_address
from .keys import derive_public_key, resolve_private_key
from .log_config import get_logger
from .models import (
    AddressError,
    DuplicatePublicKey,
    InterfaceDescriptor,
    InvalidCIDR,
    KeyResolutionError,
    MemberNode,
    NetworkSpec,
    NodeDescriptor,
    PeerDescriptor,
)

logger = get_logger(__name__)


def build_post_up(
    spec: NetworkSpec,
    wg_iface: str = WG_IFACE,
    uplink_iface: str = UPLINK_IFACE,
) -> Optional[str]:
    # pas de routes => pas de firewall du tout
    if spec.routes is None:
        return None
    return build_route_script(spec.routes.accept, wg_iface, uplink_iface).to_one_line()


def _member_node(
    spec: NetworkSpec,
    address: str,
    server_public_key: str,
) -> NodeDescriptor:
    dns = ",".join(spec.dns)
    accept = spec.routes.accept if spec.routes is not None else ()

    return NodeDescriptor(
        interface=InterfaceDescriptor(
            address=address,
            dns=dns if dns != "" else None,
        ),
        peers=(
            PeerDescriptor(
                public_key=server_public_key,
                endpoint=f"{spec.endpoint}:{spec.listen_port}",
                allowed_ips=", ".join(accept),
            ),
        ),
    )


def build_nodes(
    spec: NetworkSpec,
    wg_iface: str = WG_IFACE,
    uplink_iface: str = UPLINK_IFACE,
) -> Tuple[NodeDescriptor, List[MemberNode]]:
    """
    Construit le nœud serveur et un nœud par membre non révoqué.

    L'adresse d'un membre dépend uniquement de sa position dans la liste
    d'origine (ordinal = index + 1) : révoquer un membre laisse un trou
    et ne décale jamais les adresses des suivants.
    """
    try:
        private_key = resolve_private_key(spec.private_key_source)
        public_key = derive_public_key(private_key)
    except KeyResolutionError as e:
        raise type(e)(f"privateKey: {e}") from e

    try:
        parse_network(spec.cidr)
        address = server_address(spec.cidr)
    except AddressError as e:
        raise type(e)(f"cidr: {e}") from e

    if spec.routes is None:
        logger.warning("No routes configured: no firewall installed, members route nothing")
    else:
        for i, dest in enumerate(spec.routes.accept):
            try:
                parse_network(dest)
            except InvalidCIDR as e:
                raise InvalidCIDR(f"routes.accept[{i}]: {e}") from e

    server_peers: List[PeerDescriptor] = []
    members: List[MemberNode] = []
    seen: Dict[str, int] = {}

    for idx, user in enumerate(spec.users):
        if user.revoked:
            logger.debug("users[%d] is revoked, skipping", idx)
            continue

        try:
            ip = member_address(spec.cidr, idx)
        except AddressError as e:
            raise type(e)(f"users[{idx}]: {e}") from e

        if user.public_key in seen:
            raise DuplicatePublicKey(
                f"users[{idx}]: publicKey duplicates users[{seen[user.public_key]}]"
            )
        seen[user.public_key] = idx

        server_peers.append(PeerDescriptor(public_key=user.public_key, allowed_ips=ip))
        members.append(
            MemberNode(
                index=idx,
                public_key=user.public_key,
                node=_member_node(spec, ip, public_key),
            )
        )

    server = NodeDescriptor(
        interface=InterfaceDescriptor(
            address=address,
            listen_port=spec.listen_port,
            private_key=private_key,
            post_up=build_post_up(spec, wg_iface, uplink_iface),
        ),
        peers=tuple(server_peers),
    )

    logger.info(
        "Built server %s with %d peer(s) (%d revoked)",
        address,
        len(server_peers),
        len(spec.users) - len(server_peers),
    )
    return server, members
