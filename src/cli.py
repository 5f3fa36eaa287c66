import argparse
import logging
import sys
from pathlib import Path

from wg_hub.config import DEFAULT_CONFIG_PATH, load_network_spec
from wg_hub.firewall import UPLINK_IFACE, WG_IFACE, build_route_script
from wg_hub.keys import generate_keypair
from wg_hub.log_config import get_logger, set_global_log_level
from wg_hub.models import ConfigLoadError, WgHubError
from wg_hub.topology import build_nodes
from wg_hub.wireguard import (
    member_conf_name,
    render_node,
    server_conf_path,
    write_member_confs,
    write_member_qr,
    write_server_conf,
)

logger = get_logger("wg_hub.cli")


def _build(args):
    spec = load_network_spec(Path(args.config))
    return build_nodes(spec, wg_iface=args.interface, uplink_iface=args.uplink)


# ---------------------------------------------------
# Commande : generate
# ---------------------------------------------------

def cmd_generate(args):
    server, members = _build(args)

    if not args.no_write:
        path = Path(args.output) if args.output else server_conf_path(args.interface)
        write_server_conf(server, path)
        print(f"[+] Fichier serveur mis à jour : {path}", file=sys.stderr)

    print("Server")
    print(render_node(server))
    print()
    print()

    print("Users")
    for m in members:
        print(f"# {member_conf_name(m)}")
        print(render_node(m.node))


# ---------------------------------------------------
# Commande : export-members
# ---------------------------------------------------

def cmd_export_members(args):
    _, members = _build(args)

    for path in write_member_confs(members, Path(args.dir)):
        print(f"[OK] Config générée : {path}")


# ---------------------------------------------------
# Commande : generate-qr
# ---------------------------------------------------

def cmd_generate_qr(args):
    _, members = _build(args)

    for path in write_member_qr(members, Path(args.dir)):
        print(f"[OK] QR code généré : {path}")


# ---------------------------------------------------
# Commande : firewall
# ---------------------------------------------------

def cmd_firewall(args):
    spec = load_network_spec(Path(args.config))
    if spec.routes is None:
        print("# no routes configured: PostUp is omitted")
        return

    script = build_route_script(spec.routes.accept, args.interface, args.uplink)
    print(script.to_multiline())


# ---------------------------------------------------
# Commande : genkey
# ---------------------------------------------------

def cmd_genkey(args):
    priv, pub = generate_keypair()
    print(f"PrivateKey = {priv}")
    print(f"PublicKey  = {pub}")


# ---------------------------------------------------
# CLI / Parser
# ---------------------------------------------------

def _add_build_args(p):
    p.add_argument("-c", "--config", default=str(DEFAULT_CONFIG_PATH))
    p.add_argument("--interface", default=WG_IFACE)
    p.add_argument("--uplink", default=UPLINK_IFACE)


def build_parser():
    parser = argparse.ArgumentParser(prog="wg-hubgen")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("--quiet", action="store_true")
    sub = parser.add_subparsers(dest="cmd")

    # generate
    p_gen = sub.add_parser("generate")
    _add_build_args(p_gen)
    p_gen.add_argument("--output", required=False)
    p_gen.add_argument("--no-write", action="store_true")
    p_gen.set_defaults(func=cmd_generate)

    # export-members
    p_export = sub.add_parser("export-members")
    _add_build_args(p_export)
    p_export.add_argument("--dir", default="configs")
    p_export.set_defaults(func=cmd_export_members)

    # generate-qr
    p_qr = sub.add_parser("generate-qr")
    _add_build_args(p_qr)
    p_qr.add_argument("--dir", default="configs")
    p_qr.set_defaults(func=cmd_generate_qr)

    # firewall
    p_fw = sub.add_parser("firewall")
    _add_build_args(p_fw)
    p_fw.set_defaults(func=cmd_firewall)

    # genkey
    p_key = sub.add_parser("genkey")
    p_key.set_defaults(func=cmd_genkey)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_global_log_level(logging.DEBUG)
    elif args.quiet:
        set_global_log_level(logging.ERROR)
    else:
        set_global_log_level(logging.INFO)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        args.func(args)
    except ConfigLoadError as e:
        logger.error("failed to read config: %s", e)
        return 2
    except WgHubError as e:
        logger.error("%s failed: %s", args.cmd, e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
