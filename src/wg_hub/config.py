# src/wg_hub/config.py
from __future__ import annotations
import ipaddress
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from jsonschema import Draft7Validator

from .log_config import get_logger
from .models import (
    ConfigLoadError,
    EnvVarKeySource,
    FileKeySource,
    Member,
    NetworkSpec,
    Routes,
)

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path("server.yml")

_STRING_LIST = {"type": ["array", "null"], "items": {"type": "string", "minLength": 1}}

SERVER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["privateKey", "listenPort", "cidr", "endpoint"],
    "properties": {
        "privateKey": {
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "envVar": {"type": "string", "minLength": 1},
                "file": {"type": "string", "minLength": 1},
            },
            "oneOf": [{"required": ["envVar"]}, {"required": ["file"]}],
        },
        "listenPort": {"type": "integer", "minimum": 0, "maximum": 65535},
        "cidr": {"type": "string", "minLength": 1},
        "routes": {
            "type": ["object", "null"],
            "additionalProperties": False,
            "properties": {"accept": _STRING_LIST},
        },
        "endpoint": {"type": "string", "minLength": 1},
        "dns": _STRING_LIST,
        "users": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["publicKey"],
                "properties": {
                    "publicKey": {"type": "string", "minLength": 1},
                    "revoked": {"type": "boolean"},
                },
            },
        },
    },
}

_validator = Draft7Validator(SERVER_SCHEMA)


def _camel(key: str) -> str:
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), key)


def _normalize(data: Any) -> Any:
    """listen_port -> listenPort, récursivement (comme protojson)"""
    if isinstance(data, dict):
        return {_camel(str(k)): _normalize(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_normalize(v) for v in data]
    return data


def _format_path(path) -> str:
    out = "server"
    for part in path:
        out += f"[{part}]" if isinstance(part, int) else f".{part}"
    return out


def validate_server_dict(data: Any) -> list[str]:
    """Return the list of schema violations, empty when `data` is valid."""
    errors = sorted(_validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    return [f"{_format_path(e.absolute_path)}: {e.message}" for e in errors]


def validate_addresses(data: dict) -> list[str]:
    """Les routes et DNS finissent dans PostUp/DNS : on n'accepte que des adresses."""
    issues = []
    for i, dest in enumerate((data.get("routes") or {}).get("accept") or ()):
        try:
            ipaddress.ip_network(dest, strict=False)
        except ValueError:
            issues.append(f"server.routes.accept[{i}]: {dest!r} is not a CIDR range")
    for i, addr in enumerate(data.get("dns") or ()):
        try:
            ipaddress.ip_address(addr)
        except ValueError:
            issues.append(f"server.dns[{i}]: {addr!r} is not an IP address")
    return issues


def _key_source(data: dict) -> object:
    if "envVar" in data:
        return EnvVarKeySource(name=data["envVar"])
    return FileKeySource(path=data["file"])


def dict_to_spec(data: dict) -> NetworkSpec:
    data = _normalize(data)

    issues = validate_server_dict(data)
    if not issues:
        issues = validate_addresses(data)
    if issues:
        for msg in issues:
            logger.error(msg)
        raise ConfigLoadError("; ".join(issues))

    routes = None
    if data.get("routes") is not None:
        routes = Routes(accept=tuple(data["routes"].get("accept") or ()))

    users = tuple(
        Member(public_key=u["publicKey"], revoked=u.get("revoked", False))
        for u in data.get("users") or ()
    )

    return NetworkSpec(
        private_key_source=_key_source(data["privateKey"]),
        listen_port=data["listenPort"],
        cidr=data["cidr"],
        endpoint=data["endpoint"],
        routes=routes,
        dns=tuple(data.get("dns") or ()),
        users=users,
    )


def load_network_spec(path: Optional[Path] = None) -> NetworkSpec:
    path = path or DEFAULT_CONFIG_PATH
    try:
        with path.open("r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigLoadError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigLoadError(f"Config file unreadable: {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(doc, dict) or "server" not in doc:
        raise ConfigLoadError(f"Missing required 'server' section in {path}")
    if not isinstance(doc["server"], dict):
        raise ConfigLoadError(f"'server' section in {path} must be a mapping")

    spec = dict_to_spec(doc["server"])
    logger.info("Loaded %d user(s) from %s", len(spec.users), path)
    return spec
