"""Pytest configuration and shared fixtures for wg_hub tests."""

import base64

import pytest

from wg_hub.models import EnvVarKeySource, Member, NetworkSpec, Routes

# RFC 7748 section 6.1 (Alice)
ALICE_PRIVATE_HEX = "77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a"
ALICE_PUBLIC_HEX = "8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a"

ENV_VAR = "WG_HUB_TEST_PRIVATE_KEY"


def b64(hex_str: str) -> str:
    return base64.b64encode(bytes.fromhex(hex_str)).decode("ascii")


@pytest.fixture
def server_private_key():
    return b64(ALICE_PRIVATE_HEX)


@pytest.fixture
def server_public_key():
    return b64(ALICE_PUBLIC_HEX)


@pytest.fixture
def server_key_env(monkeypatch, server_private_key):
    """Expose the server private key through the test environment variable."""
    monkeypatch.setenv(ENV_VAR, server_private_key)
    return ENV_VAR


@pytest.fixture
def make_spec(server_key_env):
    """Factory for NetworkSpec objects with sensible defaults."""

    def _make(**overrides):
        values = {
            "private_key_source": EnvVarKeySource(server_key_env),
            "listen_port": 51820,
            "cidr": "10.0.0.0/24",
            "endpoint": "vpn.example.com",
            "routes": Routes(accept=("10.1.0.0/16",)),
            "dns": (),
            "users": (
                Member("user-a-pubkey="),
                Member("user-b-pubkey="),
                Member("user-c-pubkey=", revoked=True),
            ),
        }
        values.update(overrides)
        return NetworkSpec(**values)

    return _make


@pytest.fixture
def sample_server_dict(server_key_env):
    """Raw `server` mapping as found in a YAML description."""
    return {
        "privateKey": {"envVar": server_key_env},
        "listenPort": 51820,
        "cidr": "10.0.0.0/24",
        "endpoint": "vpn.example.com",
        "routes": {"accept": ["10.1.0.0/16"]},
        "dns": ["10.0.0.1", "1.1.1.1"],
        "users": [
            {"publicKey": "user-a-pubkey="},
            {"publicKey": "user-b-pubkey=", "revoked": False},
            {"publicKey": "user-c-pubkey=", "revoked": True},
        ],
    }


@pytest.fixture
def config_file(tmp_path, sample_server_dict):
    """Write the sample description to a temporary server.yml."""
    import yaml

    path = tmp_path / "server.yml"
    with open(path, "w") as f:
        yaml.dump({"server": sample_server_dict}, f, default_flow_style=False)
    return path
