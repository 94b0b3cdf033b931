"""Environment configuration."""

from pathlib import Path

import pytest

from eth_oft.config import load_config
from eth_oft.layerzero.constants import DEFAULT_TX_TIMEOUT
from eth_oft.layerzero.exceptions import ConfigurationError


@pytest.fixture()
def environ(private_key, owner_address, factory_address) -> dict:
    return {
        "PRIVATE_KEY": private_key,
        "OWNER_ADDRESS": owner_address.lower(),
        "JSON_RPC_BASE_SEPOLIA": "https://base-sepolia.example.com",
        "JSON_RPC_ARBITRUM_SEPOLIA": "https://arbitrum-sepolia.example.com",
        "CREATE2_FACTORY_ARBITRUM_SEPOLIA": factory_address,
        "OFT_ARTIFACT_PATH": "out/MyOFT.sol/MyOFT.json",
    }


def test_load_config(environ, owner_address, signer_address, factory_address):
    config = load_config(environ)

    assert config.owner_address == owner_address
    assert config.signer_address == signer_address
    assert config.tx_timeout == DEFAULT_TX_TIMEOUT
    assert config.oft_artifact_path == Path("out/MyOFT.sol/MyOFT.json")
    assert config.factory_artifact_path is None

    # Built-in table order, not environment order
    assert [c.name for c in config.chains] == ["arbitrum_sepolia", "base_sepolia"]
    arbitrum, base = config.chains
    assert arbitrum.factory_address == factory_address
    assert arbitrum.eid == 40231
    assert arbitrum.endpoint_address == "0x6EDCE65403992e310A62460808c4b910D972f10f"
    assert base.factory_address is None


def test_private_key_not_in_repr(environ, private_key):
    config = load_config(environ)
    assert private_key not in repr(config)


@pytest.mark.parametrize(
    "change, message",
    [
        ({"PRIVATE_KEY": None}, "Missing PRIVATE_KEY"),
        ({"PRIVATE_KEY": "0x1234"}, "not a valid private key"),
        ({"OWNER_ADDRESS": None}, "Missing OWNER_ADDRESS"),
        ({"OWNER_ADDRESS": "0xnope"}, "OWNER_ADDRESS is not a valid address"),
        ({"JSON_RPC_BASE_SEPOLIA": None, "JSON_RPC_ARBITRUM_SEPOLIA": "  "}, "No chains configured"),
        ({"CREATE2_FACTORY_ARBITRUM_SEPOLIA": "factory"}, "CREATE2_FACTORY_ARBITRUM_SEPOLIA is not a valid address"),
        ({"OFT_TX_TIMEOUT": "soon"}, "OFT_TX_TIMEOUT is not a number"),
    ],
)
def test_load_config_errors(environ, change, message):
    for key, value in change.items():
        if value is None:
            environ.pop(key)
        else:
            environ[key] = value

    with pytest.raises(ConfigurationError, match=message):
        load_config(environ)


def test_bad_private_key_not_echoed(environ):
    environ["PRIVATE_KEY"] = "0xdeadbeef"
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(environ)
    assert "deadbeef" not in str(exc_info.value)


def test_tx_timeout(environ):
    environ["OFT_TX_TIMEOUT"] = "30"
    assert load_config(environ).tx_timeout == 30.0
