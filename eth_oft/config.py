"""Process configuration from environment variables.

Read once at start with :py:func:`load_config` and passed down explicitly.

``PRIVATE_KEY``
    Private key of the account that deploys, configures and bridges. Required.

``OWNER_ADDRESS``
    Default owner of deployed OFT contracts. Required.

``JSON_RPC_<CHAIN>``
    RPC URL per chain, e.g. ``JSON_RPC_ARBITRUM_SEPOLIA``. A chain is
    available only when its RPC URL is set. At least one is required.

``CREATE2_FACTORY_<CHAIN>``
    CREATE2 factory address per chain, e.g. ``CREATE2_FACTORY_BASE_SEPOLIA``.
    Needed for deployments on that chain.

``OFT_ARTIFACT_PATH``
    Foundry / Hardhat JSON of the OFT contract (ABI and bytecode).

``CREATE2_FACTORY_ARTIFACT_PATH``
    Foundry / Hardhat JSON of the CREATE2 factory.

``OFT_TX_TIMEOUT``
    Seconds to wait for each transaction receipt. Default 180.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from eth_account import Account
from eth_typing import HexAddress
from eth_utils import is_hex_address, to_checksum_address

from eth_oft.layerzero.chain import ChainConfig
from eth_oft.layerzero.constants import (
    CHAIN_FACTORY_ENV_VARS,
    CHAIN_ID_MAP,
    CHAIN_RPC_ENV_VARS,
    DEFAULT_TX_TIMEOUT,
    LAYERZERO_EID_MAP,
    LAYERZERO_ENDPOINT_MAP,
)
from eth_oft.layerzero.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class OFTConfig:
    """Immutable process configuration."""

    #: Hex private key of the signing account
    private_key: str = field(repr=False)

    #: Default owner of deployed OFTs
    owner_address: HexAddress

    #: Chains with an RPC URL, in built-in table order
    chains: tuple[ChainConfig, ...]

    #: OFT contract artifact JSON
    oft_artifact_path: Path | None = None

    #: CREATE2 factory artifact JSON
    factory_artifact_path: Path | None = None

    #: Receipt wait timeout in seconds
    tx_timeout: float = DEFAULT_TX_TIMEOUT

    @property
    def signer_address(self) -> HexAddress:
        return Account.from_key(self.private_key).address


def _get(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _read_address(environ: Mapping[str, str], name: str) -> HexAddress | None:
    value = _get(environ, name)
    if value is None:
        return None
    if not is_hex_address(value):
        raise ConfigurationError(f"{name} is not a valid address: {value}")
    return to_checksum_address(value)


def load_config(environ: Mapping[str, str] | None = None) -> OFTConfig:
    """Read and validate the configuration.

    :param environ:
        Environment to read. Defaults to :py:data:`os.environ`.

    :raise ConfigurationError:
        Required variables missing or malformed.
    """
    if environ is None:
        environ = os.environ

    private_key = _get(environ, "PRIVATE_KEY")
    if not private_key:
        raise ConfigurationError("Missing PRIVATE_KEY in environment variables.")

    try:
        account = Account.from_key(private_key)
    except (ValueError, TypeError) as e:
        # Do not echo the key
        raise ConfigurationError(f"PRIVATE_KEY is not a valid private key: {e.__class__.__name__}") from None

    owner_address = _read_address(environ, "OWNER_ADDRESS")
    if not owner_address:
        raise ConfigurationError("Missing OWNER_ADDRESS in environment variables.")

    chains = []
    for name, rpc_env_var in CHAIN_RPC_ENV_VARS.items():
        rpc_url = _get(environ, rpc_env_var)
        if not rpc_url:
            continue
        chains.append(
            ChainConfig(
                name=name,
                rpc_url=rpc_url,
                chain_id=CHAIN_ID_MAP[name],
                endpoint_address=to_checksum_address(LAYERZERO_ENDPOINT_MAP[name]),
                eid=LAYERZERO_EID_MAP[name],
                factory_address=_read_address(environ, CHAIN_FACTORY_ENV_VARS[name]),
            )
        )

    if not chains:
        raise ConfigurationError(f"No chains configured. Set at least one of: {', '.join(CHAIN_RPC_ENV_VARS.values())}")

    timeout_text = _get(environ, "OFT_TX_TIMEOUT")
    try:
        tx_timeout = float(timeout_text) if timeout_text else DEFAULT_TX_TIMEOUT
    except ValueError:
        raise ConfigurationError(f"OFT_TX_TIMEOUT is not a number: {timeout_text}") from None

    oft_artifact_path = _get(environ, "OFT_ARTIFACT_PATH")
    factory_artifact_path = _get(environ, "CREATE2_FACTORY_ARTIFACT_PATH")

    config = OFTConfig(
        private_key=private_key,
        owner_address=owner_address,
        chains=tuple(chains),
        oft_artifact_path=Path(oft_artifact_path) if oft_artifact_path else None,
        factory_artifact_path=Path(factory_artifact_path) if factory_artifact_path else None,
        tx_timeout=tx_timeout,
    )

    logger.info(
        "Configuration loaded, signer %s, owner %s, chains: %s",
        account.address,
        owner_address,
        ", ".join(c.name for c in chains),
    )
    return config
