"""Request / response tool surface.

The two operations as tools that take loosely typed JSON parameters and
return a JSON payload, ready to be plugged into any request transport::

    {"content": [{"type": "text", "text": "<json or error message>"}], "isError": false}

Errors never escape: every :py:class:`~eth_oft.layerzero.exceptions.OFTError`,
chain failure or unexpected library error becomes a payload with ``isError`` set.

Example:

.. code-block:: python

    toolkit = OFTToolkit.from_config(load_config())
    tool = TOOLS["bridge-oft"]
    payload = tool.handler(
        toolkit,
        tokenAddress="0x...",
        amount="50",
        fromChain="arbitrum_sepolia",
        toChain="base_sepolia",
        receiverAddress="0x...",
    )
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from eth_typing import HexAddress
from hexbytes import HexBytes

from eth_oft.config import OFTConfig
from eth_oft.layerzero.artifacts import ContractArtifact, load_contract_artifact
from eth_oft.layerzero.bridge import BridgeRequest, bridge_oft
from eth_oft.layerzero.chain import ChainRegistry
from eth_oft.layerzero.deployment import DeploymentRequest, deploy_and_configure_oft
from eth_oft.layerzero.exceptions import InvalidRequest, OFTError
from eth_oft.layerzero.signer import SignerProvider, Web3Factory, create_chain_web3

logger = logging.getLogger(__name__)


class OFTToolkit:
    """Shared state of the tools.

    Artifacts given as paths are read again on every call, so a recompiled
    contract is picked up without a restart.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        signers: SignerProvider,
        default_owner: HexAddress | None,
        oft_artifact_path: Path | None = None,
        factory_artifact_path: Path | None = None,
        oft_artifact: ContractArtifact | None = None,
        factory_artifact: ContractArtifact | None = None,
    ):
        self.registry = registry
        self.signers = signers
        self.default_owner = default_owner
        self.oft_artifact_path = oft_artifact_path
        self.factory_artifact_path = factory_artifact_path
        self.oft_artifact = oft_artifact
        self.factory_artifact = factory_artifact

    @classmethod
    def from_config(cls, config: OFTConfig, web3_factory: Web3Factory = create_chain_web3) -> "OFTToolkit":
        registry = ChainRegistry(config.chains)
        signers = SignerProvider(registry, config.private_key, tx_timeout=config.tx_timeout, web3_factory=web3_factory)
        return cls(
            registry=registry,
            signers=signers,
            default_owner=config.owner_address,
            oft_artifact_path=config.oft_artifact_path,
            factory_artifact_path=config.factory_artifact_path,
        )

    def get_oft_artifact(self, require_bytecode=True) -> ContractArtifact:
        if self.oft_artifact is not None:
            return self.oft_artifact
        return load_contract_artifact(self.oft_artifact_path, require_bytecode=require_bytecode)

    def get_factory_artifact(self) -> ContractArtifact:
        if self.factory_artifact is not None:
            return self.factory_artifact
        return load_contract_artifact(self.factory_artifact_path, require_bytecode=False)


def text_payload(data: dict | str, is_error=False) -> dict:
    """Wrap a result to the tool response shape."""
    text = data if isinstance(data, str) else json.dumps(data, indent=2)
    return {
        "content": [{"type": "text", "text": text}],
        "isError": is_error,
    }


def _required_str(params: dict, name: str) -> str:
    value = params.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(f"Parameter {name} is required and must be a string")
    return value.strip()


def _optional_str(params: dict, name: str) -> str | None:
    value = params.get(name)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidRequest(f"Parameter {name} must be a string")
    return value.strip()


def _parse_hex_bytes(value: str | None, name: str) -> bytes:
    if not value or value == "0x":
        return b""
    try:
        return bytes(HexBytes(value))
    except ValueError:
        raise InvalidRequest(f"Parameter {name} is not hex: {value}") from None


def parse_deployment_params(params: dict) -> DeploymentRequest:
    """Coerce ``deploy-and-configure-oft-multichain`` parameters."""
    target_chains = params.get("targetChains")
    if not isinstance(target_chains, (list, tuple)) or not all(isinstance(c, str) for c in target_chains):
        raise InvalidRequest("Parameter targetChains must be a list of chain names")

    supply = params.get("initialTotalSupply")
    if isinstance(supply, int) and not isinstance(supply, bool):
        supply = str(supply)
    if not isinstance(supply, str):
        raise InvalidRequest("Parameter initialTotalSupply must be a string, e.g. '1000000'")

    decimals = params.get("decimals")
    if decimals is None:
        decimals = 18

    return DeploymentRequest(
        token_name=_required_str(params, "tokenName"),
        token_symbol=_required_str(params, "tokenSymbol"),
        initial_total_supply=supply,
        target_chains=list(target_chains),
        decimals=decimals,
        owner=_optional_str(params, "owner"),
    )


def parse_bridge_params(params: dict) -> BridgeRequest:
    """Coerce ``bridge-oft`` parameters."""
    return BridgeRequest(
        token_address=_required_str(params, "tokenAddress"),
        amount=_required_str(params, "amount"),
        from_chain=_required_str(params, "fromChain"),
        to_chain=_required_str(params, "toChain"),
        receiver_address=_required_str(params, "receiverAddress"),
        extra_options=_parse_hex_bytes(_optional_str(params, "extraOptions"), "extraOptions"),
    )


def deploy_and_configure_oft_multichain(toolkit: OFTToolkit, **params) -> dict:
    """Deploy an OFT to multiple chains, set up the peers and enforced options.

    A run that aborted halfway still returns the full report, with
    ``isError`` set.
    """
    try:
        request = parse_deployment_params(params)
        report = deploy_and_configure_oft(
            request,
            registry=toolkit.registry,
            signers=toolkit.signers,
            oft_artifact=toolkit.get_oft_artifact(),
            factory_artifact=toolkit.get_factory_artifact(),
            default_owner=toolkit.default_owner,
        )
    except OFTError as e:
        logger.warning("OFT deployment rejected: %s", e)
        return text_payload(f"Error: Failed to Deploy OFT: {e}", is_error=True)
    except Exception as e:
        logger.exception("OFT deployment crashed")
        return text_payload(f"Error: Failed to Deploy OFT: {e}", is_error=True)

    return text_payload(report.to_dict(), is_error=not report.succeeded)


def bridge_oft_tool(toolkit: OFTToolkit, **params) -> dict:
    """Bridge OFT tokens from one chain to another."""
    try:
        request = parse_bridge_params(params)
        receipt = bridge_oft(
            request,
            registry=toolkit.registry,
            signers=toolkit.signers,
            oft_artifact=toolkit.get_oft_artifact(require_bytecode=False),
        )
    except OFTError as e:
        logger.warning("Bridging failed: %s", e)
        return text_payload(f"Error: Failed to bridge OFT: {e}", is_error=True)
    except Exception as e:
        logger.exception("Bridging crashed")
        return text_payload(f"Error: Failed to bridge OFT: {e}", is_error=True)

    return text_payload(receipt.to_dict())


@dataclass(slots=True, frozen=True)
class ToolDefinition:
    """A named tool for registering with a transport."""

    name: str

    description: str

    #: Called as ``handler(toolkit, **params)``
    handler: Callable[..., dict[str, Any]]


#: All tools by name
TOOLS: dict[str, ToolDefinition] = {
    t.name: t
    for t in [
        ToolDefinition(
            name="deploy-and-configure-oft-multichain",
            description="Deploys an OFT contract to multiple chains, sets up peer connections, and configures enforced options.",
            handler=deploy_and_configure_oft_multichain,
        ),
        ToolDefinition(
            name="bridge-oft",
            description="Bridges OFT tokens from one chain to another using LayerZero.",
            handler=bridge_oft_tool,
        ),
    ]
}
