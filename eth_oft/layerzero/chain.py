"""Chain registry.

Maps a chain name to its RPC endpoint, native chain id and LayerZero endpoint
details. Built once at start from :py:class:`eth_oft.config.OFTConfig` and
read-only afterwards.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from eth_typing import HexAddress

from eth_oft.layerzero.exceptions import ConfigurationError, UnknownChain

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ChainConfig:
    """Connection parameters of one chain."""

    #: Registry key, e.g. ``arbitrum_sepolia``
    name: str

    #: JSON-RPC URL
    rpc_url: str

    #: EVM chain id
    chain_id: int

    #: LayerZero EndpointV2 contract on this chain
    endpoint_address: HexAddress

    #: LayerZero endpoint id, distinct from the chain id
    eid: int

    #: CREATE2 factory used for deterministic OFT deployments.
    #:
    #: ``None`` when the chain can only be used for bridging.
    factory_address: HexAddress | None = None


class ChainRegistry:
    """Fixed name -> :py:class:`ChainConfig` table.

    Example:

    .. code-block:: python

        registry = ChainRegistry(config.chains)
        chain = registry.config_for("base_sepolia")
        print(chain.eid)
    """

    def __init__(self, chains: Iterable[ChainConfig]):
        self._chains: dict[str, ChainConfig] = {}
        for chain in chains:
            if chain.name in self._chains:
                raise ConfigurationError(f"Chain {chain.name} registered twice")
            self._chains[chain.name] = chain

        if not self._chains:
            raise ConfigurationError("Chain registry is empty. Set at least one JSON_RPC_<CHAIN> environment variable.")

    def __contains__(self, name: str) -> bool:
        return name in self._chains

    def __iter__(self) -> Iterator[ChainConfig]:
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)

    def __repr__(self) -> str:
        return f"<ChainRegistry {', '.join(self._chains)}>"

    def names(self) -> list[str]:
        """Registered chain names in registration order."""
        return list(self._chains)

    def config_for(self, name: str) -> ChainConfig:
        """Look up a chain.

        :raise UnknownChain:
            The chain is not configured.
        """
        try:
            return self._chains[name]
        except KeyError:
            raise UnknownChain(f"Network configuration not found for {name}. Available: {', '.join(self._chains)}") from None
