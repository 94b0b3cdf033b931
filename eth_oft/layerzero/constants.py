"""LayerZero V2 constants and the built-in chain table.

- EndpointV2 addresses and endpoint ids (EIDs) are taken from
  `LayerZero deployed contracts <https://docs.layerzero.network/v2/deployments/deployed-contracts>`__

- A chain becomes usable when its ``JSON_RPC_*`` environment variable is set,
  see :py:func:`eth_oft.config.load_config`
"""

#: EndpointV2 address shared by LayerZero mainnet deployments
LAYERZERO_ENDPOINT_V2_MAINNET = "0x1a44076050125825900e736c501f859c50fE728c"

#: EndpointV2 address shared by LayerZero testnet deployments
LAYERZERO_ENDPOINT_V2_TESTNET = "0x6EDCE65403992e310A62460808c4b910D972f10f"

#: Chain names to EVM chain ids
CHAIN_ID_MAP: dict[str, int] = {
    "ethereum": 1,
    "arbitrum": 42161,
    "base": 8453,
    "optimism": 10,
    "ethereum_sepolia": 11155111,
    "arbitrum_sepolia": 421614,
    "base_sepolia": 84532,
    "optimism_sepolia": 11155420,
}

#: Chain names to LayerZero endpoint ids
LAYERZERO_EID_MAP: dict[str, int] = {
    "ethereum": 30101,
    "arbitrum": 30110,
    "base": 30184,
    "optimism": 30111,
    "ethereum_sepolia": 40161,
    "arbitrum_sepolia": 40231,
    "base_sepolia": 40245,
    "optimism_sepolia": 40232,
}

#: Chain names to LayerZero EndpointV2 contract addresses
LAYERZERO_ENDPOINT_MAP: dict[str, str] = {
    "ethereum": LAYERZERO_ENDPOINT_V2_MAINNET,
    "arbitrum": LAYERZERO_ENDPOINT_V2_MAINNET,
    "base": LAYERZERO_ENDPOINT_V2_MAINNET,
    "optimism": LAYERZERO_ENDPOINT_V2_MAINNET,
    "ethereum_sepolia": LAYERZERO_ENDPOINT_V2_TESTNET,
    "arbitrum_sepolia": LAYERZERO_ENDPOINT_V2_TESTNET,
    "base_sepolia": LAYERZERO_ENDPOINT_V2_TESTNET,
    "optimism_sepolia": LAYERZERO_ENDPOINT_V2_TESTNET,
}

#: Chain names to RPC environment variables
CHAIN_RPC_ENV_VARS: dict[str, str] = {name: f"JSON_RPC_{name.upper()}" for name in CHAIN_ID_MAP}

#: Chain names to CREATE2 factory address environment variables
CHAIN_FACTORY_ENV_VARS: dict[str, str] = {name: f"CREATE2_FACTORY_{name.upper()}" for name in CHAIN_ID_MAP}

#: OApp message type for a plain OFT ``send()``
SEND_MSG_TYPE = 1

#: Executor gas limit we enforce for inbound ``lzReceive`` on every peer
DEFAULT_LZ_RECEIVE_GAS = 200_000

#: OFT token amounts are handled with this many decimals when bridging
OFT_BRIDGE_DECIMALS = 18

#: Default seconds to wait for a transaction receipt
DEFAULT_TX_TIMEOUT = 180.0
