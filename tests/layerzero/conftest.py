"""In-process fake chains for LayerZero workflow tests.

The fakes mimic the parts of :py:class:`eth_oft.layerzero.signer.ChainSigner`
the workflows use. Contract calls are recorded on a shared :py:class:`FakeNetwork`
and the CREATE2 factory places contracts with the real CREATE2 address math.
"""

from dataclasses import dataclass, field

import pytest
from eth_utils import keccak, to_checksum_address
from hexbytes import HexBytes

from eth_oft.layerzero.artifacts import ContractArtifact
from eth_oft.layerzero.chain import ChainConfig, ChainRegistry
from eth_oft.layerzero.constants import CHAIN_ID_MAP, LAYERZERO_EID_MAP, LAYERZERO_ENDPOINT_MAP
from eth_oft.layerzero.deployment import predict_create2_address
from eth_oft.layerzero.exceptions import ChainInteractionError

#: Anvil account #0
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

TEST_SIGNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

TEST_OWNER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

#: Same factory address on every chain, like a keyless deployment
TEST_FACTORY_ADDRESS = "0x4e59b44847b379578588920cA78FbF26c0B4956C"

TEST_CHAINS = ["arbitrum_sepolia", "base_sepolia", "optimism_sepolia"]

OFT_ABI = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "_name", "type": "string"},
            {"name": "_symbol", "type": "string"},
            {"name": "_initialSupply", "type": "uint256"},
            {"name": "_lzEndpoint", "type": "address"},
            {"name": "_delegate", "type": "address"},
        ],
    },
    {"type": "function", "name": "setPeer", "inputs": [{"name": "_eid", "type": "uint32"}, {"name": "_peer", "type": "bytes32"}]},
]

FACTORY_ABI = [
    {"type": "function", "name": "deploy", "inputs": [{"name": "bytecode", "type": "bytes"}, {"name": "salt", "type": "bytes32"}]},
    {"type": "function", "name": "lastDeployedAddress", "inputs": [], "outputs": [{"name": "", "type": "address"}]},
]


@dataclass
class RecordedCall:
    """A transaction or read made against a fake contract."""

    chain_name: str

    address: str

    fn_name: str

    args: tuple

    value: int = 0

    tx_hash: HexBytes | None = None


@dataclass
class FakeNetwork:
    """Shared state of all fake chains."""

    #: Transactions in the order they were confirmed
    transactions: list[RecordedCall] = field(default_factory=list)

    #: Read calls in call order
    calls: list[RecordedCall] = field(default_factory=list)

    #: ``(chain_name, fn_name)`` pairs whose transactions revert
    failing: set[tuple[str, str]] = field(default_factory=set)

    #: Per chain and factory, last address placed by ``deploy()``
    last_deployed: dict[tuple[str, str], str] = field(default_factory=dict)

    #: Addresses already holding code, per chain
    occupied: set[tuple[str, str]] = field(default_factory=set)

    #: Native fee returned by ``quoteSend()``
    quote_native_fee: int = 123_000_000_000_000

    def fail(self, chain_name: str, fn_name: str):
        self.failing.add((chain_name, fn_name))

    def transactions_named(self, fn_name: str) -> list[RecordedCall]:
        return [t for t in self.transactions if t.fn_name == fn_name]


class FakeBoundCall:
    """Mimics a web3 ``ContractFunction`` with arguments bound."""

    def __init__(self, contract: "FakeContract", fn_name: str, args: tuple):
        self.contract = contract
        self.fn_name = fn_name
        self.args = args


class FakeFunctions:
    def __init__(self, contract: "FakeContract"):
        self._contract = contract

    def __getattr__(self, name: str):
        return lambda *args: FakeBoundCall(self._contract, name, args)


class FakeContract:
    def __init__(self, chain_name: str, address: str, abi: list[dict]):
        self.chain_name = chain_name
        self.address = to_checksum_address(address)
        self.abi = abi
        self.functions = FakeFunctions(self)


class FakeChainSigner:
    """Records transactions instead of signing them."""

    def __init__(self, chain: ChainConfig, network: FakeNetwork):
        self.chain = chain
        self.network = network
        self.address = to_checksum_address(TEST_SIGNER_ADDRESS)
        self.nonce = 0

    def verify_chain_id(self):
        pass

    def contract(self, address: str, abi: list[dict]) -> FakeContract:
        return FakeContract(self.chain.name, address, abi)

    def call(self, func: FakeBoundCall):
        self.network.calls.append(RecordedCall(self.chain.name, func.contract.address, func.fn_name, func.args))
        if func.fn_name == "lastDeployedAddress":
            return self.network.last_deployed[(self.chain.name, func.contract.address)]
        elif func.fn_name == "quoteSend":
            return self.network.quote_native_fee, 0
        raise AssertionError(f"Unexpected call {func.fn_name}")

    def transact(self, func: FakeBoundCall, value: int = 0) -> HexBytes:
        if (self.chain.name, func.fn_name) in self.network.failing:
            raise ChainInteractionError(f"{func.fn_name}() reverted on {self.chain.name}: execution reverted")

        if func.fn_name == "deploy":
            init_code, salt = func.args
            address = predict_create2_address(func.contract.address, salt, init_code)
            if (self.chain.name, address) in self.network.occupied:
                raise ChainInteractionError(f"deploy() reverted on {self.chain.name}: Create2: Failed on deploy")
            self.network.occupied.add((self.chain.name, address))
            self.network.last_deployed[(self.chain.name, func.contract.address)] = address

        tx_hash = HexBytes(keccak(text=f"{self.chain.name}:{self.nonce}"))
        self.nonce += 1
        self.network.transactions.append(RecordedCall(self.chain.name, func.contract.address, func.fn_name, func.args, value, tx_hash))
        return tx_hash


class FakeSignerProvider:
    """Stands in for :py:class:`eth_oft.layerzero.signer.SignerProvider`."""

    def __init__(self, registry: ChainRegistry, network: FakeNetwork):
        self.registry = registry
        self.network = network
        self._signers = {}

    @property
    def address(self) -> str:
        return to_checksum_address(TEST_SIGNER_ADDRESS)

    def signer_for(self, name: str) -> FakeChainSigner:
        if name not in self._signers:
            self._signers[name] = FakeChainSigner(self.registry.config_for(name), self.network)
        return self._signers[name]


def make_chain(name: str, factory_address: str | None = TEST_FACTORY_ADDRESS) -> ChainConfig:
    return ChainConfig(
        name=name,
        rpc_url=f"https://{name}.example.com/v1/secret-key",
        chain_id=CHAIN_ID_MAP[name],
        endpoint_address=to_checksum_address(LAYERZERO_ENDPOINT_MAP[name]),
        eid=LAYERZERO_EID_MAP[name],
        factory_address=to_checksum_address(factory_address) if factory_address else None,
    )


@pytest.fixture()
def registry() -> ChainRegistry:
    """Three testnets with a factory, plus Ethereum Sepolia without one."""
    chains = [make_chain(name) for name in TEST_CHAINS]
    chains.append(make_chain("ethereum_sepolia", factory_address=None))
    return ChainRegistry(chains)


@pytest.fixture()
def network() -> FakeNetwork:
    return FakeNetwork()


@pytest.fixture()
def signers(registry, network) -> FakeSignerProvider:
    return FakeSignerProvider(registry, network)


@pytest.fixture()
def oft_artifact() -> ContractArtifact:
    return ContractArtifact(name="MyOFT", abi=OFT_ABI, bytecode=HexBytes("0x6080604052348015600f57600080fd5b50"))


@pytest.fixture()
def factory_artifact() -> ContractArtifact:
    return ContractArtifact(name="CREATE2Factory", abi=FACTORY_ABI, bytecode=HexBytes(b""))


@pytest.fixture()
def private_key() -> str:
    return TEST_PRIVATE_KEY


@pytest.fixture()
def signer_address() -> str:
    return TEST_SIGNER_ADDRESS


@pytest.fixture()
def owner_address() -> str:
    return TEST_OWNER_ADDRESS


@pytest.fixture()
def factory_address() -> str:
    return TEST_FACTORY_ADDRESS
