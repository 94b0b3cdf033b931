"""Transaction signing per chain.

One private key signs on every chain. :py:class:`SignerProvider` hands out a
:py:class:`ChainSigner` per chain, each with its own web3 connection.

Connections are lazy: nothing touches the RPC until the first call, so an
unreachable endpoint surfaces as :py:class:`ChainConnectionError` at first use.
"""

import logging
from typing import Any, Callable

import requests
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction
from web3.exceptions import TimeExhausted

from eth_oft.layerzero.chain import ChainConfig, ChainRegistry
from eth_oft.layerzero.constants import DEFAULT_TX_TIMEOUT
from eth_oft.layerzero.exceptions import ChainConnectionError, ChainInteractionError, ConfigurationError
from eth_oft.utils import get_url_domain

logger = logging.getLogger(__name__)

#: HTTP timeout for single JSON-RPC requests, seconds
DEFAULT_HTTP_TIMEOUT = 30.0

#: Creates a web3 connection from an RPC URL
Web3Factory = Callable[[str], Web3]


def create_chain_web3(rpc_url: str, http_timeout: float = DEFAULT_HTTP_TIMEOUT) -> Web3:
    """Create a web3 HTTP connection. Does not connect yet."""
    return Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": http_timeout}))


class ChainSigner:
    """Sign and broadcast transactions on one chain.

    Every transaction is waited for: :py:meth:`transact` only returns
    after the receipt is in and the transaction did not revert.
    """

    def __init__(
        self,
        chain: ChainConfig,
        account: LocalAccount,
        web3: Web3,
        tx_timeout: float = DEFAULT_TX_TIMEOUT,
    ):
        self.chain = chain
        self.account = account
        self.web3 = web3
        self.tx_timeout = tx_timeout
        self._chain_id_verified = False

    def __repr__(self) -> str:
        return f"<ChainSigner {self.address} on {self.chain.name}>"

    @property
    def address(self) -> HexAddress:
        return self.account.address

    def contract(self, address: HexAddress | str, abi: list[dict]) -> Contract:
        """Bind a contract on this chain."""
        return self.web3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    def _wrap_error(self, e: Exception, action: str) -> ChainInteractionError:
        if isinstance(e, requests.exceptions.ConnectionError):
            return ChainConnectionError(f"Could not reach {self.chain.name} RPC at {get_url_domain(self.chain.rpc_url)} while {action}: {e}")
        return ChainInteractionError(f"{action} on {self.chain.name} failed: {e}")

    def verify_chain_id(self):
        """Check the RPC serves the chain we think it serves.

        Done once per signer.

        :raise ChainConnectionError:
            RPC not reachable.

        :raise ConfigurationError:
            RPC URL points to another chain.
        """
        if self._chain_id_verified:
            return

        try:
            chain_id = self.web3.eth.chain_id
        except Exception as e:
            raise self._wrap_error(e, "reading chain id") from e

        if chain_id != self.chain.chain_id:
            raise ConfigurationError(f"RPC for {self.chain.name} serves chain {chain_id}, expected {self.chain.chain_id}")

        self._chain_id_verified = True

    def call(self, func: ContractFunction) -> Any:
        """Run a read-only contract call.

        :raise ChainInteractionError:
            RPC error or the call reverted.
        """
        self.verify_chain_id()
        try:
            return func.call({"from": self.address})
        except Exception as e:
            raise self._wrap_error(e, f"calling {func.fn_name}()") from e

    def transact(self, func: ContractFunction, value: int = 0) -> HexBytes:
        """Sign, broadcast and confirm a contract transaction.

        :param func:
            Bound contract function, e.g. ``contract.functions.setPeer(eid, peer)``.

        :param value:
            Native value to attach, in wei.

        :return:
            Hash of the confirmed transaction.

        :raise ChainInteractionError:
            Gas estimation failed, broadcast failed, the transaction reverted
            or was not confirmed within :py:attr:`tx_timeout`.
        """
        self.verify_chain_id()
        action = f"sending {func.fn_name}()"
        try:
            nonce = self.web3.eth.get_transaction_count(self.address, "pending")
            tx = func.build_transaction(
                {
                    "from": self.address,
                    "nonce": nonce,
                    "value": value,
                    "chainId": self.chain.chain_id,
                }
            )
            signed = self.account.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise self._wrap_error(e, action) from e

        logger.info("%s broadcasted on %s, tx %s, nonce %d", func.fn_name, self.chain.name, HexBytes(tx_hash).to_0x_hex(), nonce)

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        except TimeExhausted as e:
            raise ChainInteractionError(f"{func.fn_name}() tx {HexBytes(tx_hash).to_0x_hex()} on {self.chain.name} not confirmed in {self.tx_timeout} seconds") from e
        except Exception as e:
            raise self._wrap_error(e, f"waiting for {HexBytes(tx_hash).to_0x_hex()}") from e

        if receipt["status"] != 1:
            raise ChainInteractionError(f"{func.fn_name}() tx {HexBytes(tx_hash).to_0x_hex()} reverted on {self.chain.name}, block {receipt['blockNumber']}")

        return HexBytes(tx_hash)


class SignerProvider:
    """Give out :py:class:`ChainSigner` instances for registered chains.

    Signers are cached, so one provider holds at most one connection per chain.
    """

    def __init__(
        self,
        registry: ChainRegistry,
        private_key: str,
        tx_timeout: float = DEFAULT_TX_TIMEOUT,
        web3_factory: Web3Factory = create_chain_web3,
    ):
        if not private_key:
            raise ConfigurationError("Missing PRIVATE_KEY")

        try:
            self.account: LocalAccount = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Malformed private key: {e.__class__.__name__}") from None

        self.registry = registry
        self.tx_timeout = tx_timeout
        self.web3_factory = web3_factory
        self._signers: dict[str, ChainSigner] = {}

    @property
    def address(self) -> HexAddress:
        return self.account.address

    def signer_for(self, name: str) -> ChainSigner:
        """Signer bound to the named chain.

        :raise UnknownChain:
            Chain not in the registry.
        """
        signer = self._signers.get(name)
        if signer is None:
            chain = self.registry.config_for(name)
            signer = ChainSigner(chain, self.account, self.web3_factory(chain.rpc_url), tx_timeout=self.tx_timeout)
            self._signers[name] = signer
            logger.debug("Created signer %s for %s at %s", self.account.address, name, get_url_domain(chain.rpc_url))
        return signer
