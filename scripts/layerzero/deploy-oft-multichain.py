"""Deploy a LayerZero OFT token to multiple chains and peer them.

Deploys the OFT with the same CREATE2 salt on every chain, connects every
pair of deployments with ``setPeer()`` and sets enforced ``lzReceive`` gas
options for each peer.

The deployer needs native gas token balance on all chains. A CREATE2
factory must already be deployed on each chain.

Environment variables
---------------------

``TOKEN_NAME``
    Token name, e.g. ``Gamma``. Required.

``TOKEN_SYMBOL``
    Token symbol, e.g. ``GMA``. Required.

``INITIAL_TOTAL_SUPPLY``
    Raw supply minted to the owner on every chain. Defaults to ``1000000``.

``DECIMALS``
    Token decimals. Defaults to ``18``.

``CHAINS``
    Comma-separated list of chains, deployed in this order.
    Defaults to all chains with ``JSON_RPC_<CHAIN>`` set.

``OFT_OWNER``
    Owner of the deployed tokens. Defaults to ``OWNER_ADDRESS``.

Plus the common configuration, see :py:mod:`eth_oft.config`:
``PRIVATE_KEY``, ``OWNER_ADDRESS``, ``JSON_RPC_<CHAIN>``,
``CREATE2_FACTORY_<CHAIN>``, ``OFT_ARTIFACT_PATH``,
``CREATE2_FACTORY_ARTIFACT_PATH``.

Testnet example
---------------

.. code-block:: shell

    export PRIVATE_KEY=...
    export OWNER_ADDRESS=0x...
    export JSON_RPC_ARBITRUM_SEPOLIA="https://..."
    export JSON_RPC_BASE_SEPOLIA="https://..."
    export CREATE2_FACTORY_ARBITRUM_SEPOLIA=0x...
    export CREATE2_FACTORY_BASE_SEPOLIA=0x...
    export OFT_ARTIFACT_PATH=out/MyOFT.sol/MyOFT.json
    export CREATE2_FACTORY_ARTIFACT_PATH=out/CREATE2Factory.sol/CREATE2Factory.json

    TOKEN_NAME=Gamma TOKEN_SYMBOL=GMA python scripts/layerzero/deploy-oft-multichain.py
"""

import os
import sys

from tabulate import tabulate

from eth_oft.config import load_config
from eth_oft.layerzero.artifacts import load_contract_artifact
from eth_oft.layerzero.chain import ChainRegistry
from eth_oft.layerzero.deployment import DeploymentRequest, OverallStatus, deploy_and_configure_oft
from eth_oft.layerzero.signer import SignerProvider
from eth_oft.utils import setup_console_logging


def main():
    setup_console_logging("info")

    config = load_config()
    registry = ChainRegistry(config.chains)

    token_name = os.environ.get("TOKEN_NAME")
    token_symbol = os.environ.get("TOKEN_SYMBOL")
    assert token_name and token_symbol, "Set TOKEN_NAME and TOKEN_SYMBOL"

    chains_env = os.environ.get("CHAINS", "")
    if chains_env:
        chains = [c.strip() for c in chains_env.split(",") if c.strip()]
    else:
        chains = registry.names()

    request = DeploymentRequest(
        token_name=token_name,
        token_symbol=token_symbol,
        initial_total_supply=os.environ.get("INITIAL_TOTAL_SUPPLY", "1000000"),
        target_chains=chains,
        decimals=int(os.environ.get("DECIMALS", "18")),
        owner=os.environ.get("OFT_OWNER") or None,
    )

    print("=" * 70)
    print("LayerZero OFT multichain deployment")
    print("=" * 70)
    print(f"  Token: {request.token_name} ({request.token_symbol})")
    print(f"  Supply: {request.initial_total_supply}")
    print(f"  Chains: {', '.join(chains)}")
    print(f"  Deployer: {config.signer_address}")
    print(f"  Owner: {request.owner or config.owner_address}")
    print()

    signers = SignerProvider(registry, config.private_key, tx_timeout=config.tx_timeout)

    report = deploy_and_configure_oft(
        request,
        registry=registry,
        signers=signers,
        oft_artifact=load_contract_artifact(config.oft_artifact_path),
        factory_artifact=load_contract_artifact(config.factory_artifact_path, require_bytecode=False),
        default_owner=config.owner_address,
        progress=True,
    )

    print("\nDeployments:")
    rows = [[o.chain_name, o.status.value, o.contract_address or "-", o.error or ""] for o in report.deployed_contracts]
    print(tabulate(rows, headers=["Chain", "Status", "Address", "Error"], tablefmt="simple"))

    if report.peering_results:
        print("\nPeers:")
        rows = [[r.chain_name, r.peer_chain_name, r.peer_eid, r.status.value, r.tx_hash or "-"] for r in report.peering_results]
        print(tabulate(rows, headers=["Chain", "Peer", "Peer EID", "Status", "TX"], tablefmt="simple"))
    elif report.peering_skipped_reason:
        print(f"\n{report.peering_skipped_reason}")

    if report.enforced_options_results:
        print("\nEnforced options:")
        rows = [[r.chain_name, ", ".join(str(e) for e in r.peer_eids), r.status.value, r.tx_hash or "-"] for r in report.enforced_options_results]
        print(tabulate(rows, headers=["Chain", "Peer EIDs", "Status", "TX"], tablefmt="simple"))

    print(f"\nOverall status: {report.overall_status.value}. {report.get_summary()}")

    if report.overall_status != OverallStatus.success:
        print(f"Error: {report.error}")
        sys.exit(1)


if __name__ == "__main__":
    main()
