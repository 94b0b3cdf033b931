"""Bridge OFT tokens between two chains over LayerZero.

Quotes the LayerZero messaging fee and calls ``send()`` on the source chain.
Follow the delivery on `LayerZero Scan <https://layerzeroscan.com/>`__.

Environment variables
---------------------

``TOKEN_ADDRESS``
    OFT contract on the source chain. Required.

``AMOUNT``
    Human readable amount, always 18 decimals. Required.

``FROM_CHAIN``
    Source chain, e.g. ``arbitrum_sepolia``. Required.

``TO_CHAIN``
    Destination chain, e.g. ``base_sepolia``. Required.

``RECEIVER_ADDRESS``
    Receiver on the destination chain. Defaults to the signer.

``EXTRA_OPTIONS``
    Hex encoded extra executor options. Defaults to ``0x``.

Plus ``PRIVATE_KEY``, ``OWNER_ADDRESS``, ``JSON_RPC_<CHAIN>`` and
``OFT_ARTIFACT_PATH``, see :py:mod:`eth_oft.config`.

Example
-------

.. code-block:: shell

    TOKEN_ADDRESS=0x... AMOUNT=50 FROM_CHAIN=arbitrum_sepolia TO_CHAIN=base_sepolia \\
        python scripts/layerzero/bridge-oft.py
"""

import os

from hexbytes import HexBytes
from tabulate import tabulate

from eth_oft.config import load_config
from eth_oft.layerzero.artifacts import load_contract_artifact
from eth_oft.layerzero.bridge import BridgeRequest, bridge_oft
from eth_oft.layerzero.chain import ChainRegistry
from eth_oft.layerzero.signer import SignerProvider
from eth_oft.utils import setup_console_logging


def main():
    setup_console_logging("info")

    config = load_config()
    registry = ChainRegistry(config.chains)
    signers = SignerProvider(registry, config.private_key, tx_timeout=config.tx_timeout)

    token_address = os.environ.get("TOKEN_ADDRESS")
    amount = os.environ.get("AMOUNT")
    from_chain = os.environ.get("FROM_CHAIN")
    to_chain = os.environ.get("TO_CHAIN")
    assert token_address and amount and from_chain and to_chain, "Set TOKEN_ADDRESS, AMOUNT, FROM_CHAIN and TO_CHAIN"

    extra_options = os.environ.get("EXTRA_OPTIONS", "0x")

    request = BridgeRequest(
        token_address=token_address,
        amount=amount,
        from_chain=from_chain,
        to_chain=to_chain,
        receiver_address=os.environ.get("RECEIVER_ADDRESS") or signers.address,
        extra_options=bytes(HexBytes(extra_options)) if extra_options != "0x" else b"",
    )

    receipt = bridge_oft(
        request,
        registry=registry,
        signers=signers,
        oft_artifact=load_contract_artifact(config.oft_artifact_path, require_bytecode=False),
    )

    table = [
        ["From", receipt.from_chain],
        ["To", f"{receipt.to_chain} (EID {receipt.dst_eid})"],
        ["Amount", receipt.amount_sent],
        ["Sender", receipt.sender],
        ["Receiver", receipt.receiver],
        ["LayerZero fee", f"{receipt.estimated_native_fee} native"],
        ["TX", receipt.transaction_hash],
    ]
    print(tabulate(table, tablefmt="simple"))
    print(f"\nTrack delivery at https://layerzeroscan.com/tx/{receipt.transaction_hash}")


if __name__ == "__main__":
    main()
