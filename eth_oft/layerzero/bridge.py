"""Send OFT tokens from one chain to another over LayerZero.

Bridging burns or locks the tokens on the source chain and LayerZero
delivers a message to the peer OFT on the destination chain, which mints or
unlocks them for the receiver. We only do the source chain side: quote the
messaging fee and call ``send()``. Delivery on the destination takes from
seconds to minutes and can be followed on `LayerZero Scan <https://layerzeroscan.com/>`__.

Example:

.. code-block:: python

    receipt = bridge_oft(
        BridgeRequest(
            token_address="0x...",
            amount="50",
            from_chain="arbitrum_sepolia",
            to_chain="base_sepolia",
            receiver_address="0x...",
        ),
        registry=registry,
        signers=signers,
        oft_artifact=load_contract_artifact(config.oft_artifact_path, require_bytecode=False),
    )
    print(f"Sent, tx {receipt.transaction_hash}, fee {receipt.estimated_native_fee} ETH")

.. note::

    The amount is always converted with 18 decimals. OFTs with other
    decimals get a wrong amount.
"""

import logging
from dataclasses import dataclass

from eth_typing import ChecksumAddress

from eth_oft.layerzero.address import format_token_amount, parse_token_amount, to_peer_format, validate_address
from eth_oft.layerzero.artifacts import ContractArtifact
from eth_oft.layerzero.chain import ChainRegistry
from eth_oft.layerzero.constants import OFT_BRIDGE_DECIMALS
from eth_oft.layerzero.exceptions import ArtifactNotConfigured, InvalidRequest
from eth_oft.layerzero.signer import SignerProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BridgeRequest:
    """One OFT transfer between two chains."""

    #: OFT contract on the source chain
    token_address: str

    #: Human readable amount, e.g. ``"50"``, always with 18 decimals
    amount: str

    #: Source chain name
    from_chain: str

    #: Destination chain name
    to_chain: str

    #: Token receiver on the destination chain
    receiver_address: str

    #: Extra executor options, on top of the enforced options
    extra_options: bytes = b""


@dataclass(slots=True)
class BridgeReceipt:
    """Confirmed ``send()`` on the source chain."""

    transaction_hash: str

    from_chain: str

    to_chain: str

    #: Human readable amount as given in the request
    amount_sent: str

    sender: ChecksumAddress

    receiver: ChecksumAddress

    #: Quoted messaging fee in ether units, e.g. ``"0.000123"``
    estimated_native_fee: str

    #: Quoted messaging fee in wei, attached as ``msg.value``
    native_fee: int

    #: LayerZero endpoint id of the destination
    dst_eid: int

    def to_dict(self) -> dict:
        return {
            "transactionHash": self.transaction_hash,
            "fromChain": self.from_chain,
            "toChain": self.to_chain,
            "amountSent": self.amount_sent,
            "sender": self.sender,
            "receiver": self.receiver,
            "estimatedNativeFee": self.estimated_native_fee,
            "nativeFee": str(self.native_fee),
            "dstEid": self.dst_eid,
        }


def build_send_param(dst_eid: int, receiver: str, amount_ld: int, extra_options: bytes = b"") -> tuple:
    """ABI tuple of the OFT ``SendParam`` struct.

    ``minAmountLD`` equals ``amountLD``: no slippage is accepted.
    """
    return (
        dst_eid,
        to_peer_format(receiver),
        amount_ld,
        amount_ld,
        bytes(extra_options),
        b"",  # composeMsg
        b"",  # oftCmd
    )


def bridge_oft(
    request: BridgeRequest,
    *,
    registry: ChainRegistry,
    signers: SignerProvider,
    oft_artifact: ContractArtifact | None,
) -> BridgeReceipt:
    """Quote and send OFT tokens to another chain.

    The signer pays the LayerZero fee in the source chain native token and
    receives any fee refund.

    :param request:
        What to send where.

    :param registry:
        For looking up the destination endpoint id.

    :param signers:
        Signs on the source chain.

    :param oft_artifact:
        OFT ABI. Bytecode not needed.

    :return:
        Receipt of the confirmed source chain transaction.

    :raise InvalidRequest:
        Same source and destination, bad amount or address.

    :raise UnknownChain:
        Source or destination not configured.

    :raise ChainInteractionError:
        Quote or send failed. Not retried.
    """
    if oft_artifact is None or not oft_artifact.abi:
        raise ArtifactNotConfigured("OFT ABI is not configured. Set OFT_ARTIFACT_PATH to a compiled OFT contract.")

    if request.from_chain == request.to_chain:
        raise InvalidRequest("Source and destination chains cannot be the same.")

    source_chain = registry.config_for(request.from_chain)
    destination_chain = registry.config_for(request.to_chain)

    token_address = validate_address(request.token_address)
    receiver = validate_address(request.receiver_address)
    amount_ld = parse_token_amount(request.amount, OFT_BRIDGE_DECIMALS)

    signer = signers.signer_for(source_chain.name)
    oft = signer.contract(token_address, oft_artifact.abi)

    send_param = build_send_param(destination_chain.eid, receiver, amount_ld, request.extra_options)

    logger.info(
        "Bridging %s tokens (%d raw) of %s from %s to %s (EID %d), receiver %s",
        request.amount,
        amount_ld,
        token_address,
        source_chain.name,
        destination_chain.name,
        destination_chain.eid,
        receiver,
    )

    native_fee, lz_token_fee = signer.call(oft.functions.quoteSend(send_param, False))
    logger.info("Quoted LayerZero fee %s native (%d wei), LZ token fee %d", format_token_amount(native_fee), native_fee, lz_token_fee)

    # Pay in native only, refunds go back to the signer
    tx_hash = signer.transact(
        oft.functions.send(send_param, (native_fee, 0), signer.address),
        value=native_fee,
    )

    receipt = BridgeReceipt(
        transaction_hash=tx_hash.to_0x_hex(),
        from_chain=source_chain.name,
        to_chain=destination_chain.name,
        amount_sent=request.amount,
        sender=signer.address,
        receiver=receiver,
        estimated_native_fee=format_token_amount(native_fee),
        native_fee=native_fee,
        dst_eid=destination_chain.eid,
    )
    logger.info("Bridge transaction confirmed on %s: %s", source_chain.name, receipt.transaction_hash)
    return receipt
