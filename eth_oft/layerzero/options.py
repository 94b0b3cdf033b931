"""LayerZero V2 executor options.

Options are packed bytes understood by the LayerZero executor. We only
build type 3 options carrying a single ``lzReceive`` option::

    uint16 options type (3)
    uint8  worker id (1 = executor)
    uint16 option size (1 + 16, or 1 + 32 when a native value is dropped)
    uint8  option type (1 = lzReceive)
    uint128 gas
    uint128 value (optional)

``encode_lz_receive_option(200_000)`` gives the widely used
``0x00030100110100000000000000000000000000030d40``.

See `OptionsBuilder.sol <https://github.com/LayerZero-Labs/LayerZero-v2/blob/main/packages/layerzero-v2/evm/oapp/contracts/oapp/libs/OptionsBuilder.sol>`__.
"""

from dataclasses import dataclass

from eth_oft.layerzero.constants import DEFAULT_LZ_RECEIVE_GAS, SEND_MSG_TYPE

#: Options format version
OPTIONS_TYPE_3 = 3

#: Executor worker id
EXECUTOR_WORKER_ID = 1

#: Executor option type for lzReceive gas / value
EXECUTOR_OPTION_TYPE_LZRECEIVE = 1

_UINT128_MAX = 2**128 - 1


def encode_lz_receive_option(gas: int, value: int = 0) -> bytes:
    """Encode type 3 options with one executor ``lzReceive`` option.

    :param gas:
        Gas the executor gives to ``lzReceive()`` on the destination.

    :param value:
        Native value dropped with the call, in wei. Omitted from the
        encoding when zero.
    """
    if not 0 <= gas <= _UINT128_MAX:
        raise ValueError(f"gas out of uint128 range: {gas}")
    if not 0 <= value <= _UINT128_MAX:
        raise ValueError(f"value out of uint128 range: {value}")

    option = gas.to_bytes(16, "big")
    if value:
        option += value.to_bytes(16, "big")

    return (
        OPTIONS_TYPE_3.to_bytes(2, "big")
        + EXECUTOR_WORKER_ID.to_bytes(1, "big")
        + (len(option) + 1).to_bytes(2, "big")
        + EXECUTOR_OPTION_TYPE_LZRECEIVE.to_bytes(1, "big")
        + option
    )


#: Enforced options we set for every peer
STANDARD_ENFORCED_OPTIONS = encode_lz_receive_option(DEFAULT_LZ_RECEIVE_GAS)


@dataclass(slots=True, frozen=True)
class EnforcedOptionParam:
    """One ``EnforcedOptionParam`` struct for ``OAppOptionsType3.setEnforcedOptions()``."""

    #: Peer endpoint id the options apply to
    eid: int

    #: OApp message type, ``1`` for a plain OFT send
    msg_type: int

    #: Packed executor options
    options: bytes

    def as_tuple(self) -> tuple[int, int, bytes]:
        """ABI tuple for web3 contract calls."""
        return self.eid, self.msg_type, self.options


def build_enforced_options(peer_eids: list[int], options: bytes = STANDARD_ENFORCED_OPTIONS) -> list[EnforcedOptionParam]:
    """One enforced send option entry per peer endpoint id."""
    return [EnforcedOptionParam(eid=eid, msg_type=SEND_MSG_TYPE, options=options) for eid in peer_eids]
