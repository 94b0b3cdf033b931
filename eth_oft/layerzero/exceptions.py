"""Errors raised by the OFT deployment and bridge workflows."""


class OFTError(Exception):
    """Base class for all errors raised by :py:mod:`eth_oft`."""


class ConfigurationError(OFTError):
    """Environment, registry or artifact setup is missing or invalid."""


class UnknownChain(OFTError, KeyError):
    """Requested chain name is not in the chain registry."""

    def __str__(self) -> str:
        # KeyError quotes its argument, we want a plain message
        return str(self.args[0]) if self.args else ""


class InvalidRequest(OFTError, ValueError):
    """Request parameters are malformed."""


class ArtifactNotConfigured(InvalidRequest):
    """Contract ABI or bytecode is missing or still a placeholder."""


class InvalidAddress(InvalidRequest):
    """Value is not a 20-byte EVM address."""


class ChainInteractionError(OFTError):
    """RPC failure, reverted transaction or confirmation timeout.

    The message carries the underlying provider error verbatim.
    """


class ChainConnectionError(ChainInteractionError):
    """RPC endpoint could not be reached."""
