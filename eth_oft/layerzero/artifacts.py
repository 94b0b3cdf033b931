"""Compiled contract artifacts.

We do not compile anything. The OFT token and the CREATE2 factory are
compiled elsewhere and handed to us as JSON files, either Foundry
``out/<File>.sol/<Contract>.json`` or Hardhat ``artifacts/`` layout.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from eth_abi import encode
from hexbytes import HexBytes

from eth_oft.layerzero.exceptions import ArtifactNotConfigured

logger = logging.getLogger(__name__)

#: Values left in template artifacts that were never replaced with real output
PLACEHOLDER_VALUES = {"ABI_PLACEHOLDER", "BYTECODE_PLACEHOLDER"}


@dataclass(slots=True, frozen=True)
class ContractArtifact:
    """ABI and creation bytecode of a compiled contract."""

    #: Contract name, for logging
    name: str

    #: Contract ABI
    abi: list[dict]

    #: Creation bytecode. Empty when only the ABI was given.
    bytecode: HexBytes

    @property
    def has_bytecode(self) -> bool:
        return len(self.bytecode) > 0

    def encode_constructor_args(self, args: list | tuple) -> bytes:
        """ABI-encode constructor arguments against the ABI constructor inputs."""
        constructor = next((item for item in self.abi if item.get("type") == "constructor"), None)
        inputs = constructor.get("inputs", []) if constructor else []
        if len(inputs) != len(args):
            raise ArtifactNotConfigured(f"{self.name} constructor takes {len(inputs)} arguments, got {len(args)}")
        types = [i["type"] for i in inputs]
        return encode(types, list(args))

    def build_init_code(self, args: list | tuple) -> HexBytes:
        """Creation bytecode followed by encoded constructor arguments."""
        if not self.has_bytecode:
            raise ArtifactNotConfigured(f"{self.name} artifact has no bytecode")
        return HexBytes(bytes(self.bytecode) + self.encode_constructor_args(args))


def _read_bytecode(data: dict) -> str | None:
    bytecode = data.get("bytecode")
    # Foundry nests the bytecode, Hardhat keeps it flat
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")
    return bytecode


def parse_contract_artifact(data: dict, name: str, require_bytecode: bool = True) -> ContractArtifact:
    """Validate decoded artifact JSON.

    :raise ArtifactNotConfigured:
        ABI or bytecode missing, empty or a placeholder.
    """
    abi = data.get("abi")
    if not abi or isinstance(abi, str):
        # A string ABI is a leftover placeholder
        raise ArtifactNotConfigured(f"{name} ABI is missing or a placeholder. Point the artifact path to a compiled contract.")

    bytecode = _read_bytecode(data)
    if bytecode in PLACEHOLDER_VALUES or not bytecode or bytecode == "0x":
        if require_bytecode:
            raise ArtifactNotConfigured(f"{name} bytecode is missing or a placeholder. Point the artifact path to a compiled contract.")
        bytecode = ""

    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    try:
        raw = HexBytes(bytecode)
    except ValueError as e:
        raise ArtifactNotConfigured(f"{name} bytecode is not hex: {e}") from e

    return ContractArtifact(name=name, abi=abi, bytecode=raw)


def load_contract_artifact(path: Path | str | None, require_bytecode: bool = True) -> ContractArtifact:
    """Read a compiled contract JSON file.

    Example:

    .. code-block:: python

        oft = load_contract_artifact(Path("out/MyOFT.sol/MyOFT.json"))
        init_code = oft.build_init_code(["Gamma", "GMA", 1_000_000, endpoint, owner])

    :param path:
        Foundry or Hardhat artifact JSON.

    :param require_bytecode:
        Set ``False`` when only the ABI is needed, e.g. for bridging.

    :raise ArtifactNotConfigured:
        File missing or not a usable artifact.
    """
    if not path:
        raise ArtifactNotConfigured("Contract artifact path is not configured")

    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ArtifactNotConfigured(f"Contract artifact does not exist: {path}") from None
    except json.JSONDecodeError as e:
        raise ArtifactNotConfigured(f"Contract artifact {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ArtifactNotConfigured(f"Contract artifact {path} is not a JSON object")

    artifact = parse_contract_artifact(data, name=data.get("contractName", path.stem), require_bytecode=require_bytecode)
    logger.debug("Loaded artifact %s from %s, %d bytes of bytecode", artifact.name, path, len(artifact.bytecode))
    return artifact
