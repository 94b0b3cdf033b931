"""Deploy an OFT to several chains and wire the peer mesh.

The workflow runs in strictly sequential phases. Each phase only runs when
the previous one fully succeeded:

1. **Validation**: artifacts, chains, supply and owner are checked before
   any RPC call. Problems raise :py:class:`~eth_oft.layerzero.exceptions.OFTError`
   subclasses and nothing is sent.

2. **Deployment**: the OFT is deployed through a CREATE2 factory on each
   chain in the given order. The salt is ``keccak256("<name>:<symbol>")``,
   identical on every chain, so with the same factory address and init code
   the token lands on the same address everywhere.

3. **Peering**: ``setPeer()`` for every ordered pair of deployed chains,
   ``N * (N - 1)`` transactions.

4. **Enforced options**: one ``setEnforcedOptions()`` per chain with an
   ``lzReceive`` gas limit entry for each peer.

5. **Report**: per-chain outcomes, peering and enforced option results and
   a chronological execution log.

Any chain failure aborts the rest of the run. Already confirmed transactions
stay on chain; there is no rollback or resume. Re-running the same name and
symbol against the same factory collides with the earlier deployment, so a
retry after a partial run needs a new name or symbol.

.. note::

    ``initial_total_supply`` is passed to the constructor as a raw integer.
    ``decimals`` is validated but not used to scale the supply.

Example:

.. code-block:: python

    config = load_config()
    registry = ChainRegistry(config.chains)
    signers = SignerProvider(registry, config.private_key)

    report = deploy_and_configure_oft(
        DeploymentRequest(
            token_name="Gamma",
            token_symbol="GMA",
            initial_total_supply="1000000",
            target_chains=["arbitrum_sepolia", "base_sepolia"],
        ),
        registry=registry,
        signers=signers,
        oft_artifact=load_contract_artifact(config.oft_artifact_path),
        factory_artifact=load_contract_artifact(config.factory_artifact_path, require_bytecode=False),
        default_owner=config.owner_address,
    )
    print(report.overall_status)
"""

import enum
import logging
from dataclasses import dataclass, field

from eth_typing import ChecksumAddress, HexAddress
from eth_utils import keccak, to_canonical_address, to_checksum_address
from hexbytes import HexBytes
from tqdm_loggable.auto import tqdm
from web3.contract import Contract

from eth_oft.layerzero.address import parse_token_amount, peer_format_hex, to_peer_format, validate_address
from eth_oft.layerzero.artifacts import ContractArtifact
from eth_oft.layerzero.chain import ChainConfig, ChainRegistry
from eth_oft.layerzero.exceptions import ArtifactNotConfigured, ConfigurationError, InvalidRequest
from eth_oft.layerzero.options import STANDARD_ENFORCED_OPTIONS, build_enforced_options
from eth_oft.layerzero.signer import ChainSigner, SignerProvider

logger = logging.getLogger(__name__)

#: Maximum token decimals accepted
MAX_DECIMALS = 18


class DeploymentPhase(enum.Enum):
    """Phase an execution log entry belongs to."""

    setup = "setup"
    deployment = "deployment"
    peering = "peering"
    enforced_options = "enforced_options"
    report = "report"


class DeploymentStatus(enum.Enum):
    """Outcome of the deployment on one chain."""

    success = "Success"
    failed = "Failed"


class ConfigurationStatus(enum.Enum):
    """Outcome of a peering or enforced options step."""

    success = "Success"
    skipped = "Skipped"
    failed = "Failed"


class OverallStatus(enum.Enum):
    """Outcome of the whole run."""

    #: Every attempted step succeeded
    success = "success"

    #: Something failed after at least one chain was deployed
    partial = "partial"

    #: Nothing got deployed
    failed = "failed"


@dataclass(slots=True)
class DeploymentRequest:
    """Parameters of a multichain OFT deployment."""

    #: ERC-20 name, e.g. ``Gamma``
    token_name: str

    #: ERC-20 symbol, e.g. ``GMA``
    token_symbol: str

    #: Whole number string, minted to the owner on every chain
    initial_total_supply: str

    #: Chain names, deployed in this order
    target_chains: list[str]

    #: Token decimals, 0 - 18
    decimals: int = 18

    #: OFT owner. Defaults to the configured owner.
    owner: str | None = None


@dataclass(slots=True)
class DeployedContract:
    """OFT deployed during this run, kept for the peering and options phases."""

    chain_name: str

    address: ChecksumAddress

    #: OFT bound to the chain signer's web3
    contract: Contract

    #: Signer used for the follow-up transactions
    signer: ChainSigner

    #: LayerZero endpoint id of the chain
    eid: int

    chain: ChainConfig


@dataclass(slots=True)
class DeploymentOutcome:
    """Deployment result on one chain."""

    chain_name: str

    status: DeploymentStatus

    #: Deployed OFT address on success
    contract_address: ChecksumAddress | None = None

    #: Underlying error message on failure
    error: str | None = None

    #: Factory ``deploy()`` transaction
    tx_hash: str | None = None

    def to_dict(self) -> dict:
        data = {
            "chainName": self.chain_name,
            "contractAddress": self.contract_address,
            "deploymentStatus": self.status.value,
        }
        if self.tx_hash:
            data["transactionHash"] = self.tx_hash
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class PeeringResult:
    """``setPeer()`` on ``chain_name`` pointing to ``peer_chain_name``."""

    chain_name: str

    peer_chain_name: str

    peer_eid: int

    #: Peer address in 32-byte hex format
    peer: str

    status: ConfigurationStatus

    tx_hash: str | None = None

    error: str | None = None

    def to_dict(self) -> dict:
        data = {
            "chainName": self.chain_name,
            "peerChainName": self.peer_chain_name,
            "peerEid": self.peer_eid,
            "peer": self.peer,
            "status": self.status.value,
            "transactionHash": self.tx_hash,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class EnforcedOptionsResult:
    """``setEnforcedOptions()`` on one chain."""

    chain_name: str

    #: Endpoint ids of the peers that got an options entry
    peer_eids: list[int]

    status: ConfigurationStatus

    #: Packed options used for every entry
    options: str

    tx_hash: str | None = None

    error: str | None = None

    def to_dict(self) -> dict:
        data = {
            "chainName": self.chain_name,
            "peerEids": self.peer_eids,
            "options": self.options,
            "status": self.status.value,
            "transactionHash": self.tx_hash,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(slots=True)
class ExecutionLogEntry:
    """One step of the human readable execution trace."""

    phase: DeploymentPhase

    message: str

    chain_name: str | None = None

    #: Set on the entry that aborted the run
    failure: bool = False

    def __str__(self) -> str:
        prefix = f"[{self.phase.value}]"
        if self.chain_name:
            prefix += f" {self.chain_name}:"
        text = f"{prefix} {self.message}"
        if self.failure:
            text += " FAILURE"
        return text


@dataclass(slots=True)
class DeploymentReport:
    """Everything that happened during :py:func:`deploy_and_configure_oft`."""

    overall_status: OverallStatus

    #: CREATE2 salt used on every chain
    salt: str

    deployed_contracts: list[DeploymentOutcome] = field(default_factory=list)

    peering_results: list[PeeringResult] = field(default_factory=list)

    #: Why peering did not run, when it did not
    peering_skipped_reason: str | None = None

    enforced_options_results: list[EnforcedOptionsResult] = field(default_factory=list)

    execution_log: list[ExecutionLogEntry] = field(default_factory=list)

    #: Message of the failure that aborted the run
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.overall_status == OverallStatus.success

    @property
    def deployed_addresses(self) -> dict[str, ChecksumAddress]:
        """Chain name -> OFT address for successful deployments."""
        return {o.chain_name: o.contract_address for o in self.deployed_contracts if o.status == DeploymentStatus.success}

    def get_summary(self) -> str:
        if self.overall_status == OverallStatus.success:
            return "Successfully deployed and configured on all attempted chains."
        elif self.overall_status == OverallStatus.partial:
            return "Deployment and configuration process aborted. Some errors occurred, check detailed logs."
        else:
            return "Deployment failed on all target chains."

    def to_dict(self) -> dict:
        """JSON friendly form, used by the tool surface."""
        data = {
            "overallStatus": self.overall_status.value,
            "summary": self.get_summary(),
            "salt": self.salt,
            "deployedContracts": [o.to_dict() for o in self.deployed_contracts],
            "peeringResults": [r.to_dict() for r in self.peering_results],
            "enforcedOptionsResults": [r.to_dict() for r in self.enforced_options_results],
            "detailedExecutionLog": [str(e) for e in self.execution_log],
        }
        if self.peering_skipped_reason:
            data["peeringSkippedReason"] = self.peering_skipped_reason
        if self.error:
            data["error"] = self.error
        return data


def compute_salt(token_name: str, token_symbol: str) -> HexBytes:
    """CREATE2 salt shared by all chains of one token.

    ``keccak256(utf8("<name>:<symbol>"))``. Depends on nothing else, so
    the same token gets the same salt on every chain and every run.
    """
    return HexBytes(keccak(text=f"{token_name}:{token_symbol}"))


def predict_create2_address(deployer: HexAddress | str, salt: bytes, init_code: bytes) -> ChecksumAddress:
    """Address ``CREATE2`` gives for ``init_code`` deployed by ``deployer`` with ``salt``.

    ``keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]``

    :raise ValueError:
        Salt is not 32 bytes.
    """
    if len(salt) != 32:
        raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")
    digest = keccak(b"\xff" + to_canonical_address(deployer) + bytes(salt) + keccak(bytes(init_code)))
    return to_checksum_address(digest[12:])


@dataclass(slots=True)
class _ValidatedRequest:
    chains: list[str]
    raw_supply: int
    owner: ChecksumAddress


def validate_deployment_request(
    request: DeploymentRequest,
    registry: ChainRegistry,
    oft_artifact: ContractArtifact | None,
    factory_artifact: ContractArtifact | None,
    default_owner: HexAddress | str | None,
) -> _ValidatedRequest:
    """Check a request without touching any chain.

    :raise ArtifactNotConfigured:
        OFT ABI / bytecode or factory ABI unavailable.

    :raise InvalidRequest:
        No target chains, decimals out of range, bad supply, no owner.

    :raise UnknownChain:
        A target chain is not registered.

    :raise ConfigurationError:
        A target chain has no CREATE2 factory address.
    """
    if oft_artifact is None or not oft_artifact.abi or not oft_artifact.has_bytecode:
        raise ArtifactNotConfigured("OFT ABI or bytecode is not configured. Set OFT_ARTIFACT_PATH to a compiled OFT contract.")

    if factory_artifact is None or not factory_artifact.abi:
        raise ArtifactNotConfigured("CREATE2 factory ABI is not configured. Set CREATE2_FACTORY_ARTIFACT_PATH.")

    if not request.target_chains:
        raise InvalidRequest("targetChains array is empty. Please provide at least one target chain.")

    if not request.token_name or not request.token_symbol:
        raise InvalidRequest("Token name and symbol are required")

    if type(request.decimals) is not int or not 0 <= request.decimals <= MAX_DECIMALS:
        raise InvalidRequest(f"decimals must be an integer between 0 and {MAX_DECIMALS}, got {request.decimals!r}")

    raw_supply = parse_token_amount(request.initial_total_supply, 0)

    # Duplicates are dropped, first occurrence decides the order
    chains = list(dict.fromkeys(request.target_chains))
    for chain_name in chains:
        chain = registry.config_for(chain_name)
        if not chain.factory_address:
            raise ConfigurationError(f"Factory address not defined for {chain_name}")

    owner = request.owner or default_owner
    if not owner:
        raise InvalidRequest("No owner given and OWNER_ADDRESS is not configured")

    return _ValidatedRequest(chains=chains, raw_supply=raw_supply, owner=validate_address(owner))


class _DeploymentRun:
    """Accumulates the report of one in-flight run."""

    def __init__(self, salt: HexBytes):
        self.report = DeploymentReport(overall_status=OverallStatus.success, salt=salt.to_0x_hex())
        self.deployed: list[DeployedContract] = []

    def log(self, phase: DeploymentPhase, message: str, chain_name: str | None = None, failure=False):
        self.report.execution_log.append(ExecutionLogEntry(phase=phase, message=message, chain_name=chain_name, failure=failure))
        if failure:
            logger.error("%s %s: %s", phase.value, chain_name or "-", message)
        else:
            logger.info("%s %s: %s", phase.value, chain_name or "-", message)

    def abort(self, phase: DeploymentPhase, message: str, chain_name: str | None = None) -> DeploymentReport:
        self.log(phase, message, chain_name=chain_name, failure=True)
        self.report.error = message
        return self.finish()

    def finish(self) -> DeploymentReport:
        report = self.report
        if report.error is None:
            report.overall_status = OverallStatus.success
        elif self.deployed:
            report.overall_status = OverallStatus.partial
        else:
            report.overall_status = OverallStatus.failed
        self.log(DeploymentPhase.report, f"Overall status: {report.overall_status.value}. {report.get_summary()}")
        return report


def _deploy_on_chain(
    run: _DeploymentRun,
    chain_name: str,
    request: DeploymentRequest,
    validated: _ValidatedRequest,
    salt: HexBytes,
    signers: SignerProvider,
    oft_artifact: ContractArtifact,
    factory_artifact: ContractArtifact,
) -> DeployedContract:
    """Deploy through the factory on one chain. Raises on any failure."""
    phase = DeploymentPhase.deployment

    signer = signers.signer_for(chain_name)
    chain = signer.chain
    signer.verify_chain_id()
    run.log(phase, f"Signer {signer.address} and network config obtained, chain id {chain.chain_id}, LayerZero EID {chain.eid}", chain_name)

    run.log(
        phase,
        f"Token {request.token_name} ({request.token_symbol}), supply {request.initial_total_supply} (parsed: {validated.raw_supply}), decimals {request.decimals}",
        chain_name,
    )

    init_code = oft_artifact.build_init_code(
        [
            request.token_name,
            request.token_symbol,
            validated.raw_supply,
            chain.endpoint_address,
            validated.owner,
        ]
    )
    expected_address = predict_create2_address(chain.factory_address, salt, init_code)

    factory = signer.contract(chain.factory_address, factory_artifact.abi)
    run.log(phase, f"Deploying with CREATE2 via factory {chain.factory_address}, salt {salt.to_0x_hex()}, init code {len(init_code)} bytes, expected address {expected_address}", chain_name)

    tx_hash = signer.transact(factory.functions.deploy(bytes(init_code), bytes(salt)))
    deployed_address = to_checksum_address(signer.call(factory.functions.lastDeployedAddress()))

    if deployed_address != expected_address:
        logger.warning("Factory on %s reported %s, CREATE2 math gives %s", chain_name, deployed_address, expected_address)

    run.log(phase, f"SUCCESS: deployed at {deployed_address}, tx {tx_hash.to_0x_hex()}", chain_name)
    run.report.deployed_contracts.append(
        DeploymentOutcome(
            chain_name=chain_name,
            status=DeploymentStatus.success,
            contract_address=deployed_address,
            tx_hash=tx_hash.to_0x_hex(),
        )
    )

    return DeployedContract(
        chain_name=chain_name,
        address=deployed_address,
        contract=signer.contract(deployed_address, oft_artifact.abi),
        signer=signer,
        eid=chain.eid,
        chain=chain,
    )


def _set_peer(run: _DeploymentRun, source: DeployedContract, target: DeployedContract):
    """Point ``source`` to ``target``. Raises on failure after recording it."""
    phase = DeploymentPhase.peering
    peer = to_peer_format(target.address)
    result = PeeringResult(
        chain_name=source.chain_name,
        peer_chain_name=target.chain_name,
        peer_eid=target.eid,
        peer=peer_format_hex(target.address),
        status=ConfigurationStatus.failed,
    )
    run.report.peering_results.append(result)

    run.log(phase, f"Peering with {target.chain_name} (EID {target.eid}), peer {target.address} as {result.peer}", source.chain_name)
    tx_hash = source.signer.transact(source.contract.functions.setPeer(target.eid, peer))
    result.tx_hash = tx_hash.to_0x_hex()
    result.status = ConfigurationStatus.success
    run.log(phase, f"SUCCESS: setPeer({target.eid}) tx {result.tx_hash}", source.chain_name)


def _set_enforced_options(run: _DeploymentRun, deployed: DeployedContract, peers: list[DeployedContract]):
    """One ``setEnforcedOptions()`` covering all peers. Raises on failure after recording it."""
    phase = DeploymentPhase.enforced_options
    params = build_enforced_options([p.eid for p in peers])
    result = EnforcedOptionsResult(
        chain_name=deployed.chain_name,
        peer_eids=[p.eid for p in params],
        status=ConfigurationStatus.failed,
        options="0x" + STANDARD_ENFORCED_OPTIONS.hex(),
    )
    run.report.enforced_options_results.append(result)

    if not params:
        result.status = ConfigurationStatus.skipped
        run.log(phase, "No peers to set enforced options for", deployed.chain_name)
        return

    run.log(phase, f"Setting enforced options for {len(params)} peers: {', '.join(f'EID {p.eid}' for p in params)}", deployed.chain_name)
    tx_hash = deployed.signer.transact(deployed.contract.functions.setEnforcedOptions([p.as_tuple() for p in params]))
    result.tx_hash = tx_hash.to_0x_hex()
    result.status = ConfigurationStatus.success
    run.log(phase, f"SUCCESS: enforced options set for {len(params)} peers, tx {result.tx_hash}", deployed.chain_name)


def deploy_and_configure_oft(
    request: DeploymentRequest,
    *,
    registry: ChainRegistry,
    signers: SignerProvider,
    oft_artifact: ContractArtifact | None,
    factory_artifact: ContractArtifact | None,
    default_owner: HexAddress | str | None,
    progress: bool = False,
) -> DeploymentReport:
    """Deploy an OFT on all target chains, peer them and set enforced options.

    See the module documentation for the phases.

    :param request:
        What to deploy and where.

    :param registry:
        Chain registry used to validate the target chains.

    :param signers:
        Gives a signer per chain.

    :param oft_artifact:
        OFT ABI and bytecode.

    :param factory_artifact:
        CREATE2 factory ABI. Must have ``deploy(bytes,bytes32)`` and
        ``lastDeployedAddress()``.

    :param default_owner:
        Owner used when the request has none.

    :param progress:
        Show a ``tqdm`` progress bar over the transactions.

    :return:
        Report of the run. A chain failure does not raise, it ends the run
        and is reported with :py:attr:`OverallStatus.partial` or
        :py:attr:`OverallStatus.failed`.

    :raise OFTError:
        Validation failed. Nothing was sent.
    """
    validated = validate_deployment_request(request, registry, oft_artifact, factory_artifact, default_owner)

    salt = compute_salt(request.token_name, request.token_symbol)
    run = _DeploymentRun(salt)
    chains = validated.chains
    n = len(chains)

    run.log(DeploymentPhase.setup, f"Target chains for deployment: {', '.join(chains)}")
    run.log(DeploymentPhase.setup, f"Deployment owner set to: {validated.owner}")

    progress_bar = tqdm(
        total=n + n * (n - 1) + n,
        desc=f"Deploying {request.token_symbol}",
        unit="tx",
        disable=not progress,
    )

    try:
        # Deployment
        for chain_name in chains:
            progress_bar.set_postfix_str(f"deploy {chain_name}")
            try:
                deployed = _deploy_on_chain(run, chain_name, request, validated, salt, signers, oft_artifact, factory_artifact)
            except Exception as e:
                logger.exception("Deployment failed on %s", chain_name)
                message = str(e) or e.__class__.__name__
                run.report.deployed_contracts.append(DeploymentOutcome(chain_name=chain_name, status=DeploymentStatus.failed, error=message))
                return run.abort(DeploymentPhase.deployment, f"Deploying failed: {message}, salt {salt.to_0x_hex()}", chain_name)
            run.deployed.append(deployed)
            progress_bar.update(1)
        run.log(DeploymentPhase.deployment, "Deployment phase completed")

        # Peering
        if len(run.deployed) < 2:
            reason = "Skipping peering phase: less than 2 contracts successfully deployed."
            run.report.peering_skipped_reason = reason
            run.log(DeploymentPhase.peering, reason)
        else:
            run.log(DeploymentPhase.peering, f"Peering {len(run.deployed)} deployed contracts")
            for source in run.deployed:
                for target in run.deployed:
                    if source.chain_name == target.chain_name:
                        continue
                    progress_bar.set_postfix_str(f"peer {source.chain_name} -> {target.chain_name}")
                    try:
                        _set_peer(run, source, target)
                    except Exception as e:
                        logger.exception("setPeer failed on %s", source.chain_name)
                        message = str(e) or e.__class__.__name__
                        run.report.peering_results[-1].error = message
                        return run.abort(DeploymentPhase.peering, f"Peering with {target.chain_name} failed: {message}", source.chain_name)
                    progress_bar.update(1)
            run.log(DeploymentPhase.peering, "Peering phase completed")

        # Enforced options
        run.log(DeploymentPhase.enforced_options, f"Standard options for enforced options: 0x{STANDARD_ENFORCED_OPTIONS.hex()}")
        for deployed in run.deployed:
            peers = [p for p in run.deployed if p.chain_name != deployed.chain_name]
            progress_bar.set_postfix_str(f"options {deployed.chain_name}")
            try:
                _set_enforced_options(run, deployed, peers)
            except Exception as e:
                logger.exception("setEnforcedOptions failed on %s", deployed.chain_name)
                message = str(e) or e.__class__.__name__
                run.report.enforced_options_results[-1].error = message
                return run.abort(DeploymentPhase.enforced_options, f"Configuring enforced options failed: {message}", deployed.chain_name)
            progress_bar.update(1)
        run.log(DeploymentPhase.enforced_options, "Enforced options phase completed")

        return run.finish()
    finally:
        progress_bar.close()
