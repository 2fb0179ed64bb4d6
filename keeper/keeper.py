"""
Main entry point for the Livepeer funds keeper.

Supports:
- Per-round reward calls for the orchestrator account
- Moving bonded stake above a retained floor to a stake wallet
- Withdrawing pending fees above a threshold to a payout wallet
- Dry-run and single-cycle modes
"""
import argparse
import asyncio
import logging
import os
import signal
import sys

# Ensure project root is in path when run as: python keeper/keeper.py
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pydantic import ValidationError

from keeper.errors import ConfigError, SigningError
from keeper.models.config import KeeperConfig
from keeper.orchestrator.round_orchestrator import TransactionOrchestrator
from keeper.services.chain import LivepeerChainClient
from keeper.services.signer import KeystoreSigner
from keeper.utils.env import (
    RPC_ENDPOINT_URL,
    CHAIN_ID,
    JSON_KEY_FILE,
    PASSPHRASE_FILE,
    ORCH_ETH_ADDR,
    TRANSFER_BOND_RECIPIENT_ETH_ADDR,
    ETH_FEE_RECIPIENT_ETH_ADDR,
    BONDING_MANAGER_ADDRESS,
    ROUNDS_MANAGER_ADDRESS,
    MIN_RETAINED_STAKE_WEI,
    FEE_WITHDRAW_THRESHOLD_WEI,
    POLL_INTERVAL_SECONDS,
    RECEIPT_TIMEOUT_SECONDS,
    LOG_LEVEL,
    DRY_RUN,
)
from keeper.utils.web3 import AsyncWeb3Helper

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Configure root logging for the process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler("funds_keeper.log"), logging.StreamHandler(sys.stdout)],
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Livepeer orchestrator funds keeper")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll cycle and exit",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=DRY_RUN,
        help="Decide and log actions without submitting transactions (env: DRY_RUN)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=LOG_LEVEL,
        help=f"Log level. Default: {LOG_LEVEL}",
    )
    return parser.parse_args(argv)


def get_config(args: argparse.Namespace) -> dict:
    """Assemble raw configuration from environment and arguments."""
    return {
        "rpc_endpoint_url": RPC_ENDPOINT_URL,
        "chain_id": CHAIN_ID,
        "keystore_path": JSON_KEY_FILE,
        "passphrase_path": PASSPHRASE_FILE,
        "orchestrator_address": ORCH_ETH_ADDR,
        "stake_recipient": TRANSFER_BOND_RECIPIENT_ETH_ADDR,
        "fee_recipient": ETH_FEE_RECIPIENT_ETH_ADDR,
        "bonding_manager_address": BONDING_MANAGER_ADDRESS,
        "rounds_manager_address": ROUNDS_MANAGER_ADDRESS,
        "min_retained_stake_wei": MIN_RETAINED_STAKE_WEI,
        "fee_withdraw_threshold_wei": FEE_WITHDRAW_THRESHOLD_WEI,
        "poll_interval_seconds": POLL_INTERVAL_SECONDS,
        "receipt_timeout_seconds": RECEIPT_TIMEOUT_SECONDS,
        "dry_run": args.dry_run,
        "run_once": args.once,
    }


def validate_config(config: dict) -> KeeperConfig:
    """
    Validate the assembled config. Exit with code 1 if any check fails.
    """
    try:
        return KeeperConfig(**config)
    except ValidationError as e:
        logger.error("Config validation failed:")
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            logger.error(f"  - {field}: {err['msg']}")
        logger.error("Please set required environment variables and restart.")
        sys.exit(1)


def resolve_orchestrator_address(config: KeeperConfig, signer: KeystoreSigner) -> str:
    """
    The orchestrator address defaults to the keystore address. A configured
    address that differs from it cannot sign its own reward calls.
    """
    if config.orchestrator_address is None:
        logger.info(f"ORCH_ETH_ADDR not set, using keystore address {signer.address}")
        return signer.address
    if config.orchestrator_address != signer.address:
        raise ConfigError(
            f"ORCH_ETH_ADDR {config.orchestrator_address} does not match "
            f"keystore address {signer.address}"
        )
    return config.orchestrator_address


def _install_signal_handlers(orchestrator: TransactionOrchestrator) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, orchestrator.stop)
        except (NotImplementedError, RuntimeError):
            # Not available on this platform; KeyboardInterrupt still applies
            pass


async def run_keeper(config: KeeperConfig) -> None:
    """
    Build collaborators and run the polling loop.

    Args:
        config: Validated keeper configuration
    """
    logger.info("=" * 80)
    logger.info("STARTING LIVEPEER FUNDS KEEPER")
    logger.info("=" * 80)

    w3 = AsyncWeb3Helper.make_web3(config.rpc_endpoint_url)
    signer = KeystoreSigner.from_keystore(
        w3,
        keystore_path=config.keystore_path,
        passphrase_path=config.passphrase_path,
        chain_id=config.chain_id,
    )
    orchestrator_address = resolve_orchestrator_address(config, signer)
    thresholds = config.thresholds(orchestrator_address)

    logger.info(f"Orchestrator: {thresholds.orchestrator_address}")
    logger.info(f"Transfer bond recipient: {thresholds.stake_recipient}")
    logger.info(f"Fee recipient: {thresholds.fee_recipient}")
    logger.info(f"Chain id: {config.chain_id}")

    chain = LivepeerChainClient(
        w3,
        bonding_manager_address=config.bonding_manager_address,
        rounds_manager_address=config.rounds_manager_address,
    )
    orchestrator = TransactionOrchestrator(
        chain,
        signer,
        thresholds,
        receipt_timeout=config.receipt_timeout_seconds,
        dry_run=config.dry_run,
    )

    if config.run_once:
        report = await orchestrator.run_cycle()
        logger.info(
            f"Single cycle finished: actions={[a.describe() for a in report.actions]} "
            f"abandoned={report.abandoned}"
        )
        return

    _install_signal_handlers(orchestrator)
    try:
        await orchestrator.run_forever()
    finally:
        logger.info("=" * 80)
        logger.info("Livepeer funds keeper shut down")
        logger.info("=" * 80)


def main(argv=None):
    """Main keeper entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)
    config = validate_config(get_config(args))
    try:
        asyncio.run(run_keeper(config))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received. Shutting down keeper...")
    except (ConfigError, SigningError) as e:
        logger.error(f"Fatal startup error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
