"""
Typed, immutable configuration for the funds keeper.

Loaded once at startup; any validation error is fatal.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from web3 import Web3


def _checksum(value: str) -> str:
    if not isinstance(value, str) or not Web3.is_address(value.strip()):
        raise ValueError(f"{value!r} is not a valid Ethereum address")
    return Web3.to_checksum_address(value.strip())


class Thresholds(BaseModel):
    """Policy inputs that are fixed for the lifetime of the process."""

    model_config = ConfigDict(frozen=True)

    min_retained_stake_wei: int = Field(..., ge=0)
    fee_withdraw_threshold_wei: int = Field(..., ge=0)
    poll_interval_seconds: float = Field(..., gt=0)
    stake_recipient: str
    fee_recipient: str
    orchestrator_address: str

    @field_validator("stake_recipient", "fee_recipient", "orchestrator_address")
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _checksum(v)


class KeeperConfig(BaseModel):
    """Full startup configuration assembled from env vars and CLI flags."""

    model_config = ConfigDict(frozen=True)

    rpc_endpoint_url: str
    chain_id: int = Field(..., gt=0)
    keystore_path: Path
    passphrase_path: Path
    orchestrator_address: Optional[str] = None
    stake_recipient: str
    fee_recipient: str
    bonding_manager_address: str
    rounds_manager_address: str
    min_retained_stake_wei: int = Field(..., ge=0)
    fee_withdraw_threshold_wei: int = Field(..., ge=0)
    poll_interval_seconds: float = Field(..., gt=0)
    receipt_timeout_seconds: float = Field(..., gt=0)
    dry_run: bool = False
    run_once: bool = False

    @field_validator("rpc_endpoint_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("RPC_ENDPOINT_URL must start with http:// or https://")
        return v

    @field_validator(
        "stake_recipient",
        "fee_recipient",
        "bonding_manager_address",
        "rounds_manager_address",
    )
    @classmethod
    def validate_address(cls, v: str) -> str:
        return _checksum(v)

    @field_validator("orchestrator_address")
    @classmethod
    def validate_optional_address(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return _checksum(v)

    @field_validator("keystore_path", "passphrase_path")
    @classmethod
    def validate_file_exists(cls, v: Path) -> Path:
        if not v.is_file():
            raise ValueError(f"File not found: {v}")
        return v

    def thresholds(self, orchestrator_address: str) -> Thresholds:
        """Build the policy thresholds once the orchestrator address is known."""
        return Thresholds(
            min_retained_stake_wei=self.min_retained_stake_wei,
            fee_withdraw_threshold_wei=self.fee_withdraw_threshold_wei,
            poll_interval_seconds=self.poll_interval_seconds,
            stake_recipient=self.stake_recipient,
            fee_recipient=self.fee_recipient,
            orchestrator_address=orchestrator_address,
        )
