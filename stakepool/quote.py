"""Quote arguments and results for the four stake pool flows."""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.consts import STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS
from stakepool.ratio import check_u64
from stakepool.typedefs import StakeStatus, ValidatorStakeInfo


@dataclass(frozen=True)
class DepositSolQuoteArgs:
    depositor: Pubkey
    current_epoch: int  # u64


@dataclass(frozen=True)
class DepositSolQuote:
    in_amount: int  # u64 lamports
    out_amount: int  # u64 pool tokens, after fees
    referral_fee: int  # u64 pool tokens
    manager_fee: int  # u64 pool tokens

    @property
    def total_fees(self) -> int:
        return self.referral_fee + self.manager_fee


@dataclass(frozen=True)
class StakeAccountLamports:
    staked: int  # u64
    unstaked: int  # u64

    def __post_init__(self) -> None:
        check_u64("staked", self.staked)
        check_u64("unstaked", self.unstaked)

    @property
    def total(self) -> int:
        return self.staked + self.unstaked


@dataclass(frozen=True)
class DepositStakeQuoteArgs:
    validator_status: StakeStatus
    validator_vote: Pubkey
    current_epoch: int  # u64

    @classmethod
    def from_validator_stake_info(
        cls, info: ValidatorStakeInfo, current_epoch: int
    ) -> DepositStakeQuoteArgs:
        return cls(
            validator_status=info.status,
            validator_vote=info.vote_account_address,
            current_epoch=current_epoch,
        )


@dataclass(frozen=True)
class DepositStakeQuote:
    # Staked and unstaked lamports, before fees.
    stake_account_lamports_in: StakeAccountLamports
    tokens_out: int  # u64 pool tokens, after fees
    manager_fee: int  # u64 pool tokens
    referral_fee: int  # u64 pool tokens

    @property
    def total_fees(self) -> int:
        return self.referral_fee + self.manager_fee


@dataclass(frozen=True)
class WithdrawSolQuoteArgs:
    reserve_stake_lamports: int  # u64
    current_epoch: int  # u64


@dataclass(frozen=True)
class WithdrawSolQuote:
    in_amount: int  # u64 pool tokens, before fees
    out_amount: int  # u64 lamports, after fees
    manager_fee: int  # u64 pool tokens


@dataclass(frozen=True)
class WithdrawStakeQuoteArgs:
    current_epoch: int  # u64


@dataclass(frozen=True)
class WithdrawStakeQuote:
    tokens_in: int  # u64
    lamports_staked: int  # u64
    # Levied in pool tokens and sent to the manager fee account.
    fee_amount: int  # u64


def reserve_has_sufficient_lamports(reserve_stake_lamports: int, lamports_out: int) -> bool:
    """Whether the reserve stays strictly above rent exemption after paying out."""
    if lamports_out > reserve_stake_lamports:
        return False
    return reserve_stake_lamports - lamports_out > STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS
