from stakepool.client import Client
from stakepool.config import PROGRAM_ID, SOLANA_RPC_URLS
from stakepool.rpc import new_rpc_client
from stakepool.errors import (
    CalculationFailure,
    IncorrectDepositVoteAddress,
    IncorrectWithdrawVoteAddress,
    InvalidSolDepositAuthority,
    InvalidStakeDepositAuthority,
    InvalidState,
    SolWithdrawalTooLarge,
    StakeListAndPoolOutOfDate,
    StakePoolError,
    ValidatorNotFound,
)
from stakepool.pda import (
    create_program_address,
    find_deposit_auth_pda,
    find_ephemeral_stake_account_pda,
    find_program_address,
    find_transient_stake_account_pda,
    find_validator_stake_account_pda,
    find_withdraw_auth_pda,
    is_on_curve,
)
from stakepool.pool import StakePool
from stakepool.quote import (
    DepositSolQuote,
    DepositSolQuoteArgs,
    DepositStakeQuote,
    DepositStakeQuoteArgs,
    StakeAccountLamports,
    WithdrawSolQuote,
    WithdrawSolQuoteArgs,
    WithdrawStakeQuote,
    WithdrawStakeQuoteArgs,
    reserve_has_sufficient_lamports,
)
from stakepool.ratio import Ceil, FeeApplied, FeeRatio, Floor, Ratio
from stakepool.typedefs import (
    AccountType,
    Fee,
    FutureEpoch,
    FutureEpochKind,
    Lockup,
    StakeStatus,
    ValidatorListHeader,
    ValidatorStakeInfo,
)
from stakepool.validator_list import ValidatorList

__all__ = [
    "Client",
    "PROGRAM_ID",
    "SOLANA_RPC_URLS",
    "new_rpc_client",
    "CalculationFailure",
    "IncorrectDepositVoteAddress",
    "IncorrectWithdrawVoteAddress",
    "InvalidSolDepositAuthority",
    "InvalidStakeDepositAuthority",
    "InvalidState",
    "SolWithdrawalTooLarge",
    "StakeListAndPoolOutOfDate",
    "StakePoolError",
    "ValidatorNotFound",
    "create_program_address",
    "find_deposit_auth_pda",
    "find_ephemeral_stake_account_pda",
    "find_program_address",
    "find_transient_stake_account_pda",
    "find_validator_stake_account_pda",
    "find_withdraw_auth_pda",
    "is_on_curve",
    "StakePool",
    "DepositSolQuote",
    "DepositSolQuoteArgs",
    "DepositStakeQuote",
    "DepositStakeQuoteArgs",
    "StakeAccountLamports",
    "WithdrawSolQuote",
    "WithdrawSolQuoteArgs",
    "WithdrawStakeQuote",
    "WithdrawStakeQuoteArgs",
    "reserve_has_sufficient_lamports",
    "Ceil",
    "FeeApplied",
    "FeeRatio",
    "Floor",
    "Ratio",
    "AccountType",
    "Fee",
    "FutureEpoch",
    "FutureEpochKind",
    "Lockup",
    "StakeStatus",
    "ValidatorListHeader",
    "ValidatorStakeInfo",
    "ValidatorList",
]
