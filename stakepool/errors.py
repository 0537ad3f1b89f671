"""Failures surfaced by checked quotes and validator lookups.

Unchecked quote methods never raise these; they return ``None`` when the
arithmetic overflows u64. Malformed account bytes raise ``ValueError``.

Exception names follow the upstream program's error variants, but no numeric
error codes are assigned here.
"""

from __future__ import annotations


class StakePoolError(Exception):
    """Base class for stake pool quote failures."""


class CalculationFailure(StakePoolError):
    """An intermediate or final value did not fit in a u64."""


class StakeListAndPoolOutOfDate(StakePoolError):
    """The pool has not been updated for the current epoch."""


class InvalidSolDepositAuthority(StakePoolError):
    """Depositor does not match the pool's SOL deposit authority."""


class InvalidStakeDepositAuthority(StakePoolError):
    """Signer does not match the pool's stake deposit authority."""


class IncorrectDepositVoteAddress(StakePoolError):
    """Stake is delegated to a validator other than the preferred deposit validator."""


class IncorrectWithdrawVoteAddress(StakePoolError):
    """Withdrawal targets a validator other than the preferred withdraw validator."""


class InvalidState(StakePoolError):
    """Validator is not in the status the requested flow needs."""


class SolWithdrawalTooLarge(StakePoolError):
    """Withdrawal would leave the reserve at or below its rent-exempt minimum."""


class ValidatorNotFound(StakePoolError):
    """Vote account is not on the validator list."""
