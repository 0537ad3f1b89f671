import pytest

import stakepool
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

ALL_ERRORS = [
    CalculationFailure,
    IncorrectDepositVoteAddress,
    IncorrectWithdrawVoteAddress,
    InvalidSolDepositAuthority,
    InvalidStakeDepositAuthority,
    InvalidState,
    SolWithdrawalTooLarge,
    StakeListAndPoolOutOfDate,
    ValidatorNotFound,
]


class TestErrorHierarchy:
    @pytest.mark.parametrize("cls", ALL_ERRORS)
    def test_subclasses_stake_pool_error(self, cls):
        assert issubclass(cls, StakePoolError)
        with pytest.raises(StakePoolError):
            raise cls("failed")

    def test_base_is_exception(self):
        assert issubclass(StakePoolError, Exception)

    @pytest.mark.parametrize("cls", ALL_ERRORS + [StakePoolError])
    def test_exported_from_package(self, cls):
        assert getattr(stakepool, cls.__name__) is cls
        assert cls.__name__ in stakepool.__all__
