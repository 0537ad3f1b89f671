import dataclasses
import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.borsh import BorshWriter, IncrementalReader
from stakepool.ratio import Ceil, Ratio
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

VOTE = Pubkey.from_string("4uQeVj5tqViQh7yWWGStvkEG1Zmhx6uasJtWCJziofM")


def _pack_validator(
    active=0, transient=0, epoch=0, transient_seed=0, unused=0, validator_seed=0, status=0, vote=VOTE
) -> bytes:
    return struct.pack(
        "<QQQQIIB", active, transient, epoch, transient_seed, unused, validator_seed, status
    ) + bytes(vote)


class TestFee:
    def test_zero_denominator_is_no_fee(self):
        fee = Fee(denominator=0, numerator=5).to_fee_ceil()
        assert fee is not None
        assert fee.ratio == Ratio(0, 1)
        assert fee.apply(1000).fee == 0

    def test_over_100_percent_is_none(self):
        assert Fee(denominator=10, numerator=11).to_fee_ceil() is None

    def test_ceil_rounding(self):
        fee = Fee(denominator=100, numerator=1).to_fee_ceil()
        assert fee.rounding == Ceil(Ratio(1, 100))
        assert fee.apply(101).fee == 2

    def test_is_zero(self):
        assert Fee.ZERO.is_zero()
        assert Fee(denominator=0, numerator=3).is_zero()
        assert not Fee(denominator=100, numerator=3).is_zero()

    def test_zero_is_class_constant(self):
        assert Fee.ZERO == Fee(denominator=0, numerator=0)
        assert "ZERO" not in {f.name for f in dataclasses.fields(Fee)}

    def test_wire_order_is_denominator_first(self):
        w = BorshWriter()
        Fee(denominator=100, numerator=3).write(w)
        assert w.to_bytes() == struct.pack("<QQ", 100, 3)

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            Fee(denominator=2**64, numerator=0)


class TestFutureEpoch:
    def test_none(self):
        w = BorshWriter()
        FutureEpoch().write(w)
        assert w.to_bytes() == b"\x00"
        assert FutureEpoch.read(IncrementalReader(b"\x00")) == FutureEpoch()

    def test_one_and_two(self):
        fee = Fee(denominator=100, numerator=3)
        for kind, fe in ((1, FutureEpoch.one(fee)), (2, FutureEpoch.two(fee))):
            w = BorshWriter()
            fe.write(w)
            data = w.to_bytes()
            assert data == bytes([kind]) + struct.pack("<QQ", 100, 3)
            assert FutureEpoch.read(IncrementalReader(data)) == fe

    def test_kind_and_fee_must_agree(self):
        with pytest.raises(ValueError):
            FutureEpoch(FutureEpochKind.ONE)
        with pytest.raises(ValueError):
            FutureEpoch(FutureEpochKind.NONE, Fee.ZERO)

    def test_unknown_tag(self):
        with pytest.raises(ValueError):
            FutureEpoch.read(IncrementalReader(b"\x03"))


class TestLockup:
    def test_read(self):
        data = struct.pack("<qQ", -5, 7) + bytes(VOTE)
        lockup = Lockup.read(IncrementalReader(data))
        assert lockup == Lockup(unix_timestamp=-5, epoch=7, custodian=VOTE)
        w = BorshWriter()
        lockup.write(w)
        assert w.to_bytes() == data

    def test_default(self):
        assert Lockup().custodian == Pubkey.default()


class TestStakeStatus:
    def test_str(self):
        assert str(StakeStatus.ACTIVE) == "active"
        assert str(StakeStatus.DEACTIVATING_ALL) == "deactivating-all"

    def test_values(self):
        assert [s.value for s in StakeStatus] == [0, 1, 2, 3, 4]


class TestValidatorStakeInfo:
    def test_from_bytes(self):
        data = _pack_validator(
            active=5_000_000, transient=7, epoch=600, transient_seed=3, unused=9, validator_seed=2, status=3
        )
        assert len(data) == ValidatorStakeInfo.STRUCT_SIZE
        v = ValidatorStakeInfo.from_bytes(data)
        assert v.active_stake_lamports == 5_000_000
        assert v.transient_stake_lamports == 7
        assert v.last_update_epoch == 600
        assert v.transient_seed_suffix == 3
        assert v.unused == 9
        assert v.validator_seed_suffix == 2
        assert v.status == StakeStatus.DEACTIVATING_VALIDATOR
        assert v.vote_account_address == VOTE
        assert v.to_bytes() == data

    def test_zero_validator_seed_is_none(self):
        v = ValidatorStakeInfo.from_bytes(_pack_validator(validator_seed=0))
        assert v.validator_seed_suffix is None
        assert v.to_bytes() == _pack_validator(validator_seed=0)

    def test_offset(self):
        data = b"\xaa" * 5 + _pack_validator(active=11)
        assert ValidatorStakeInfo.from_bytes(data, 5).active_stake_lamports == 11

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            ValidatorStakeInfo.from_bytes(_pack_validator(status=5))

    def test_too_short(self):
        with pytest.raises(ValueError, match="too short"):
            ValidatorStakeInfo.from_bytes(_pack_validator()[:-1])

    def test_rejects_zero_validator_seed(self):
        with pytest.raises(ValueError):
            ValidatorStakeInfo(validator_seed_suffix=0)

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ValidatorStakeInfo(unused=2**32)
        with pytest.raises(ValueError):
            ValidatorStakeInfo(active_stake_lamports=-1)

    def test_default_is_all_zero(self):
        assert ValidatorStakeInfo().to_bytes() == bytes(ValidatorStakeInfo.STRUCT_SIZE)


class TestValidatorListHeader:
    def test_coerces_account_type(self):
        h = ValidatorListHeader(account_type=2, max_validators=10)
        assert h.account_type is AccountType.VALIDATOR_LIST

    def test_rejects_out_of_range(self):
        with pytest.raises(ValueError):
            ValidatorListHeader(max_validators=2**32)
