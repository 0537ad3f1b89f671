import struct

import pytest
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.borsh import BorshWriter
from stakepool.errors import ValidatorNotFound
from stakepool.typedefs import AccountType, StakeStatus, ValidatorListHeader, ValidatorStakeInfo
from stakepool.validator_list import HEADER_EXT_SIZE, ValidatorList

POOL = Pubkey.from_bytes(bytes([0xAB]) * 32)
SIZE = ValidatorStakeInfo.STRUCT_SIZE


def _pk(i: int) -> Pubkey:
    return Pubkey.from_bytes(bytes([i]) * 32)


def _validators() -> list[ValidatorStakeInfo]:
    return [
        ValidatorStakeInfo(
            active_stake_lamports=1_000_000_000,
            transient_stake_lamports=0,
            last_update_epoch=600,
            transient_seed_suffix=0,
            validator_seed_suffix=None,
            status=StakeStatus.ACTIVE,
            vote_account_address=_pk(1),
        ),
        ValidatorStakeInfo(
            active_stake_lamports=2_000_000_000,
            transient_stake_lamports=5_000,
            last_update_epoch=600,
            transient_seed_suffix=12,
            validator_seed_suffix=7,
            status=StakeStatus.DEACTIVATING_TRANSIENT,
            vote_account_address=_pk(2),
        ),
        ValidatorStakeInfo(
            active_stake_lamports=3_000_000_000,
            last_update_epoch=599,
            status=StakeStatus.READY_FOR_REMOVAL,
            vote_account_address=_pk(3),
        ),
    ]


def _account_bytes(max_validators: int = 5) -> bytes:
    records = b"".join(v.to_bytes() for v in _validators())
    header = struct.pack("<BII", AccountType.VALIDATOR_LIST, max_validators, 3)
    padding = bytes(SIZE * max(0, max_validators - 3))
    return header + records + padding


class TestDeserialize:
    def test_header_and_records(self):
        vl = ValidatorList.deserialize(_account_bytes())
        assert vl.header == ValidatorListHeader(account_type=AccountType.VALIDATOR_LIST, max_validators=5)
        assert len(vl) == 3
        assert list(vl) == _validators()
        assert vl[1].validator_seed_suffix == 7
        assert vl[-1].vote_account_address == _pk(3)

    def test_index_out_of_range(self):
        vl = ValidatorList.deserialize(_account_bytes())
        with pytest.raises(IndexError):
            vl[3]
        with pytest.raises(IndexError):
            vl[-4]

    def test_too_short(self):
        data = _account_bytes(max_validators=3)
        with pytest.raises(ValueError, match="too small for 3 validators"):
            ValidatorList.deserialize(data[:-1])

    def test_short_header(self):
        with pytest.raises(ValueError):
            ValidatorList.deserialize(b"\x02\x05\x00\x00\x00\x03")

    def test_records_are_not_copied(self):
        buf = bytearray(_account_bytes())
        vl = ValidatorList.deserialize(buf)
        buf[HEADER_EXT_SIZE] = 0x2A
        assert vl[0].active_stake_lamports == (1_000_000_000 & ~0xFF) | 0x2A

    def test_view_is_read_only(self):
        vl = ValidatorList.deserialize(bytearray(_account_bytes()))
        with pytest.raises(TypeError):
            vl.raw_validators[0] = 1

    def test_empty(self):
        vl = ValidatorList.deserialize(struct.pack("<BII", 2, 0, 0))
        assert len(vl) == 0
        assert list(vl) == []


class TestSerialize:
    def test_pads_to_max_validators(self):
        vl = ValidatorList.from_validators(
            ValidatorListHeader(account_type=AccountType.VALIDATOR_LIST, max_validators=5), _validators()
        )
        data = vl.to_bytes()
        assert len(data) == HEADER_EXT_SIZE + 5 * SIZE
        assert data == _account_bytes()
        assert data[HEADER_EXT_SIZE + 3 * SIZE :] == bytes(2 * SIZE)

    def test_round_trip(self):
        data = _account_bytes()
        assert ValidatorList.deserialize(data).to_bytes() == data
        assert ValidatorList.deserialize(data) == ValidatorList.from_validators(
            ValidatorListHeader(account_type=AccountType.VALIDATOR_LIST, max_validators=5), _validators()
        )

    def test_more_validators_than_max(self):
        vl = ValidatorList.from_validators(
            ValidatorListHeader(account_type=AccountType.VALIDATOR_LIST, max_validators=1), _validators()
        )
        data = vl.to_bytes()
        assert len(data) == HEADER_EXT_SIZE + 3 * SIZE
        assert struct.unpack_from("<BII", data) == (2, 1, 3)

    def test_serialize_into_writer(self):
        w = BorshWriter()
        w.write_u8(0xFF)
        ValidatorList(ValidatorListHeader(max_validators=1)).serialize(w)
        assert w.to_bytes() == b"\xff" + struct.pack("<BII", 0, 1, 0) + bytes(SIZE)

    def test_rejects_partial_record(self):
        with pytest.raises(ValueError, match="not a multiple"):
            ValidatorList(ValidatorListHeader(), bytes(SIZE + 1))


class TestFind:
    def test_found(self):
        vl = ValidatorList.deserialize(_account_bytes())
        assert vl.find(_pk(2)).transient_seed_suffix == 12

    def test_not_found(self):
        vl = ValidatorList.deserialize(_account_bytes())
        with pytest.raises(ValidatorNotFound):
            vl.find(_pk(9))


class TestSeeds:
    def test_validator_stake_account_seeds(self):
        vl = ValidatorList.deserialize(_account_bytes())
        assert list(vl.validator_stake_account_seeds(POOL)) == [
            (bytes(_pk(1)), bytes(POOL), b""),
            (bytes(_pk(2)), bytes(POOL), struct.pack("<I", 7)),
            (bytes(_pk(3)), bytes(POOL), b""),
        ]

    def test_transient_stake_account_seeds(self):
        vl = ValidatorList.deserialize(_account_bytes())
        assert list(vl.transient_stake_account_seeds(POOL)) == [
            (b"transient", bytes(_pk(1)), bytes(POOL), struct.pack("<Q", 0)),
            (b"transient", bytes(_pk(2)), bytes(POOL), struct.pack("<Q", 12)),
            (b"transient", bytes(_pk(3)), bytes(POOL), struct.pack("<Q", 0)),
        ]

    def test_account_pair_seeds(self):
        vl = ValidatorList.deserialize(_account_bytes())
        pairs = list(vl.account_pair_seeds(POOL))
        assert len(pairs) == 3
        assert pairs[1] == (
            (bytes(_pk(2)), bytes(POOL), struct.pack("<I", 7)),
            (b"transient", bytes(_pk(2)), bytes(POOL), struct.pack("<Q", 12)),
        )
