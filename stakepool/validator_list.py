"""Validator list account: a header followed by packed ``ValidatorStakeInfo`` records.

Records are not decoded up front. ``ValidatorList`` keeps a read-only
``memoryview`` over the record bytes of the account data and decodes an entry
only when it is accessed.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.borsh import BorshWriter, IncrementalReader
from stakepool.errors import ValidatorNotFound
from stakepool.pda import transient_stake_seeds, validator_stake_seeds
from stakepool.typedefs import U32_MAX, AccountType, ValidatorListHeader, ValidatorStakeInfo

# account_type u8, max_validators u32, num_validators u32
HEADER_EXT_SIZE = 9

_EMPTY_VALIDATOR = ValidatorStakeInfo().to_bytes()


class ValidatorList:
    def __init__(self, header: ValidatorListHeader, validators: bytes | memoryview = b"") -> None:
        if len(validators) % ValidatorStakeInfo.STRUCT_SIZE != 0:
            raise ValueError(
                f"validator bytes length {len(validators)} is not a multiple of "
                f"{ValidatorStakeInfo.STRUCT_SIZE}"
            )
        self.header = header
        self._data = memoryview(validators).toreadonly()

    @classmethod
    def deserialize(cls, data: bytes | bytearray | memoryview) -> ValidatorList:
        """Parse a validator list account without copying the records.

        Bytes past ``num_validators`` records (the padding up to
        ``max_validators``) are ignored.
        """
        r = IncrementalReader(data)
        account_type = AccountType(r.read_u8())
        max_validators = r.read_u32()
        num_validators = r.read_u32()
        expected = num_validators * ValidatorStakeInfo.STRUCT_SIZE
        if r.remaining < expected:
            raise ValueError(
                f"data too small for {num_validators} validators: {r.remaining} < {expected}"
            )
        view = memoryview(data)[r.offset : r.offset + expected]
        header = ValidatorListHeader(account_type=account_type, max_validators=max_validators)
        return cls(header, view)

    @classmethod
    def from_validators(
        cls, header: ValidatorListHeader, validators: Sequence[ValidatorStakeInfo]
    ) -> ValidatorList:
        return cls(header, b"".join(v.to_bytes() for v in validators))

    def __len__(self) -> int:
        return len(self._data) // ValidatorStakeInfo.STRUCT_SIZE

    def __getitem__(self, index: int) -> ValidatorStakeInfo:
        n = len(self)
        if index < 0:
            index += n
        if not 0 <= index < n:
            raise IndexError(f"validator index {index} out of range for {n} validators")
        return ValidatorStakeInfo.from_bytes(self._data, index * ValidatorStakeInfo.STRUCT_SIZE)

    def __iter__(self) -> Iterator[ValidatorStakeInfo]:
        for i in range(len(self)):
            yield self[i]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidatorList):
            return NotImplemented
        return self.header == other.header and self._data == other._data

    def __repr__(self) -> str:
        return f"ValidatorList(header={self.header!r}, num_validators={len(self)})"

    @property
    def raw_validators(self) -> memoryview:
        return self._data

    def find(self, vote_account: Pubkey) -> ValidatorStakeInfo:
        for v in self:
            if v.vote_account_address == vote_account:
                return v
        raise ValidatorNotFound(f"vote account {vote_account} is not on the validator list")

    def serialize(self, w: BorshWriter) -> None:
        """Write the header and records, zero-padded up to ``max_validators`` entries."""
        n = len(self)
        if n > U32_MAX:
            raise ValueError(f"validator count {n} overflows u32")
        w.write_u8(self.header.account_type)
        w.write_u32(self.header.max_validators)
        w.write_u32(n)
        w.write_bytes(bytes(self._data))
        for _ in range(n, self.header.max_validators):
            w.write_bytes(_EMPTY_VALIDATOR)

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.serialize(w)
        return w.to_bytes()

    # -- Seeds --

    def validator_stake_account_seeds(
        self, stake_pool: Pubkey
    ) -> Iterator[tuple[bytes, bytes, bytes]]:
        for v in self:
            yield validator_stake_seeds(v.vote_account_address, stake_pool, v.validator_seed_suffix)

    def transient_stake_account_seeds(
        self, stake_pool: Pubkey
    ) -> Iterator[tuple[bytes, bytes, bytes, bytes]]:
        for v in self:
            yield transient_stake_seeds(v.vote_account_address, stake_pool, v.transient_seed_suffix)

    def account_pair_seeds(
        self, stake_pool: Pubkey
    ) -> Iterator[tuple[tuple[bytes, bytes, bytes], tuple[bytes, bytes, bytes, bytes]]]:
        """Yield ``(validator stake seeds, transient stake seeds)`` per validator."""
        return zip(
            self.validator_stake_account_seeds(stake_pool),
            self.transient_stake_account_seeds(stake_pool),
        )
