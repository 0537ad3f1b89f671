"""Value types embedded in stake pool and validator list accounts.

Enum discriminants are single bytes in declaration order starting at 0.
Integer fields are little-endian. ``ValidatorStakeInfo`` is a packed 73-byte
record with no alignment padding.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.borsh import BorshWriter, IncrementalReader
from stakepool.ratio import U64_MAX, Ceil, FeeRatio, Ratio

U32_MAX = 0xFFFF_FFFF


def _check_uint(name: str, v: int, max_value: int) -> None:
    if not 0 <= v <= max_value:
        raise ValueError(f"{name} out of range: {v}")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AccountType(IntEnum):
    UNINITIALIZED = 0
    STAKE_POOL = 1
    VALIDATOR_LIST = 2


class StakeStatus(IntEnum):
    # Stake account is active, there may be a transient stake as well.
    ACTIVE = 0
    # Only the transient stake account exists, deactivating during removal.
    DEACTIVATING_TRANSIENT = 1
    # No stake accounts left, entry removed on the next pool balance update.
    READY_FOR_REMOVAL = 2
    # Only the validator stake account is deactivating.
    DEACTIVATING_VALIDATOR = 3
    # Both the transient and validator stake accounts are deactivating.
    DEACTIVATING_ALL = 4

    def __str__(self) -> str:
        _names = {
            0: "active",
            1: "deactivating-transient",
            2: "ready-for-removal",
            3: "deactivating-validator",
            4: "deactivating-all",
        }
        return _names.get(self.value, "unknown")


class FutureEpochKind(IntEnum):
    NONE = 0
    # Takes effect at the next epoch boundary.
    ONE = 1
    # Takes effect two epoch boundaries from now.
    TWO = 2


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fee:
    """Fee schedule stored on the pool as ``numerator / denominator``.

    The program accepts a zero denominator and treats it as no fee.
    """

    denominator: int  # u64
    numerator: int  # u64

    ZERO: ClassVar[Fee]

    def __post_init__(self) -> None:
        _check_uint("denominator", self.denominator, U64_MAX)
        _check_uint("numerator", self.numerator, U64_MAX)

    def is_zero(self) -> bool:
        return self.denominator == 0 or self.numerator == 0

    def to_fee_ceil(self) -> FeeRatio | None:
        """Ceiling-rounded fee operator, or ``None`` if the fee exceeds 100%."""
        if self.denominator == 0:
            n, d = 0, 1
        else:
            n, d = self.numerator, self.denominator
        if n > d:
            return None
        return FeeRatio(Ceil(Ratio(n, d)))

    @classmethod
    def read(cls, r: IncrementalReader) -> Fee:
        denominator = r.read_u64()
        numerator = r.read_u64()
        return cls(denominator=denominator, numerator=numerator)

    def write(self, w: BorshWriter) -> None:
        w.write_u64(self.denominator)
        w.write_u64(self.numerator)


Fee.ZERO = Fee(denominator=0, numerator=0)


@dataclass(frozen=True)
class FutureEpoch:
    """Pending fee change: nothing, or a fee that lands one or two epochs out."""

    kind: FutureEpochKind = FutureEpochKind.NONE
    fee: Fee | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", FutureEpochKind(self.kind))
        if (self.kind == FutureEpochKind.NONE) != (self.fee is None):
            raise ValueError(f"future epoch {self.kind.name} with fee {self.fee}")

    @classmethod
    def one(cls, fee: Fee) -> FutureEpoch:
        return cls(FutureEpochKind.ONE, fee)

    @classmethod
    def two(cls, fee: Fee) -> FutureEpoch:
        return cls(FutureEpochKind.TWO, fee)

    @classmethod
    def read(cls, r: IncrementalReader) -> FutureEpoch:
        kind = FutureEpochKind(r.read_u8())
        if kind == FutureEpochKind.NONE:
            return cls()
        return cls(kind, Fee.read(r))

    def write(self, w: BorshWriter) -> None:
        w.write_u8(self.kind)
        if self.fee is not None:
            self.fee.write(w)


# ---------------------------------------------------------------------------
# Lockup
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Lockup:
    unix_timestamp: int = 0  # i64
    epoch: int = 0  # u64
    custodian: Pubkey = field(default_factory=Pubkey.default)

    @classmethod
    def read(cls, r: IncrementalReader) -> Lockup:
        unix_timestamp = r.read_i64()
        epoch = r.read_u64()
        custodian = Pubkey.from_bytes(r.read_pubkey_raw())
        return cls(unix_timestamp=unix_timestamp, epoch=epoch, custodian=custodian)

    def write(self, w: BorshWriter) -> None:
        w.write_i64(self.unix_timestamp)
        w.write_u64(self.epoch)
        w.write_pubkey_raw(bytes(self.custodian))


# ---------------------------------------------------------------------------
# Validator list entries
# ---------------------------------------------------------------------------


_VALIDATOR_STAKE_INFO_FORMAT = "<4QIIB32s"


@dataclass(frozen=True)
class ValidatorStakeInfo:
    """One validator's entry on the validator list."""

    # Lamports on the validator stake account, including rent.
    # Stale if last_update_epoch is behind the current epoch.
    active_stake_lamports: int = 0  # u64
    # Lamports on the transient stake account.
    transient_stake_lamports: int = 0  # u64
    last_update_epoch: int = 0  # u64
    transient_seed_suffix: int = 0  # u64
    unused: int = 0  # u32
    validator_seed_suffix: int | None = None  # u32, 0 on the wire
    status: StakeStatus = StakeStatus.ACTIVE  # u8
    vote_account_address: Pubkey = field(default_factory=Pubkey.default)

    STRUCT_SIZE = 73

    def __post_init__(self) -> None:
        _check_uint("active_stake_lamports", self.active_stake_lamports, U64_MAX)
        _check_uint("transient_stake_lamports", self.transient_stake_lamports, U64_MAX)
        _check_uint("last_update_epoch", self.last_update_epoch, U64_MAX)
        _check_uint("transient_seed_suffix", self.transient_seed_suffix, U64_MAX)
        _check_uint("unused", self.unused, U32_MAX)
        if self.validator_seed_suffix is not None:
            _check_uint("validator_seed_suffix", self.validator_seed_suffix, U32_MAX)
            if self.validator_seed_suffix == 0:
                raise ValueError("validator_seed_suffix must be None or non-zero")
        object.__setattr__(self, "status", StakeStatus(self.status))

    @classmethod
    def from_bytes(cls, data: bytes | memoryview, offset: int = 0) -> ValidatorStakeInfo:
        if len(data) - offset < cls.STRUCT_SIZE:
            raise ValueError(
                f"data too short for validator stake info: {len(data) - offset} < {cls.STRUCT_SIZE}"
            )
        (
            active, transient, epoch, transient_seed,
            unused, validator_seed, status, vote,
        ) = struct.unpack_from(_VALIDATOR_STAKE_INFO_FORMAT, data, offset)
        return cls(
            active_stake_lamports=active,
            transient_stake_lamports=transient,
            last_update_epoch=epoch,
            transient_seed_suffix=transient_seed,
            unused=unused,
            validator_seed_suffix=validator_seed or None,
            status=StakeStatus(status),
            vote_account_address=Pubkey.from_bytes(vote),
        )

    def to_bytes(self) -> bytes:
        return struct.pack(
            _VALIDATOR_STAKE_INFO_FORMAT,
            self.active_stake_lamports,
            self.transient_stake_lamports,
            self.last_update_epoch,
            self.transient_seed_suffix,
            self.unused,
            self.validator_seed_suffix or 0,
            self.status,
            bytes(self.vote_account_address),
        )


assert struct.calcsize(_VALIDATOR_STAKE_INFO_FORMAT) == ValidatorStakeInfo.STRUCT_SIZE


@dataclass(frozen=True)
class ValidatorListHeader:
    account_type: AccountType = AccountType.UNINITIALIZED
    max_validators: int = 0  # u32

    def __post_init__(self) -> None:
        object.__setattr__(self, "account_type", AccountType(self.account_type))
        _check_uint("max_validators", self.max_validators, U32_MAX)
