"""Program derived addresses for stake pool accounts.

Derivation is done in pure Python so that seed-limit and off-curve behavior is
identical to the runtime's ``create_program_address`` and does not depend on a
native extension.
"""

from __future__ import annotations

import hashlib
import logging
import struct
from typing import Sequence

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.config import PROGRAM_ID
from stakepool.consts import (
    AUTHORITY_DEPOSIT_SEED,
    AUTHORITY_WITHDRAW_SEED,
    EPHEMERAL_SEED,
    MAX_SEED_LEN,
    MAX_SEEDS,
    PDA_MARKER,
    TRANSIENT_SEED,
)

logger = logging.getLogger(__name__)

ED25519_P = 2**255 - 19
ED25519_D = (-121665 * pow(121666, -1, ED25519_P)) % ED25519_P

DEFAULT_PROGRAM_ID = Pubkey.from_string(PROGRAM_ID)


def is_on_curve(data: bytes) -> bool:
    """Whether ``data`` decompresses to an ed25519 point.

    Follows Edwards-y decompression: the y coordinate is the low 255 bits,
    reduced mod p without a canonicity check, and the point exists iff
    ``(y^2 - 1) / (d*y^2 + 1)`` is a square. The sign bit never causes a
    rejection.
    """
    if len(data) != 32:
        raise ValueError(f"expected 32 bytes, got {len(data)}")
    p = ED25519_P
    y = (int.from_bytes(data, "little") & ((1 << 255) - 1)) % p
    y2 = y * y % p
    u = (y2 - 1) % p
    v = (ED25519_D * y2 + 1) % p
    if v == 0:
        return u == 0
    x2 = u * pow(v, -1, p) % p
    if x2 == 0:
        return True
    # Euler's criterion.
    return pow(x2, (p - 1) // 2, p) == 1


def create_program_address(seeds: Sequence[bytes], program_id: Pubkey) -> Pubkey | None:
    """Hash ``seeds`` into an address owned by ``program_id``.

    Returns ``None`` if there are more than 16 seeds, a seed is longer than
    32 bytes, or the hash lands on the curve.
    """
    if len(seeds) > MAX_SEEDS:
        return None
    h = hashlib.sha256()
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            return None
        h.update(seed)
    h.update(bytes(program_id))
    h.update(PDA_MARKER)
    digest = h.digest()
    if is_on_curve(digest):
        return None
    return Pubkey.from_bytes(digest)


def find_program_address(
    seeds: Sequence[bytes], program_id: Pubkey
) -> tuple[Pubkey, int] | None:
    """Search bumps 255 down to 1 for the first off-curve address.

    The bump is appended as an extra one-byte seed, so at most 15 caller
    seeds can succeed.
    """
    seeds = list(seeds)
    for bump in range(255, 0, -1):
        addr = create_program_address(seeds + [bytes([bump])], program_id)
        if addr is not None:
            return addr, bump
    logger.debug("no program address found for %d seeds under %s", len(seeds), program_id)
    return None


# ---------------------------------------------------------------------------
# Seeds
# ---------------------------------------------------------------------------


def withdraw_auth_seeds(stake_pool: Pubkey) -> tuple[bytes, bytes]:
    return bytes(stake_pool), AUTHORITY_WITHDRAW_SEED


def deposit_auth_seeds(stake_pool: Pubkey) -> tuple[bytes, bytes]:
    return bytes(stake_pool), AUTHORITY_DEPOSIT_SEED


def validator_stake_seeds(
    vote_account: Pubkey, stake_pool: Pubkey, seed: int | None
) -> tuple[bytes, bytes, bytes]:
    """Seeds of a validator's stake account.

    ``seed`` is the validator seed suffix; ``None`` contributes an empty seed.
    """
    suffix = b"" if seed is None else struct.pack("<I", seed)
    return bytes(vote_account), bytes(stake_pool), suffix


def transient_stake_seeds(
    vote_account: Pubkey, stake_pool: Pubkey, seed: int
) -> tuple[bytes, bytes, bytes, bytes]:
    return TRANSIENT_SEED, bytes(vote_account), bytes(stake_pool), struct.pack("<Q", seed)


def ephemeral_stake_seeds(stake_pool: Pubkey) -> tuple[bytes, bytes, bytes]:
    return EPHEMERAL_SEED, bytes(stake_pool), bytes(8)


# ---------------------------------------------------------------------------
# Finders
# ---------------------------------------------------------------------------


def find_withdraw_auth_pda(
    stake_pool: Pubkey, program_id: Pubkey = DEFAULT_PROGRAM_ID
) -> tuple[Pubkey, int] | None:
    return find_program_address(withdraw_auth_seeds(stake_pool), program_id)


def find_deposit_auth_pda(
    stake_pool: Pubkey, program_id: Pubkey = DEFAULT_PROGRAM_ID
) -> tuple[Pubkey, int] | None:
    return find_program_address(deposit_auth_seeds(stake_pool), program_id)


def find_validator_stake_account_pda(
    vote_account: Pubkey,
    stake_pool: Pubkey,
    seed: int | None = None,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> tuple[Pubkey, int] | None:
    return find_program_address(validator_stake_seeds(vote_account, stake_pool, seed), program_id)


def find_transient_stake_account_pda(
    vote_account: Pubkey,
    stake_pool: Pubkey,
    seed: int,
    program_id: Pubkey = DEFAULT_PROGRAM_ID,
) -> tuple[Pubkey, int] | None:
    return find_program_address(transient_stake_seeds(vote_account, stake_pool, seed), program_id)


def find_ephemeral_stake_account_pda(
    stake_pool: Pubkey, program_id: Pubkey = DEFAULT_PROGRAM_ID
) -> tuple[Pubkey, int] | None:
    return find_program_address(ephemeral_stake_seeds(stake_pool), program_id)
