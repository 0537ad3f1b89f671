"""Protocol constants shared by the stake pool program and its clients."""

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

SYSVAR_RENT = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
SYSVAR_STAKE_HISTORY = Pubkey.from_string("SysvarStakeHistory1111111111111111111111111")
SYSVAR_CLOCK = Pubkey.from_string("SysvarC1ock11111111111111111111111111111111")
SYSVAR_STAKE_CONFIG = Pubkey.from_string("StakeConfig11111111111111111111111111111111")

STAKE_PROGRAM = Pubkey.from_string("Stake11111111111111111111111111111111111111")
SYSTEM_PROGRAM = Pubkey.from_string("11111111111111111111111111111111")
TOKEN_PROGRAM = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")

# Rent-exempt reserve of a 200-byte stake account.
STAKE_ACCOUNT_RENT_EXEMPT_LAMPORTS = 2_282_880

# Minimum staked lamports the program keeps in a validator stake account.
MIN_ACTIVE_STAKE = 1_000_000

AUTHORITY_WITHDRAW_SEED = b"withdraw"
AUTHORITY_DEPOSIT_SEED = b"deposit"
TRANSIENT_SEED = b"transient"
EPHEMERAL_SEED = b"ephemeral"

MAX_SEED_LEN = 32
MAX_SEEDS = 16
PDA_MARKER = b"ProgramDerivedAddress"
