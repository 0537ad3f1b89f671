"""RPC client for fetching stake pool program accounts."""

from __future__ import annotations

import logging
from typing import Protocol

import base58  # type: ignore[import-untyped]
from solana.rpc.types import MemcmpOpts  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.rpc.responses import GetAccountInfoResp, GetProgramAccountsResp  # type: ignore[import-untyped]

from stakepool.config import PROGRAM_ID, SOLANA_RPC_URLS
from stakepool.pool import StakePool
from stakepool.rpc import new_rpc_client
from stakepool.typedefs import AccountType
from stakepool.validator_list import ValidatorList

logger = logging.getLogger(__name__)


class SolanaClient(Protocol):
    def get_account_info(self, pubkey: Pubkey) -> GetAccountInfoResp: ...

    def get_program_accounts(self, pubkey: Pubkey, **kwargs) -> GetProgramAccountsResp: ...


def _check_account_type(data: bytes, expected: AccountType, addr: Pubkey) -> None:
    if len(data) == 0:
        raise ValueError(f"account {addr} has no data")
    if data[0] != expected:
        raise ValueError(f"account {addr} has type {data[0]}, expected {expected.name}")


class Client:
    """Read-only client for stake pool program accounts."""

    def __init__(
        self,
        solana_rpc: SolanaClient,
        program_id: Pubkey,
    ) -> None:
        self._solana_rpc = solana_rpc
        self._program_id = program_id

    @property
    def program_id(self) -> Pubkey:
        return self._program_id

    @classmethod
    def from_env(cls, env: str) -> Client:
        """Create a client configured for the given environment.

        Args:
            env: Environment name ("mainnet-beta", "testnet", "devnet", "localnet")
        """
        return cls(
            new_rpc_client(SOLANA_RPC_URLS[env]),
            Pubkey.from_string(PROGRAM_ID),
        )

    @classmethod
    def mainnet_beta(cls) -> Client:
        return cls.from_env("mainnet-beta")

    @classmethod
    def testnet(cls) -> Client:
        return cls.from_env("testnet")

    @classmethod
    def devnet(cls) -> Client:
        return cls.from_env("devnet")

    @classmethod
    def localnet(cls) -> Client:
        return cls.from_env("localnet")

    def fetch_stake_pool(self, addr: Pubkey) -> StakePool:
        data = self._fetch_account_data(addr)
        _check_account_type(data, AccountType.STAKE_POOL, addr)
        return StakePool.from_bytes(data)

    def fetch_validator_list(self, addr: Pubkey) -> ValidatorList:
        data = self._fetch_account_data(addr)
        _check_account_type(data, AccountType.VALIDATOR_LIST, addr)
        return ValidatorList.deserialize(data)

    def fetch_reserve_lamports(self, pool: StakePool) -> int:
        """Lamport balance of the pool's reserve stake account."""
        resp = self._solana_rpc.get_account_info(pool.reserve_stake)
        if resp.value is None:
            raise ValueError(f"reserve stake account not found: {pool.reserve_stake}")
        return resp.value.lamports

    def fetch_all_stake_pools(self) -> dict[Pubkey, StakePool]:
        """Every stake pool account owned by the program, keyed by address."""
        disc = bytes([AccountType.STAKE_POOL])
        filters = [MemcmpOpts(offset=0, bytes=base58.b58encode(disc).decode())]
        resp = self._solana_rpc.get_program_accounts(
            self._program_id,
            encoding="base64",
            filters=filters,
        )
        pools = {}
        for acct in resp.value:
            pools[acct.pubkey] = StakePool.from_bytes(bytes(acct.account.data))
        logger.debug("fetched %d stake pools under %s", len(pools), self._program_id)
        return pools

    def _fetch_account_data(self, addr: Pubkey) -> bytes:
        resp = self._solana_rpc.get_account_info(addr)
        if resp.value is None:
            raise ValueError(f"account not found: {addr}")
        return bytes(resp.value.data)
