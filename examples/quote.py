#!/usr/bin/env python3
"""Example CLI that fetches a stake pool and prints quotes for each flow."""

import argparse
import sys

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.client import Client
from stakepool.config import SOLANA_RPC_URLS
from stakepool.errors import StakePoolError
from stakepool.quote import (
    DepositSolQuoteArgs,
    DepositStakeQuoteArgs,
    StakeAccountLamports,
    WithdrawSolQuoteArgs,
    WithdrawStakeQuoteArgs,
)
from stakepool.rpc import new_rpc_client

LAMPORTS_PER_SOL = 1_000_000_000


def _fee_pct(fee) -> str:
    if fee.denominator == 0:
        return "0.00%"
    return f"{fee.numerator / fee.denominator * 100:.2f}%"


def main() -> None:
    parser = argparse.ArgumentParser(description="Quote stake pool deposits and withdrawals")
    parser.add_argument("pool", help="Stake pool account address")
    parser.add_argument(
        "--env",
        default="mainnet-beta",
        choices=["mainnet-beta", "testnet", "devnet", "localnet"],
        help="Environment to connect to",
    )
    parser.add_argument(
        "--amount",
        type=int,
        default=LAMPORTS_PER_SOL,
        help="Amount in lamports (deposits) or pool tokens (withdrawals)",
    )
    args = parser.parse_args()

    pool_addr = Pubkey.from_string(args.pool)
    client = Client.from_env(args.env)
    rpc = new_rpc_client(SOLANA_RPC_URLS[args.env])

    try:
        pool = client.fetch_stake_pool(pool_addr)
        reserve = client.fetch_reserve_lamports(pool)
        validators = client.fetch_validator_list(pool.validator_list)
        epoch = rpc.get_epoch_info().value.epoch
    except Exception as e:
        print(f"Error fetching pool: {e}")
        sys.exit(1)

    print(f"=== Stake Pool {pool_addr} ===")
    print(f"Pool Mint:              {pool.pool_mint}")
    print(f"Total Lamports:         {pool.total_lamports}")
    print(f"Pool Token Supply:      {pool.pool_token_supply}")
    print(f"Last Update Epoch:      {pool.last_update_epoch} (current {epoch})")
    print(f"Reserve Lamports:       {reserve}")
    print(f"Validators:             {len(validators)} / {validators.header.max_validators}")
    print(f"SOL Deposit Fee:        {_fee_pct(pool.sol_deposit_fee)}")
    print(f"SOL Withdrawal Fee:     {_fee_pct(pool.sol_withdrawal_fee)}")
    print(f"Stake Deposit Fee:      {_fee_pct(pool.stake_deposit_fee)}")
    print(f"Stake Withdrawal Fee:   {_fee_pct(pool.stake_withdrawal_fee)}")
    print()

    print(f"=== Quotes for {args.amount} ===")
    try:
        q = pool.quote_deposit_sol(args.amount, DepositSolQuoteArgs(depositor=Pubkey.default(), current_epoch=epoch))
        print(f"Deposit SOL:            {q.out_amount} tokens (fees {q.total_fees})")
    except StakePoolError as e:
        print(f"Deposit SOL:            unavailable: {e}")

    if len(validators) > 0:
        v = validators[0]
        try:
            q = pool.quote_deposit_stake(
                StakeAccountLamports(staked=args.amount, unstaked=0),
                DepositStakeQuoteArgs.from_validator_stake_info(v, epoch),
            )
            print(f"Deposit Stake:          {q.tokens_out} tokens via {str(v.vote_account_address)[:16]}... (fees {q.total_fees})")
        except StakePoolError as e:
            print(f"Deposit Stake:          unavailable: {e}")

    wargs = WithdrawSolQuoteArgs(reserve_stake_lamports=reserve, current_epoch=epoch)
    try:
        q = pool.quote_withdraw_sol(args.amount, wargs)
        print(f"Withdraw SOL:           {q.out_amount} lamports (fee {q.manager_fee})")
    except StakePoolError as e:
        print(f"Withdraw SOL:           unavailable: {e}")

    try:
        q = pool.quote_rev_withdraw_sol(args.amount, wargs)
        print(f"Withdraw SOL (reverse): {q.in_amount} tokens for {q.out_amount} lamports")
    except StakePoolError as e:
        print(f"Withdraw SOL (reverse): unavailable: {e}")

    try:
        q = pool.quote_withdraw_stake(args.amount, WithdrawStakeQuoteArgs(current_epoch=epoch))
        print(f"Withdraw Stake:         {q.lamports_staked} lamports (fee {q.fee_amount})")
    except StakePoolError as e:
        print(f"Withdraw Stake:         unavailable: {e}")

    print()
    print("Done.")


if __name__ == "__main__":
    main()
