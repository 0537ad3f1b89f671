"""Stake pool account state and quoting.

``StakePool`` mirrors the on-chain Borsh layout field for field. Its quote
methods replicate the program's arithmetic so clients can price deposits and
withdrawals without simulating a transaction.

Each flow comes in two forms. ``quote_*`` runs the same applicability checks
the program does and raises a :class:`~stakepool.errors.StakePoolError`
subclass on the first one that fails, then raises ``CalculationFailure`` if the
arithmetic overflows. ``quote_*_unchecked`` skips the checks and returns
``None`` on overflow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from stakepool.borsh import BorshWriter, IncrementalReader
from stakepool.errors import (
    CalculationFailure,
    IncorrectDepositVoteAddress,
    InvalidSolDepositAuthority,
    InvalidState,
    SolWithdrawalTooLarge,
    StakeListAndPoolOutOfDate,
)
from stakepool.quote import (
    DepositSolQuote,
    DepositSolQuoteArgs,
    DepositStakeQuote,
    DepositStakeQuoteArgs,
    StakeAccountLamports,
    WithdrawSolQuote,
    WithdrawSolQuoteArgs,
    WithdrawStakeQuote,
    WithdrawStakeQuoteArgs,
    reserve_has_sufficient_lamports,
)
from stakepool.ratio import U64_MAX, FeeRatio, Floor, Ratio, U64Range, check_u64, referral_fee_ratio
from stakepool.typedefs import AccountType, Fee, FutureEpoch, Lockup, StakeStatus

logger = logging.getLogger(__name__)


def _read_pubkey(r: IncrementalReader) -> Pubkey:
    return Pubkey.from_bytes(r.read_pubkey_raw())


def _write_pubkey(w: BorshWriter, pk: Pubkey) -> None:
    w.write_pubkey_raw(bytes(pk))


@dataclass
class StakePool:
    account_type: AccountType = AccountType.STAKE_POOL
    manager: Pubkey = field(default_factory=Pubkey.default)
    staker: Pubkey = field(default_factory=Pubkey.default)
    # Signs stake deposits. Defaults to the pool's deposit authority PDA.
    stake_deposit_authority: Pubkey = field(default_factory=Pubkey.default)
    stake_withdraw_bump_seed: int = 0  # u8
    validator_list: Pubkey = field(default_factory=Pubkey.default)
    reserve_stake: Pubkey = field(default_factory=Pubkey.default)
    pool_mint: Pubkey = field(default_factory=Pubkey.default)
    manager_fee_account: Pubkey = field(default_factory=Pubkey.default)
    token_program_id: Pubkey = field(default_factory=Pubkey.default)
    # Stale unless last_update_epoch has caught up with the current epoch.
    total_lamports: int = 0  # u64
    pool_token_supply: int = 0  # u64
    last_update_epoch: int = 0  # u64
    lockup: Lockup = field(default_factory=Lockup)
    # Proportion of rewards taken each epoch.
    epoch_fee: Fee = Fee.ZERO
    next_epoch_fee: FutureEpoch = field(default_factory=FutureEpoch)
    preferred_deposit_validator_vote_address: Pubkey | None = None
    preferred_withdraw_validator_vote_address: Pubkey | None = None
    stake_deposit_fee: Fee = Fee.ZERO
    stake_withdrawal_fee: Fee = Fee.ZERO
    next_stake_withdrawal_fee: FutureEpoch = field(default_factory=FutureEpoch)
    # Percentage (0-100) of collected stake deposit fees paid to referrers.
    stake_referral_fee: int = 0  # u8
    # When set, SOL deposits must be signed by this key.
    sol_deposit_authority: Pubkey | None = None
    sol_deposit_fee: Fee = Fee.ZERO
    # Percentage (0-100) of collected SOL deposit fees paid to referrers.
    sol_referral_fee: int = 0  # u8
    # When set, SOL withdrawals must be signed by this key.
    sol_withdraw_authority: Pubkey | None = None
    sol_withdrawal_fee: Fee = Fee.ZERO
    next_sol_withdrawal_fee: FutureEpoch = field(default_factory=FutureEpoch)
    # Previous epoch snapshot, only used for APR estimation.
    last_epoch_pool_token_supply: int = 0  # u64
    last_epoch_total_lamports: int = 0  # u64

    # -- Serialization --

    @classmethod
    def from_bytes(cls, data: bytes) -> StakePool:
        """Deserialize a stake pool account.

        Tolerates trailing bytes; accounts are allocated larger than the
        serialized struct.
        """
        r = IncrementalReader(data)
        account_type = AccountType(r.read_u8())
        manager = _read_pubkey(r)
        staker = _read_pubkey(r)
        stake_deposit_authority = _read_pubkey(r)
        stake_withdraw_bump_seed = r.read_u8()
        validator_list = _read_pubkey(r)
        reserve_stake = _read_pubkey(r)
        pool_mint = _read_pubkey(r)
        manager_fee_account = _read_pubkey(r)
        token_program_id = _read_pubkey(r)
        total_lamports = r.read_u64()
        pool_token_supply = r.read_u64()
        last_update_epoch = r.read_u64()
        lockup = Lockup.read(r)
        epoch_fee = Fee.read(r)
        next_epoch_fee = FutureEpoch.read(r)
        preferred_deposit = r.read_option(lambda: _read_pubkey(r))
        preferred_withdraw = r.read_option(lambda: _read_pubkey(r))
        stake_deposit_fee = Fee.read(r)
        stake_withdrawal_fee = Fee.read(r)
        next_stake_withdrawal_fee = FutureEpoch.read(r)
        stake_referral_fee = r.read_u8()
        sol_deposit_authority = r.read_option(lambda: _read_pubkey(r))
        sol_deposit_fee = Fee.read(r)
        sol_referral_fee = r.read_u8()
        sol_withdraw_authority = r.read_option(lambda: _read_pubkey(r))
        sol_withdrawal_fee = Fee.read(r)
        next_sol_withdrawal_fee = FutureEpoch.read(r)
        last_epoch_pool_token_supply = r.read_u64()
        last_epoch_total_lamports = r.read_u64()
        return cls(
            account_type=account_type,
            manager=manager,
            staker=staker,
            stake_deposit_authority=stake_deposit_authority,
            stake_withdraw_bump_seed=stake_withdraw_bump_seed,
            validator_list=validator_list,
            reserve_stake=reserve_stake,
            pool_mint=pool_mint,
            manager_fee_account=manager_fee_account,
            token_program_id=token_program_id,
            total_lamports=total_lamports,
            pool_token_supply=pool_token_supply,
            last_update_epoch=last_update_epoch,
            lockup=lockup,
            epoch_fee=epoch_fee,
            next_epoch_fee=next_epoch_fee,
            preferred_deposit_validator_vote_address=preferred_deposit,
            preferred_withdraw_validator_vote_address=preferred_withdraw,
            stake_deposit_fee=stake_deposit_fee,
            stake_withdrawal_fee=stake_withdrawal_fee,
            next_stake_withdrawal_fee=next_stake_withdrawal_fee,
            stake_referral_fee=stake_referral_fee,
            sol_deposit_authority=sol_deposit_authority,
            sol_deposit_fee=sol_deposit_fee,
            sol_referral_fee=sol_referral_fee,
            sol_withdraw_authority=sol_withdraw_authority,
            sol_withdrawal_fee=sol_withdrawal_fee,
            next_sol_withdrawal_fee=next_sol_withdrawal_fee,
            last_epoch_pool_token_supply=last_epoch_pool_token_supply,
            last_epoch_total_lamports=last_epoch_total_lamports,
        )

    def serialize(self, w: BorshWriter) -> None:
        w.write_u8(self.account_type)
        _write_pubkey(w, self.manager)
        _write_pubkey(w, self.staker)
        _write_pubkey(w, self.stake_deposit_authority)
        w.write_u8(self.stake_withdraw_bump_seed)
        _write_pubkey(w, self.validator_list)
        _write_pubkey(w, self.reserve_stake)
        _write_pubkey(w, self.pool_mint)
        _write_pubkey(w, self.manager_fee_account)
        _write_pubkey(w, self.token_program_id)
        w.write_u64(self.total_lamports)
        w.write_u64(self.pool_token_supply)
        w.write_u64(self.last_update_epoch)
        self.lockup.write(w)
        self.epoch_fee.write(w)
        self.next_epoch_fee.write(w)
        w.write_option(self.preferred_deposit_validator_vote_address, lambda pk: _write_pubkey(w, pk))
        w.write_option(self.preferred_withdraw_validator_vote_address, lambda pk: _write_pubkey(w, pk))
        self.stake_deposit_fee.write(w)
        self.stake_withdrawal_fee.write(w)
        self.next_stake_withdrawal_fee.write(w)
        w.write_u8(self.stake_referral_fee)
        w.write_option(self.sol_deposit_authority, lambda pk: _write_pubkey(w, pk))
        self.sol_deposit_fee.write(w)
        w.write_u8(self.sol_referral_fee)
        w.write_option(self.sol_withdraw_authority, lambda pk: _write_pubkey(w, pk))
        self.sol_withdrawal_fee.write(w)
        self.next_sol_withdrawal_fee.write(w)
        w.write_u64(self.last_epoch_pool_token_supply)
        w.write_u64(self.last_epoch_total_lamports)

    def to_bytes(self) -> bytes:
        """Serialize without the trailing account padding."""
        w = BorshWriter()
        self.serialize(w)
        return w.to_bytes()

    # -- Applicability checks --

    def is_updated_for_epoch(self, current_epoch: int) -> bool:
        return self.last_update_epoch >= current_epoch

    def can_pk_deposit(self, pubkey: Pubkey) -> bool:
        return self.sol_deposit_authority is None or self.sol_deposit_authority == pubkey

    def can_pk_withdraw_sol(self, pubkey: Pubkey) -> bool:
        return self.sol_withdraw_authority is None or self.sol_withdraw_authority == pubkey

    def can_deposit_stake_of(self, vote: Pubkey) -> bool:
        preferred = self.preferred_deposit_validator_vote_address
        return preferred is None or preferred == vote

    def can_withdraw_stake_of(self, vote: Pubkey) -> bool:
        preferred = self.preferred_withdraw_validator_vote_address
        return preferred is None or preferred == vote

    def _require_updated(self, current_epoch: int) -> None:
        if not self.is_updated_for_epoch(current_epoch):
            logger.debug(
                "pool last updated at epoch %d, current epoch %d",
                self.last_update_epoch,
                current_epoch,
            )
            raise StakeListAndPoolOutOfDate(
                f"pool last updated at epoch {self.last_update_epoch}, current epoch {current_epoch}"
            )

    # -- Exchange rate --

    def supply_over_lamports(self) -> Floor:
        """Applied to lamports, gives pool tokens before fees."""
        return Floor(Ratio(self.pool_token_supply, self.total_lamports))

    def lamports_over_supply(self) -> Floor:
        """Applied to pool tokens, gives lamports before fees."""
        return Floor(Ratio(self.total_lamports, self.pool_token_supply))

    def lamports_to_pool_tokens(self, lamports: int) -> int | None:
        """``lamports * pool_token_supply / total_lamports``, rounded down.

        Returns ``lamports`` unchanged if either side of the rate is 0, which
        is what the program does. ``None`` on overflow.
        """
        check_u64("lamports", lamports)
        ratio = self.supply_over_lamports()
        if ratio.ratio.is_zero():
            return lamports
        return ratio.apply(lamports)

    def pool_tokens_to_lamports(self, pool_tokens: int) -> int | None:
        """``pool_tokens * total_lamports / pool_token_supply``, rounded down.

        Same degenerate-rate rule as :meth:`lamports_to_pool_tokens`.
        """
        check_u64("pool_tokens", pool_tokens)
        ratio = self.lamports_over_supply()
        if ratio.ratio.is_zero():
            return pool_tokens
        return ratio.apply(pool_tokens)

    def rev_pool_tokens_to_lamports(self, lamports: int) -> U64Range | None:
        """Range of pool token amounts :meth:`pool_tokens_to_lamports` maps to ``lamports``.

        May differ from :meth:`lamports_to_pool_tokens`.
        """
        check_u64("lamports", lamports)
        ratio = self.lamports_over_supply()
        if ratio.ratio.is_zero():
            return lamports, lamports
        return ratio.reverse_est(lamports)

    def sol_referral_fee_ratio(self) -> FeeRatio | None:
        """``None`` if ``sol_referral_fee > 100``."""
        return referral_fee_ratio(self.sol_referral_fee)

    def stake_referral_fee_ratio(self) -> FeeRatio | None:
        """``None`` if ``stake_referral_fee > 100``."""
        return referral_fee_ratio(self.stake_referral_fee)

    # -- Deposit SOL --

    def quote_deposit_sol(self, lamports: int, args: DepositSolQuoteArgs) -> DepositSolQuote:
        self._require_updated(args.current_epoch)
        if not self.can_pk_deposit(args.depositor):
            logger.debug("depositor %s is not the sol deposit authority", args.depositor)
            raise InvalidSolDepositAuthority(
                f"{args.depositor} is not the sol deposit authority {self.sol_deposit_authority}"
            )
        quote = self.quote_deposit_sol_unchecked(lamports)
        if quote is None:
            raise CalculationFailure(f"deposit of {lamports} lamports overflows")
        return quote

    def quote_deposit_sol_unchecked(self, lamports: int) -> DepositSolQuote | None:
        new_pool_tokens = self.lamports_to_pool_tokens(lamports)
        if new_pool_tokens is None:
            return None
        fee = self.sol_deposit_fee.to_fee_ceil()
        referral = self.sol_referral_fee_ratio()
        if fee is None or referral is None:
            return None
        after_fee = fee.apply(new_pool_tokens)
        split = referral.apply(after_fee.fee)
        return DepositSolQuote(
            in_amount=lamports,
            out_amount=after_fee.rem,
            referral_fee=split.fee,
            manager_fee=split.rem,
        )

    # -- Deposit stake --

    def quote_deposit_stake(
        self,
        stake_account_lamports: StakeAccountLamports,
        args: DepositStakeQuoteArgs,
    ) -> DepositStakeQuote:
        self._require_updated(args.current_epoch)
        if not self.can_deposit_stake_of(args.validator_vote):
            logger.debug("vote account %s is not the preferred deposit validator", args.validator_vote)
            raise IncorrectDepositVoteAddress(
                f"{args.validator_vote} is not the preferred deposit validator "
                f"{self.preferred_deposit_validator_vote_address}"
            )
        if args.validator_status != StakeStatus.ACTIVE:
            logger.debug("validator %s is %s", args.validator_vote, args.validator_status)
            raise InvalidState(f"validator {args.validator_vote} is {args.validator_status}, not active")
        quote = self.quote_deposit_stake_unchecked(stake_account_lamports)
        if quote is None:
            raise CalculationFailure(f"deposit of {stake_account_lamports} overflows")
        return quote

    def quote_deposit_stake_unchecked(
        self, stake_account_lamports: StakeAccountLamports
    ) -> DepositStakeQuote | None:
        """Quote a stake account deposit, ignoring applicability.

        The quote may not be serviceable if the pool is stale, the validator
        is inactive, missing from the list or not the preferred validator.
        """
        total = stake_account_lamports.total
        if total > U64_MAX:
            return None
        new_pool_tokens = self.lamports_to_pool_tokens(total)
        tokens_from_stake = self.lamports_to_pool_tokens(stake_account_lamports.staked)
        if new_pool_tokens is None or tokens_from_stake is None:
            return None
        tokens_from_sol = new_pool_tokens - tokens_from_stake
        if tokens_from_sol < 0:
            return None

        stake_fee = self.stake_deposit_fee.to_fee_ceil()
        sol_fee = self.sol_deposit_fee.to_fee_ceil()
        referral = self.stake_referral_fee_ratio()
        if stake_fee is None or sol_fee is None or referral is None:
            return None
        total_fee = stake_fee.apply(tokens_from_stake).fee + sol_fee.apply(tokens_from_sol).fee
        if total_fee > U64_MAX:
            return None
        tokens_out = new_pool_tokens - total_fee
        if tokens_out < 0:
            return None

        split = referral.apply(total_fee)
        return DepositStakeQuote(
            stake_account_lamports_in=stake_account_lamports,
            tokens_out=tokens_out,
            manager_fee=split.rem,
            referral_fee=split.fee,
        )

    # -- Withdraw SOL --

    def quote_withdraw_sol(self, pool_tokens: int, args: WithdrawSolQuoteArgs) -> WithdrawSolQuote:
        self._require_updated(args.current_epoch)
        quote = self.quote_withdraw_sol_unchecked(pool_tokens)
        if quote is None:
            raise CalculationFailure(f"withdrawal of {pool_tokens} pool tokens overflows")
        self._require_reserve(args.reserve_stake_lamports, quote.out_amount)
        return quote

    def quote_rev_withdraw_sol(self, lamports: int, args: WithdrawSolQuoteArgs) -> WithdrawSolQuote:
        self._require_updated(args.current_epoch)
        self._require_reserve(args.reserve_stake_lamports, lamports)
        quote = self.quote_rev_withdraw_sol_unchecked(lamports)
        if quote is None:
            raise CalculationFailure(f"withdrawal of {lamports} lamports overflows")
        return quote

    def _require_reserve(self, reserve_stake_lamports: int, lamports_out: int) -> None:
        if not reserve_has_sufficient_lamports(reserve_stake_lamports, lamports_out):
            logger.debug(
                "reserve of %d lamports cannot pay out %d lamports",
                reserve_stake_lamports,
                lamports_out,
            )
            raise SolWithdrawalTooLarge(
                f"reserve of {reserve_stake_lamports} lamports cannot pay out {lamports_out} lamports"
            )

    def quote_withdraw_sol_unchecked(self, pool_tokens: int) -> WithdrawSolQuote | None:
        fee = self.sol_withdrawal_fee.to_fee_ceil()
        if fee is None:
            return None
        after_fee = fee.apply(pool_tokens)
        out_lamports = self.pool_tokens_to_lamports(after_fee.rem)
        if out_lamports is None:
            return None
        return WithdrawSolQuote(
            in_amount=pool_tokens,
            out_amount=out_lamports,
            manager_fee=after_fee.fee,
        )

    def quote_rev_withdraw_sol_unchecked(self, lamports: int) -> WithdrawSolQuote | None:
        """Smallest pool token input that withdraws at least ``lamports``.

        Feeding ``in_amount`` back into :meth:`quote_withdraw_sol_unchecked`
        can yield slightly more than ``lamports`` but never less.
        """
        fee = self.sol_withdrawal_fee.to_fee_ceil()
        if fee is None:
            return None
        after_fee_range = self.rev_pool_tokens_to_lamports(lamports)
        if after_fee_range is None:
            return None
        after_fee = after_fee_range[0]
        pool_tokens_range = fee.reverse_from_rem(after_fee)
        if pool_tokens_range is None:
            return None
        pool_tokens = pool_tokens_range[0]
        return WithdrawSolQuote(
            in_amount=pool_tokens,
            out_amount=lamports,
            manager_fee=pool_tokens - after_fee,
        )

    # -- Withdraw stake --

    def quote_withdraw_stake(
        self, pool_tokens: int, args: WithdrawStakeQuoteArgs
    ) -> WithdrawStakeQuote:
        self._require_updated(args.current_epoch)
        quote = self.quote_withdraw_stake_unchecked(pool_tokens)
        if quote is None:
            raise CalculationFailure(f"withdrawal of {pool_tokens} pool tokens overflows")
        return quote

    def quote_withdraw_stake_unchecked(self, pool_tokens: int) -> WithdrawStakeQuote | None:
        fee = self.stake_withdrawal_fee.to_fee_ceil()
        if fee is None:
            return None
        after_fee = fee.apply(pool_tokens)
        lamports_staked = self.pool_tokens_to_lamports(after_fee.rem)
        if lamports_staked is None:
            return None
        return WithdrawStakeQuote(
            tokens_in=pool_tokens,
            lamports_staked=lamports_staked,
            fee_amount=after_fee.fee,
        )
