"""Operation handlers.

One function per operation. Each consumes the request's ordered account list,
validates every precondition it can before the first write, then mutates the
records and asks the transfer service to move assets. Check order:

1. slots belong to this program (IncorrectProgramId),
2. records decode and are (un)initialized as required (NotInitialized / ConstructorOnce),
3. signers, ownership and treasurer capabilities (InvalidOwner),
4. cross-references (UnmatchedPool / IncorrectNetworkId),
5. amounts (ZeroValue / InsufficientFunds).

Handlers run inside the engine's store transaction, so a failure after a
write (e.g. the settlement leg of a swap) discards the earlier writes too.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Type

from ...config import ProgramConfig
from ...errors import (
    ArithmeticOverflowError,
    ConstructorOnceError,
    IncorrectNetworkIdError,
    IncorrectProgramIdError,
    InsufficientFundsError,
    InvalidInstructionError,
    InvalidOwnerError,
    NotInitializedError,
    UnmatchedPoolError,
    ZeroValueError,
)
from ...kernels.python.checked_math import U64, U128, checked_add, checked_sub
from ...kernels.python.cross_curve_v1 import curve
from ...state.accounts import AccountStore, R
from ...state.balances import PRIMARY_MINT
from ...state.lp import LPTAccount
from ...state.network import MAX_MINTS, Network, NetworkState
from ...state.pools import Pool
from ..fees import FeeSchedule, apply_fee
from ..liquidity import add_liquidity, remove_liquidity
from .accounts import AccountCursor
from .types import AccountMeta, AuthorityGate, Effect, Event, Instruction, TransferService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationContext:
    program_id: str
    store: AccountStore
    tokens: TransferService
    gate: AuthorityGate
    config: ProgramConfig


HandlerFn = Callable[[InvocationContext, AccountCursor, Instruction], Effect]


# -- Shared checks -----------------------------------------------------------

def _require_owned(ctx: InvocationContext, *metas: AccountMeta) -> None:
    for meta in metas:
        if ctx.store.owner_of(meta.key) != ctx.program_id:
            raise IncorrectProgramIdError(f"account {meta.key} is not owned by the program")


def _require_token_program(ctx: InvocationContext, meta: AccountMeta) -> None:
    if meta.key != ctx.tokens.program_id:
        raise IncorrectProgramIdError(f"unexpected token program: {meta.key}")


def _load_initialized(ctx: InvocationContext, meta: AccountMeta, record_type: Type[R]) -> R:
    record = ctx.store.load(meta.key, record_type)
    if not record.is_initialized():
        raise NotInitializedError(f"{record_type.__name__} {meta.key} is not initialized")
    return record


def _is_treasurer(ctx: InvocationContext, pool: AccountMeta, treasurer: AccountMeta) -> bool:
    return treasurer.key == ctx.gate.treasurer_of(pool.key)


def _pool_fee_schedule(ctx: InvocationContext, pool: Pool) -> FeeSchedule:
    """The configured schedule with the fee numerator the pool was created with."""
    try:
        return replace(ctx.config.fee_schedule, fee_num=pool.fee_rate)
    except ValueError as exc:
        raise ArithmeticOverflowError(f"pool fee rate does not fit the fee schedule: {exc}") from exc


# -- Constructors ------------------------------------------------------------

def initialize_network(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling InitializeNetwork")
    network_acc = cursor.next()
    _require_owned(ctx, network_acc)

    network = ctx.store.load(network_acc.key, Network)
    if not network.can_advance_to(NetworkState.INITIALIZED):
        raise ConstructorOnceError("network is already initialized")
    if not network_acc.is_signer:
        raise InvalidOwnerError("network account must sign")

    mints = [Network.primary()]
    mints.extend(meta.key for meta in cursor.take(MAX_MINTS - 1))

    ctx.store.store(network_acc.key, replace(network, state=NetworkState.INITIALIZED, mints=tuple(mints)))
    return Effect(event=Event.NETWORK_INITIALIZED)


def initialize_pool(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling InitializePool")
    (
        owner,
        network_acc,
        pool_acc,
        treasury_acc,
        lpt_acc,
        src_acc,
        mint_acc,
        treasurer,
        token_program,
        _sysvar_rent,
    ) = cursor.take(10)
    _require_owned(ctx, network_acc, pool_acc, lpt_acc)
    _require_token_program(ctx, token_program)

    network = _load_initialized(ctx, network_acc, Network)
    pool = ctx.store.load(pool_acc.key, Pool)
    lpt = ctx.store.load(lpt_acc.key, LPTAccount)
    if pool.is_initialized() or lpt.is_initialized():
        raise ConstructorOnceError("pool or LPT account is already initialized")
    if (
        not owner.is_signer
        or not pool_acc.is_signer
        or not lpt_acc.is_signer
        or not _is_treasurer(ctx, pool_acc, treasurer)
    ):
        raise InvalidOwnerError("owner, pool and LPT accounts must sign with the pool's treasurer")
    if not network.is_approved(mint_acc.key):
        raise UnmatchedPoolError(f"mint {mint_acc.key} is not approved by the network")
    is_primary = mint_acc.key == PRIMARY_MINT
    if not is_primary and not network.is_activated():
        raise NotInitializedError("network is not activated; create the primary pool first")
    if is_primary and not network.can_advance_to(NetworkState.ACTIVATED):
        raise ConstructorOnceError("primary pool already exists")
    if ix.reserve == 0 or ix.lpt == 0:
        raise ZeroValueError("initial reserve and lpt must be positive")

    ctx.tokens.initialize_account(treasury_acc.key, mint_acc.key, treasurer.key)
    ctx.tokens.transfer(ix.reserve, src_acc.key, treasury_acc.key, owner.key)

    if is_primary:
        ctx.store.store(network_acc.key, replace(network, state=NetworkState.ACTIVATED))
    ctx.store.store(
        pool_acc.key,
        replace(
            pool,
            owner=owner.key,
            network=network_acc.key,
            mint=mint_acc.key,
            treasury=treasury_acc.key,
            reserve=ix.reserve,
            lpt=ix.lpt,
            fee_rate=ctx.config.fee_schedule.fee_num,
            initialized=True,
        ),
    )
    ctx.store.store(lpt_acc.key, replace(lpt, owner=owner.key, pool=pool_acc.key, lpt=ix.lpt, initialized=True))
    return Effect(event=Event.POOL_INITIALIZED, reserve_in=ix.reserve, lpt_minted=ix.lpt)


def initialize_lpt(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling InitializeLPT")
    owner, pool_acc, lpt_acc = cursor.take(3)
    _require_owned(ctx, pool_acc, lpt_acc)

    ctx.store.load(pool_acc.key, Pool)
    lpt = ctx.store.load(lpt_acc.key, LPTAccount)
    if lpt.is_initialized():
        raise ConstructorOnceError("LPT account is already initialized")
    if not owner.is_signer or not lpt_acc.is_signer:
        raise InvalidOwnerError("owner and LPT account must sign")

    ctx.store.store(lpt_acc.key, replace(lpt, owner=owner.key, pool=pool_acc.key, lpt=0, initialized=True))
    return Effect(event=Event.LPT_INITIALIZED)


# -- Liquidity ---------------------------------------------------------------

def add_liquidity_handler(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling AddLiquidity")
    owner, pool_acc, treasury_acc, lpt_acc, src_acc, token_program = cursor.take(6)
    _require_owned(ctx, pool_acc, lpt_acc)
    _require_token_program(ctx, token_program)

    pool = _load_initialized(ctx, pool_acc, Pool)
    lpt = _load_initialized(ctx, lpt_acc, LPTAccount)
    if not owner.is_signer or pool.treasury != treasury_acc.key or lpt.owner != owner.key:
        raise InvalidOwnerError("signer must own the LPT account and name the pool's treasury")
    if lpt.pool != pool_acc.key:
        raise UnmatchedPoolError("LPT account is bound to another pool")
    if ix.reserve == 0:
        raise ZeroValueError("reserve must be positive")

    minted, new_reserve, new_pool_lpt = add_liquidity(pool, ix.reserve)
    new_account_lpt = checked_add(lpt.lpt, minted, bits=U128)

    ctx.tokens.transfer(ix.reserve, src_acc.key, treasury_acc.key, owner.key)

    ctx.store.store(pool_acc.key, replace(pool, reserve=new_reserve, lpt=new_pool_lpt))
    ctx.store.store(lpt_acc.key, replace(lpt, lpt=new_account_lpt))
    return Effect(event=Event.LIQUIDITY_ADDED, reserve_in=ix.reserve, lpt_minted=minted)


def remove_liquidity_handler(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling RemoveLiquidity")
    owner, pool_acc, treasury_acc, lpt_acc, dst_acc, treasurer, token_program = cursor.take(7)
    _require_owned(ctx, pool_acc, lpt_acc)
    _require_token_program(ctx, token_program)

    pool = _load_initialized(ctx, pool_acc, Pool)
    lpt = _load_initialized(ctx, lpt_acc, LPTAccount)
    if (
        not owner.is_signer
        or pool.treasury != treasury_acc.key
        or lpt.owner != owner.key
        or not _is_treasurer(ctx, pool_acc, treasurer)
    ):
        raise InvalidOwnerError("signer must own the LPT account and name the pool's treasury and treasurer")
    if lpt.pool != pool_acc.key:
        raise UnmatchedPoolError("LPT account is bound to another pool")
    if ix.lpt == 0:
        raise ZeroValueError("lpt must be positive")
    if lpt.lpt < ix.lpt:
        raise InsufficientFundsError(f"LPT balance {lpt.lpt} < {ix.lpt}")

    payout, new_reserve, new_pool_lpt = remove_liquidity(pool, ix.lpt)
    new_account_lpt = checked_sub(lpt.lpt, ix.lpt, bits=U128)

    ctx.store.store(lpt_acc.key, replace(lpt, lpt=new_account_lpt))
    ctx.store.store(pool_acc.key, replace(pool, reserve=new_reserve, lpt=new_pool_lpt))

    ctx.tokens.transfer(payout, treasury_acc.key, dst_acc.key, treasurer.key)
    return Effect(event=Event.LIQUIDITY_REMOVED, lpt_burned=ix.lpt, payout=payout)


# -- Swap --------------------------------------------------------------------

def swap(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling Swap")
    owner = cursor.next()
    bid_pool_acc, bid_treasury_acc, src_acc = cursor.take(3)
    ask_pool_acc, ask_treasury_acc, dst_acc, ask_treasurer = cursor.take(4)
    sen_pool_acc, sen_treasury_acc, vault_acc, sen_treasurer = cursor.take(4)
    token_program = cursor.next()
    _require_owned(ctx, bid_pool_acc, ask_pool_acc, sen_pool_acc)
    _require_token_program(ctx, token_program)

    bid = _load_initialized(ctx, bid_pool_acc, Pool)
    ask = _load_initialized(ctx, ask_pool_acc, Pool)
    sen = _load_initialized(ctx, sen_pool_acc, Pool)
    if (
        not owner.is_signer
        or bid.treasury != bid_treasury_acc.key
        or ask.treasury != ask_treasury_acc.key
        or not _is_treasurer(ctx, ask_pool_acc, ask_treasurer)
        or sen.treasury != sen_treasury_acc.key
        or not _is_treasurer(ctx, sen_pool_acc, sen_treasurer)
    ):
        raise InvalidOwnerError("swap treasuries or treasurers do not match their pools")
    if sen.network != bid.network or sen.network != ask.network:
        raise IncorrectNetworkIdError("bid, ask and settlement pools must share a network")
    if ix.amount == 0:
        raise ZeroValueError("amount must be positive")
    if bid_pool_acc.key == ask_pool_acc.key:
        return Effect(event=Event.SWAPPED, noop=True)

    # Price the ask side before any write.
    schedule = _pool_fee_schedule(ctx, ask)
    new_bid_reserve = checked_add(bid.reserve, ix.amount, bits=U64)
    new_ask_reserve_without_fee = curve(new_bid_reserve, bid.reserve, bid.lpt, ask.reserve, ask.lpt)

    # Bid leg
    ctx.tokens.transfer(ix.amount, src_acc.key, bid_treasury_acc.key, owner.key)
    ctx.store.store(bid_pool_acc.key, replace(bid, reserve=new_bid_reserve))

    # Ask leg
    fees = apply_fee(new_ask_reserve_without_fee, ask.reserve, ask.is_primary(), schedule)
    new_ask_reserve = checked_add(fees.new_reserve_with_fee, fees.earn, bits=U64)
    ask = replace(ask, reserve=new_ask_reserve)
    ctx.store.store(ask_pool_acc.key, ask)
    ctx.tokens.transfer(fees.payout, ask_treasury_acc.key, dst_acc.key, ask_treasurer.key)

    # Settlement leg: the earn stays in the ask pool and is paid out of the
    # settlement pool at the ask/settlement curve price, without burning shares.
    earn_in_settlement = 0
    if fees.earn != 0:
        # Re-read: the settlement pool may be the bid pool written above.
        sen = ctx.store.load(sen_pool_acc.key, Pool)
        new_sen_reserve = curve(new_ask_reserve, fees.new_reserve_with_fee, ask.lpt, sen.reserve, sen.lpt)
        earn_in_settlement = checked_sub(sen.reserve, new_sen_reserve, bits=U64)
        ctx.store.store(sen_pool_acc.key, replace(sen, reserve=new_sen_reserve))
        ctx.tokens.transfer(earn_in_settlement, sen_treasury_acc.key, vault_acc.key, sen_treasurer.key)

    return Effect(
        event=Event.SWAPPED,
        reserve_in=ix.amount,
        payout=fees.payout,
        fee=fees.fee,
        earn=fees.earn,
        earn_in_settlement=earn_in_settlement,
    )


# -- LPT transfer and closers ------------------------------------------------

def transfer(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling Transfer")
    owner, src_lpt_acc, dst_lpt_acc = cursor.take(3)
    _require_owned(ctx, src_lpt_acc, dst_lpt_acc)

    src = _load_initialized(ctx, src_lpt_acc, LPTAccount)
    dst = _load_initialized(ctx, dst_lpt_acc, LPTAccount)
    if not owner.is_signer or src.owner != owner.key:
        raise InvalidOwnerError("signer must own the source LPT account")
    if src.pool != dst.pool:
        raise UnmatchedPoolError("source and destination LPT accounts belong to different pools")
    if ix.lpt == 0:
        raise ZeroValueError("lpt must be positive")
    if src.lpt < ix.lpt:
        raise InsufficientFundsError(f"LPT balance {src.lpt} < {ix.lpt}")
    if src_lpt_acc.key == dst_lpt_acc.key:
        return Effect(event=Event.LPT_TRANSFERRED, noop=True)

    new_src_lpt = checked_sub(src.lpt, ix.lpt, bits=U128)
    new_dst_lpt = checked_add(dst.lpt, ix.lpt, bits=U128)
    ctx.store.store(src_lpt_acc.key, replace(src, lpt=new_src_lpt))
    ctx.store.store(dst_lpt_acc.key, replace(dst, lpt=new_dst_lpt))
    return Effect(event=Event.LPT_TRANSFERRED, lpt_moved=ix.lpt)


def close_lpt(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling CloseLPT")
    owner, lpt_acc, dst_acc = cursor.take(3)
    _require_owned(ctx, lpt_acc)

    lpt = _load_initialized(ctx, lpt_acc, LPTAccount)
    if not owner.is_signer or lpt.owner != owner.key:
        raise InvalidOwnerError("signer must own the LPT account")
    if lpt.lpt != 0:
        raise ZeroValueError(f"LPT account still holds {lpt.lpt} shares")
    if dst_acc.key == lpt_acc.key:
        raise InvalidInstructionError("destination must differ from the closed account")

    reclaimed = ctx.store.close(lpt_acc.key, dst_acc.key)
    return Effect(event=Event.LPT_CLOSED, lamports_reclaimed=reclaimed)


def close_pool(ctx: InvocationContext, cursor: AccountCursor, ix: Instruction) -> Effect:
    logger.debug("Calling ClosePool")
    owner, pool_acc, treasury_acc, dst_acc, treasurer, token_program = cursor.take(6)
    _require_owned(ctx, pool_acc)
    _require_token_program(ctx, token_program)

    pool = _load_initialized(ctx, pool_acc, Pool)
    if (
        not owner.is_signer
        or pool.owner != owner.key
        or pool.treasury != treasury_acc.key
        or not _is_treasurer(ctx, pool_acc, treasurer)
    ):
        raise InvalidOwnerError("signer must own the pool and name its treasury and treasurer")
    if not pool.is_drained():
        raise ZeroValueError(f"pool is not drained: reserve={pool.reserve} lpt={pool.lpt}")
    if dst_acc.key in (pool_acc.key, treasury_acc.key):
        raise InvalidInstructionError("destination must differ from the closed accounts")

    reclaimed = ctx.tokens.close_account(treasury_acc.key, dst_acc.key, treasurer.key)
    reclaimed = checked_add(reclaimed, ctx.store.close(pool_acc.key, dst_acc.key), bits=U64)
    return Effect(event=Event.POOL_CLOSED, lamports_reclaimed=reclaimed)
