from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

from senswap.config import ProgramConfig
from senswap.core.amm import AccountMeta, Instruction, InstructionTag, Processor, ProcessResult, pack
from senswap.integration.authorization import DerivedAuthorityGate
from senswap.integration.token_program import TokenProgram
from senswap.state.accounts import AccountStore
from senswap.state.balances import PRIMARY_MINT
from senswap.state.lp import LPTAccount
from senswap.state.network import MAX_MINTS, Network
from senswap.state.pools import Pool


MINT_A = "0x" + "aa" * 32
MINT_B = "0x" + "bb" * 32
MINT_C = "0x" + "cc" * 32
RENT_SYSVAR = "0x" + "53" * 32
RENT = 1_000


def signer(key: str) -> AccountMeta:
    return AccountMeta(key=key, is_signer=True)


def meta(key: str) -> AccountMeta:
    return AccountMeta(key=key)


@dataclass(frozen=True)
class PoolRefs:
    pool: str
    treasury: str
    lpt_account: str
    owner: str
    src: str
    mint: str
    treasurer: str


class World:
    """A store wired to a processor, token program and derived-authority gate."""

    def __init__(self, config: Optional[ProgramConfig] = None) -> None:
        self.config = config if config is not None else ProgramConfig()
        self.store = AccountStore()
        self.tokens = TokenProgram(self.store, self.config.token_program_id)
        self.gate = DerivedAuthorityGate(self.config.program_id)
        self.processor = Processor(self.store, self.tokens, self.gate, self.config)
        self._counter = 0

    @property
    def token_program_id(self) -> str:
        return self.config.token_program_id

    def key(self) -> str:
        self._counter += 1
        return "0x" + f"{self._counter:064x}"

    def program_slot(self, record, lamports: int = RENT) -> str:
        return self.store.allocate(self.key(), self.config.program_id, record, lamports=lamports).key

    def wallet(self, mint: str, amount: int = 0, owner: Optional[str] = None) -> tuple[str, str]:
        owner = owner if owner is not None else self.key()
        account = self.tokens.create_account(self.key(), mint=mint, owner=owner, amount=amount)
        return owner, account

    def token_slot(self) -> str:
        return self.tokens.create_account(self.key(), lamports=RENT)

    def run(self, accounts: list[AccountMeta], ix: Instruction) -> ProcessResult:
        return self.processor.process(accounts, pack(ix))

    # -- Constructors -------------------------------------------------------

    def init_network(self, mints: tuple[str, ...] = (MINT_A, MINT_B, MINT_C)) -> str:
        network = self.program_slot(Network())
        padded = list(mints) + [self.key() for _ in range(MAX_MINTS - 1 - len(mints))]
        accounts = [signer(network)] + [meta(m) for m in padded]
        result = self.run(accounts, Instruction(tag=InstructionTag.INITIALIZE_NETWORK))
        assert result.ok, result.message
        return network

    def init_pool_accounts(
        self, network: str, mint: str, reserve: int
    ) -> tuple[list[AccountMeta], PoolRefs]:
        owner, src = self.wallet(mint, reserve)
        pool = self.program_slot(Pool())
        treasury = self.token_slot()
        lpt_account = self.program_slot(LPTAccount())
        treasurer = self.gate.treasurer_of(pool)
        accounts = [
            signer(owner),
            meta(network),
            signer(pool),
            meta(treasury),
            signer(lpt_account),
            meta(src),
            meta(mint),
            meta(treasurer),
            meta(self.token_program_id),
            meta(RENT_SYSVAR),
        ]
        refs = PoolRefs(
            pool=pool,
            treasury=treasury,
            lpt_account=lpt_account,
            owner=owner,
            src=src,
            mint=mint,
            treasurer=treasurer,
        )
        return accounts, refs

    def init_pool(self, network: str, mint: str, reserve: int, lpt: int) -> PoolRefs:
        accounts, refs = self.init_pool_accounts(network, mint, reserve)
        result = self.run(accounts, Instruction(tag=InstructionTag.INITIALIZE_POOL, reserve=reserve, lpt=lpt))
        assert result.ok, result.message
        return refs

    def init_lpt(self, pool: str, owner: Optional[str] = None) -> tuple[str, str]:
        owner = owner if owner is not None else self.key()
        lpt_account = self.program_slot(LPTAccount())
        result = self.run(
            [signer(owner), meta(pool), signer(lpt_account)],
            Instruction(tag=InstructionTag.INITIALIZE_LPT),
        )
        assert result.ok, result.message
        return owner, lpt_account

    # -- Operations ---------------------------------------------------------

    def add_liquidity(self, p: PoolRefs, reserve: int, *, owner: str, lpt_account: str, src: str) -> ProcessResult:
        accounts = [
            signer(owner),
            meta(p.pool),
            meta(p.treasury),
            meta(lpt_account),
            meta(src),
            meta(self.token_program_id),
        ]
        return self.run(accounts, Instruction(tag=InstructionTag.ADD_LIQUIDITY, reserve=reserve))

    def remove_liquidity(self, p: PoolRefs, lpt: int, *, owner: str, lpt_account: str, dst: str) -> ProcessResult:
        accounts = [
            signer(owner),
            meta(p.pool),
            meta(p.treasury),
            meta(lpt_account),
            meta(dst),
            meta(p.treasurer),
            meta(self.token_program_id),
        ]
        return self.run(accounts, Instruction(tag=InstructionTag.REMOVE_LIQUIDITY, lpt=lpt))

    def swap_accounts(
        self, owner: str, bid: PoolRefs, src: str, ask: PoolRefs, dst: str, sen: PoolRefs, vault: str
    ) -> list[AccountMeta]:
        return [
            signer(owner),
            meta(bid.pool),
            meta(bid.treasury),
            meta(src),
            meta(ask.pool),
            meta(ask.treasury),
            meta(dst),
            meta(ask.treasurer),
            meta(sen.pool),
            meta(sen.treasury),
            meta(vault),
            meta(sen.treasurer),
            meta(self.token_program_id),
        ]

    def swap(
        self, amount: int, *, owner: str, bid: PoolRefs, src: str, ask: PoolRefs, dst: str, sen: PoolRefs, vault: str
    ) -> ProcessResult:
        accounts = self.swap_accounts(owner, bid, src, ask, dst, sen, vault)
        return self.run(accounts, Instruction(tag=InstructionTag.SWAP, amount=amount))

    def transfer_lpt(self, lpt: int, *, owner: str, src: str, dst: str) -> ProcessResult:
        return self.run(
            [signer(owner), meta(src), meta(dst)],
            Instruction(tag=InstructionTag.TRANSFER, lpt=lpt),
        )

    def close_lpt(self, *, owner: str, lpt_account: str, dst: str) -> ProcessResult:
        return self.run(
            [signer(owner), meta(lpt_account), meta(dst)],
            Instruction(tag=InstructionTag.CLOSE_LPT),
        )

    def close_pool(self, p: PoolRefs, *, dst: str) -> ProcessResult:
        accounts = [
            signer(p.owner),
            meta(p.pool),
            meta(p.treasury),
            meta(dst),
            meta(p.treasurer),
            meta(self.token_program_id),
        ]
        return self.run(accounts, Instruction(tag=InstructionTag.CLOSE_POOL))

    # -- Reads --------------------------------------------------------------

    def pool(self, key: str) -> Pool:
        return self.store.load(key, Pool)

    def lpt(self, key: str) -> LPTAccount:
        return self.store.load(key, LPTAccount)

    def network(self, key: str) -> Network:
        return self.store.load(key, Network)


@dataclass
class Market:
    """Activated network with a primary pool and two asset pools."""

    world: World
    network: str
    primary: PoolRefs
    pool_a: PoolRefs
    pool_b: PoolRefs


@pytest.fixture
def world() -> World:
    return World()


@pytest.fixture
def market(world: World) -> Market:
    network = world.init_network()
    primary = world.init_pool(network, PRIMARY_MINT, 1_000_000_000, 1_000_000_000)
    pool_a = world.init_pool(network, MINT_A, 1_000_000, 1_000_000)
    pool_b = world.init_pool(network, MINT_B, 4_000_000, 2_000_000)
    return Market(world=world, network=network, primary=primary, pool_a=pool_a, pool_b=pool_b)
