"""Shared fixtures: in-memory SQLite DB with all tables, and a wired ledger service."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import ConsensusSettings
from db.models import Base
from rewardledger.services.dispatcher import QueryDispatcher
from rewardledger.services.ledger import RewardLedgerService
from rewardledger.services.sample import seed_sample_ledger
from rewardledger.services.sync import DatabaseLedgerSync

SAMPLE_NOW: int = 1_700_000_000


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """Single shared connection so stores and the sync thread see the same DB."""
    eng: Engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def session(session_factory: sessionmaker[Session]) -> Generator[Session, None, None]:
    sess: Session = session_factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture()
def consensus() -> ConsensusSettings:
    return ConsensusSettings(
        payout_start_delay=200,
        first_composite_rule_round=4,
        coin_decimals=8,
        address_prefixes="S",
        term_tier_percents={1: 0.20, 2: 0.30, 3: 0.40},
    )


@pytest.fixture()
def service(
    session_factory: sessionmaker[Session], consensus: ConsensusSettings
) -> RewardLedgerService:
    """Empty, synced service; tests populate it through the producer API."""
    svc: RewardLedgerService = RewardLedgerService(session_factory, consensus=consensus)
    svc.mark_synced(True)
    return svc


@pytest.fixture()
def dispatcher(service: RewardLedgerService) -> QueryDispatcher:
    return QueryDispatcher(service)


@pytest.fixture()
def seeded_service(
    session: Session,
    session_factory: sessionmaker[Session],
    consensus: ConsensusSettings,
) -> RewardLedgerService:
    """Service loaded from the sample ledger (current round 5, rounds 1-4 sealed)."""
    seed_sample_ledger(session)
    session.commit()
    svc: RewardLedgerService = RewardLedgerService(session_factory, consensus=consensus)
    DatabaseLedgerSync(svc, session_factory, clock=lambda: SAMPLE_NOW).refresh()
    return svc
