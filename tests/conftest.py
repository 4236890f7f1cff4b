"""
Shared fixtures: a throwaway SQLite database per test, seeded creators and
slots, a fake ledger client and a TestClient wired to all of them.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient
from solders.hash import Hash
from solders.keypair import Keypair
from sqlalchemy.orm import sessionmaker

from interval_api import config
from interval_api.database import Base, build_engine, get_db, get_session_factory
from interval_api.domain.actions.router import get_http_client, get_ledger_client
from interval_api.domain.actions.settings import SOLANA_CHAIN_IDS, ActionSettings, get_action_settings
from interval_api.errors import LedgerRpcError
from interval_api.main import app
from interval_api.models import SLOT_AVAILABLE, Booking, Creator, Slot
from interval_api.services.solana_rpc import Checkpoint, CheckpointSnapshot

FALLBACK_ICON = "https://solana.com/favicon.ico"
SLOT_START = datetime(2030, 3, 14, 16, 5, tzinfo=timezone.utc)


def new_wallet() -> str:
    return str(Keypair().pubkey())


class FakeLedger:
    """Stands in for SolanaRpcClient; records how often it was asked"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.blockhash = str(Hash.default())
        self.calls = 0

    async def get_latest_blockhash(self, commitment: str = "confirmed") -> Checkpoint:
        self.calls += 1
        if self.fail:
            raise LedgerRpcError("Solana RPC getLatestBlockhash timed out")
        return Checkpoint(blockhash=self.blockhash, last_valid_block_height=1_000_150)

    async def get_checkpoint_snapshot(self, commitment: str = "confirmed") -> CheckpointSnapshot:
        checkpoint = await self.get_latest_blockhash(commitment)
        return CheckpointSnapshot(
            blockhash=checkpoint.blockhash,
            last_valid_block_height=checkpoint.last_valid_block_height,
            slot=250_000,
            block_height=1_000_000,
        )


def image_transport(request: httpx.Request) -> httpx.Response:
    """Upstream image hosts used by the icon proxy tests"""
    if request.url.host == "cdn.example.com" and request.url.path == "/avatar.png":
        return httpx.Response(200, content=b"\x89PNG-avatar", headers={"content-type": "image/png"})
    if str(request.url) == FALLBACK_ICON:
        return httpx.Response(200, content=b"ICO-fallback", headers={"content-type": "image/x-icon"})
    return httpx.Response(404)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'interval-test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def creator(db):
    creator = Creator(wallet=new_wallet(), username="alice", bio="Rust and Solana office hours")
    db.add(creator)
    db.commit()
    db.refresh(creator)
    return creator


@pytest.fixture
def make_slot(db, creator):
    """Factory for slots owned by the default creator unless one is given"""

    def _make(
        price="0.5",
        status=SLOT_AVAILABLE,
        meet_link="https://meet.example.com/abc-defg-hij",
        owner=None,
        start=SLOT_START,
    ) -> Slot:
        slot = Slot(
            creator_id=(owner or creator).id,
            start_time=start,
            end_time=start + timedelta(minutes=30),
            price=Decimal(price),
            status=status,
            meet_link=meet_link,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return _make


@pytest.fixture
def slot(make_slot):
    return make_slot()


@pytest.fixture
def settings():
    return ActionSettings(
        chain_id=SOLANA_CHAIN_IDS["devnet"],
        action_version="1",
        icon_fallback=FALLBACK_ICON,
    )


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def http_client():
    return httpx.AsyncClient(transport=httpx.MockTransport(image_transport))


@pytest.fixture
def read_state(session_factory):
    """Fresh-session view of a slot and its bookings"""

    def _read(slot_id: str):
        with session_factory() as session:
            slot = session.get(Slot, slot_id)
            bookings = session.query(Booking).filter(Booking.slot_id == slot_id).all()
            return (slot.status if slot else None), bookings

    return _read


@pytest.fixture
def client(session_factory, settings, ledger, http_client, monkeypatch):
    # Confirmation emails are attempted in the background and must not leave the process
    monkeypatch.setattr(config, "RESEND_API_KEY", None)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_ledger_client] = lambda: ledger
    app.dependency_overrides[get_http_client] = lambda: http_client
    app.dependency_overrides[get_action_settings] = lambda: settings

    yield TestClient(app)

    app.dependency_overrides.clear()
