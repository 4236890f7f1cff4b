"""
Unit tests for creator registration and the explore listing.
"""

from datetime import timedelta

import pytest

from interval_api.domain.creators.schemas import CreatorCreate
from interval_api.domain.creators.service import CreatorService
from interval_api.errors import ValidationError
from interval_api.models import SLOT_BOOKED, Creator
from tests.conftest import SLOT_START, new_wallet


@pytest.fixture
def service(db):
    return CreatorService(db)


class TestCreateCreator:
    def test_creates(self, service):
        wallet = new_wallet()
        creator = service.create_creator(
            CreatorCreate(wallet=wallet, username="bob", twitterHandle=" bob_sol ", profileImageUrl="  ")
        )
        assert creator.id
        assert creator.wallet == wallet
        assert creator.username == "bob"
        assert creator.twitter_handle == "bob_sol"
        assert creator.profile_image_url is None

    def test_wallet_is_unique(self, service, creator):
        with pytest.raises(ValidationError) as exc:
            service.create_creator(CreatorCreate(wallet=creator.wallet, username="someone-else"))
        assert exc.value.message == "A profile already exists for this wallet"

    def test_username_is_unique(self, service, creator):
        with pytest.raises(ValidationError) as exc:
            service.create_creator(CreatorCreate(wallet=new_wallet(), username="alice"))
        assert exc.value.message == "Username is already taken"

    def test_requires_wallet_and_username(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create_creator(CreatorCreate(wallet="", username="bob"))
        assert exc.value.message == "wallet is required"
        with pytest.raises(ValidationError) as exc:
            service.create_creator(CreatorCreate(wallet=new_wallet(), username="  "))
        assert exc.value.message == "username is required"

    def test_rejects_malformed_wallet(self, service, db):
        # Payments go to this address, so it has to decode as a public key
        with pytest.raises(ValidationError) as exc:
            service.create_creator(CreatorCreate(wallet="not-a-wallet", username="bob"))
        assert exc.value.message == "wallet must be a valid Solana address"
        assert db.query(Creator).count() == 0


class TestListCreators:
    def test_available_slots_earliest_first(self, service, creator, make_slot):
        later = make_slot(start=SLOT_START + timedelta(days=2))
        earlier = make_slot()
        make_slot(status=SLOT_BOOKED, start=SLOT_START - timedelta(days=1))

        (listing,) = service.list_creators()
        assert listing.username == "alice"
        assert [s.id for s in listing.availableSlots] == [earlier.id, later.id]
        assert listing.firstAvailableSlot.id == earlier.id

    def test_creator_without_slots(self, service, creator):
        (listing,) = service.list_creators()
        assert listing.availableSlots == []
        assert listing.firstAvailableSlot is None

    def test_lookup_by_wallet(self, service, creator):
        assert service.get_by_wallet(creator.wallet).id == creator.id
        assert service.get_by_wallet(new_wallet()) is None
        assert service.get_by_wallet("") is None
