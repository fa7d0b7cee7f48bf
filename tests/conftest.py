from __future__ import annotations

from datetime import datetime

import httpx
import pytest
from sqlalchemy.orm import Session

from nftquery.core.config import Settings
from nftquery.dataloaders import TwitterClient
from nftquery.db import create_db_engine, init_db
from nftquery.models import (
    Attribute,
    BidReceipt,
    CurrentMetadataOwner,
    ListingReceipt,
    Metadata,
    MetadataCollectionKey,
    MetadataCreator,
    MetadataJson,
    PurchaseReceipt,
    TwitterHandle,
)
from nftquery.services import SharedResources

T0 = datetime(2022, 3, 1, 12, 0, 0)
T1 = datetime(2022, 3, 2, 12, 0, 0)
T2 = datetime(2022, 3, 3, 12, 0, 0)
T3 = datetime(2022, 3, 4, 12, 0, 0)

TWITTER_USERS = {
    "alice": {
        "id": "1",
        "username": "Alice",
        "profile_image_url": "https://pbs.example/alice.png",
        "description": "collector",
    },
    "bob": {"id": "2", "username": "bob", "description": "artist"},
}


def _nft(session: Session, address: str, name: str, owner: str, **overrides) -> None:
    mint = f"mint-{address}"
    session.add(
        Metadata(
            address=address,
            name=name,
            symbol="SYM",
            uri=f"https://arweave.example/{address}.json",
            seller_fee_basis_points=500,
            update_authority_address=overrides.pop("update_authority", "UA1"),
            mint_address=mint,
            primary_sale_happened=True,
            is_mutable=True,
            slot=100,
            burned_at=overrides.pop("burned_at", None),
        )
    )
    session.add(
        MetadataJson(
            metadata_address=address,
            description=f"{name} description",
            image=f"https://img.example/{address}.png",
            category="image",
        )
    )
    session.add(
        CurrentMetadataOwner(
            mint_address=mint,
            owner_address=owner,
            token_account_address=f"ata-{address}",
            slot=100,
        )
    )


def _listing(session: Session, address: str, metadata: str, seller: str, price: int, created_at, **extra) -> None:
    session.add(
        ListingReceipt(
            address=address,
            trade_state=f"ts-{address}",
            bookkeeper="BK",
            auction_house=extra.pop("auction_house", "AH1"),
            seller=seller,
            metadata_address=metadata,
            price=price,
            token_size=1,
            created_at=created_at,
            **extra,
        )
    )


def _offer(session: Session, address: str, metadata: str, buyer: str, price: int, **extra) -> None:
    session.add(
        BidReceipt(
            address=address,
            trade_state=f"ts-{address}",
            bookkeeper="BK",
            auction_house=extra.pop("auction_house", "AH1"),
            buyer=buyer,
            metadata_address=metadata,
            price=price,
            token_size=1,
            created_at=T1,
            **extra,
        )
    )


def seed(session: Session) -> None:
    _nft(session, "M1", "Alpha", "W1")
    _nft(session, "M2", "Beta", "W1")
    _nft(session, "M3", "Gamma", "W2", update_authority="UA2")
    _nft(session, "M4", "Delta", "W2")
    _nft(session, "M5", "Burned", "W1", burned_at=T0)
    _nft(session, "M6", "Epsilon", "W3")

    # M1: the cheapest active listing by the owner wins; canceled listings and
    # listings by a previous owner are ignored.
    _listing(session, "L1a", "M1", "W1", 200, T0)
    _listing(session, "L1b", "M1", "W1", 100, T1)
    _listing(session, "L1c", "M1", "W1", 50, T1, canceled_at=T2)
    _listing(session, "L1d", "M1", "W_OLD", 10, T0)
    _listing(session, "L2", "M2", "W1", 100, T0)
    _listing(session, "L4", "M4", "W2", 300, T2, auction_house="AH2")
    _listing(session, "L4old", "M4", "W_OLD", 250, T0, purchase_receipt="P4")
    _listing(session, "L5", "M5", "W1", 1, T0)
    # Equal prices: the earliest listing wins.
    _listing(session, "L6a", "M6", "W3", 500, T2)
    _listing(session, "L6b", "M6", "W3", 500, T1)

    session.add(
        PurchaseReceipt(
            address="P4",
            bookkeeper="BK",
            buyer="W2",
            seller="W_OLD",
            auction_house="AH1",
            metadata_address="M4",
            token_size=1,
            price=250,
            created_at=T1,
        )
    )

    _offer(session, "B2", "M2", "O1", 90)
    _offer(session, "B3", "M3", "O2", 80, canceled_at=T2)
    _offer(session, "B4", "M4", "O3", 70, purchase_receipt="P4")

    for metadata, trait_type, value in [
        ("M1", "Background", "Blue"),
        ("M1", "Background", "Blue"),
        ("M1", "Eyes", "Green"),
        ("M2", "Background", "Red"),
        ("M2", "Eyes", "Blue"),
        ("M3", "Background", "Blue"),
        ("M4", "Background", "Green"),
        ("M5", "Background", "Blue"),
    ]:
        session.add(Attribute(metadata_address=metadata, trait_type=trait_type, value=value))

    for metadata, creator, verified, position in [
        ("M1", "C1", True, 0),
        ("M1", "C3", True, 1),
        ("M2", "C1", True, 0),
        ("M2", "C2", False, 1),
        ("M3", "C2", True, 0),
        ("M4", "C2", False, 0),
    ]:
        session.add(
            MetadataCreator(
                metadata_address=metadata,
                creator_address=creator,
                share=50,
                verified=verified,
                position=position,
            )
        )

    session.add(MetadataCollectionKey(metadata_address="M1", collection_address="COL1", verified=True))
    session.add(MetadataCollectionKey(metadata_address="M3", collection_address="COL1", verified=True))
    session.add(MetadataCollectionKey(metadata_address="M4", collection_address="COL2", verified=False))

    session.add(TwitterHandle(wallet_address="W2", twitter_handle="alice"))
    session.add(TwitterHandle(wallet_address="W_OLD", twitter_handle="bob"))


@pytest.fixture
def test_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(
        database_url=f"sqlite:///{tmp_path / 'indexer.db'}",
        twitter_bearer_token="test-token",
        twitter_batch_size=2,
        pool_size=2,
    )
    monkeypatch.setattr("nftquery.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("nftquery.core.config.settings", settings)
    return settings


@pytest.fixture
def engine(test_settings):
    engine = create_db_engine(test_settings.resolved_database_url, config=test_settings)
    init_db(engine)
    with Session(engine) as session:
        seed(session)
        session.commit()
    yield engine
    engine.dispose()


@pytest.fixture
def twitter_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def twitter_client(twitter_requests) -> TwitterClient:
    def handler(request: httpx.Request) -> httpx.Response:
        twitter_requests.append(request)
        usernames = request.url.params["usernames"].split(",")
        data = [TWITTER_USERS[name.lower()] for name in usernames if name.lower() in TWITTER_USERS]
        return httpx.Response(200, json={"data": data})

    client = TwitterClient(
        base_url="https://api.twitter.test",
        bearer_token="test-token",
        batch_size=2,
        transport=httpx.MockTransport(handler),
    )
    yield client
    client.close()


@pytest.fixture
def shared(engine, twitter_client, test_settings) -> SharedResources:
    return SharedResources(engine=engine, twitter=twitter_client, settings=test_settings)
