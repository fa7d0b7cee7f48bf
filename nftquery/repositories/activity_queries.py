"""Fixed listing and purchase activity feed."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import BigInteger, DateTime, bindparam, text
from sqlalchemy.engine import Connection, Row

from nftquery.domain import NftActivity, Wallet

LISTING_ACTIVITY = "listing"
PURCHASE_ACTIVITY = "purchase"

ACTIVITIES_QUERY = (
    text(
        """
    SELECT lr.address AS address, lr.metadata AS metadata, lr.auction_house AS auction_house,
           lr.price AS price, lr.created_at AS created_at,
           lr.seller AS seller, seller_handles.twitter_handle AS seller_twitter_handle,
           NULL AS buyer, NULL AS buyer_twitter_handle,
           'listing' AS activity_type
        FROM listing_receipts lr
        LEFT JOIN twitter_handle_name_services seller_handles
            ON seller_handles.wallet_address = lr.seller
        WHERE lr.metadata IN :addresses
    UNION
    SELECT pr.address AS address, pr.metadata AS metadata, pr.auction_house AS auction_house,
           pr.price AS price, pr.created_at AS created_at,
           pr.seller AS seller, seller_handles.twitter_handle AS seller_twitter_handle,
           pr.buyer AS buyer, buyer_handles.twitter_handle AS buyer_twitter_handle,
           'purchase' AS activity_type
        FROM purchase_receipts pr
        LEFT JOIN twitter_handle_name_services seller_handles
            ON seller_handles.wallet_address = pr.seller
        LEFT JOIN twitter_handle_name_services buyer_handles
            ON buyer_handles.wallet_address = pr.buyer
        WHERE pr.metadata IN :addresses
    ORDER BY created_at DESC, address ASC
    """
    )
    .bindparams(bindparam("addresses", expanding=True))
    .columns(price=BigInteger, created_at=DateTime(timezone=True))
)


def row_to_activity(row: Row) -> NftActivity:
    wallets = [Wallet(address=row.seller, twitter_handle=row.seller_twitter_handle)]
    if row.activity_type == PURCHASE_ACTIVITY:
        wallets.append(Wallet(address=row.buyer, twitter_handle=row.buyer_twitter_handle))

    return NftActivity(
        address=row.address,
        metadata=row.metadata,
        auction_house=row.auction_house,
        price=row.price,
        created_at=row.created_at,
        activity_type=row.activity_type,
        wallets=wallets,
    )


def load_activities(connection: Connection, addresses: Sequence[str]) -> list[NftActivity]:
    """Return listing and purchase events for ``addresses``, newest first."""

    if not addresses:
        return []
    rows = connection.execute(ACTIVITIES_QUERY, {"addresses": list(addresses)}).all()
    return [row_to_activity(row) for row in rows]


__all__ = [
    "ACTIVITIES_QUERY",
    "LISTING_ACTIVITY",
    "PURCHASE_ACTIVITY",
    "load_activities",
    "row_to_activity",
]
