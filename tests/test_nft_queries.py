from __future__ import annotations

import pytest

from nftquery.domain import AttributeFilter, FilterSpec
from nftquery.repositories import NftRepository, compile_list_query


@pytest.fixture
def repo(engine):
    with engine.connect() as connection:
        yield NftRepository(connection)


def _addresses(nfts) -> list[str]:
    return [nft.address for nft in nfts]


def test_default_page_orders_by_price_then_name(repo):
    """Verify listed NFTs come first by ascending price, ties broken by name."""
    nfts = repo.list_nfts(FilterSpec())

    assert _addresses(nfts) == ["M1", "M2", "M4", "M6", "M3"]
    assert [nft.price for nft in nfts] == [100, 100, 300, 500, None]


def test_burned_nfts_are_never_returned(repo):
    assert repo.list_nfts(FilterSpec(addresses=["M5"])) == []
    assert "M5" not in _addresses(repo.list_nfts(FilterSpec(owners=["W1"])))


def test_fact_joins_do_not_duplicate_rows(repo):
    """Verify NFTs matching several fact rows still appear once."""
    nfts = repo.list_nfts(
        FilterSpec(
            creators=["C1", "C3"],
            attributes=[AttributeFilter("Background", ["Blue", "Red"])],
        )
    )

    assert _addresses(nfts) == ["M1", "M2"]


def test_attribute_values_or_together(repo):
    nfts = repo.list_nfts(FilterSpec(attributes=[AttributeFilter("Background", ["Blue", "Red"])]))

    assert _addresses(nfts) == ["M1", "M2", "M3"]


def test_attribute_trait_types_and_together(repo):
    nfts = repo.list_nfts(
        FilterSpec(
            attributes=[
                AttributeFilter("Background", ["Blue", "Red"]),
                AttributeFilter("Eyes", ["Green"]),
            ]
        )
    )

    assert _addresses(nfts) == ["M1"]


def test_only_verified_creators_match(repo):
    assert _addresses(repo.list_nfts(FilterSpec(creators=["C2"]))) == ["M3"]


def test_owner_and_listed_filters_decorate_active_owner_listing(repo):
    nfts = repo.list_nfts(FilterSpec(owners=["W1"], listed=True))

    assert _addresses(nfts) == ["M1", "M2"]
    for nft in nfts:
        assert nft.owner.address == "W1"
        assert nft.listing.seller == "W1"
        assert nft.listing.purchase_receipt is None
        assert nft.listing.canceled_at is None


def test_cheapest_listing_wins(repo):
    """Verify canceled and previous-owner listings never decorate an NFT."""
    (nft,) = repo.list_nfts(FilterSpec(addresses=["M1"]))

    assert nft.listing.address == "L1b"
    assert nft.listing.price == 100


def test_earliest_listing_breaks_price_ties(repo):
    (nft,) = repo.list_nfts(FilterSpec(addresses=["M6"]))

    assert nft.listing.address == "L6b"


def test_unlisted_filter(repo):
    nfts = repo.list_nfts(FilterSpec(listed=False))

    assert _addresses(nfts) == ["M3"]
    assert nfts[0].listing is None


def test_auction_houses_narrow_listing_decoration(repo):
    assert _addresses(repo.list_nfts(FilterSpec(auction_houses=["AH2"], listed=True))) == ["M4"]

    nfts = repo.list_nfts(FilterSpec(auction_houses=["AH2"]))
    decorated = {nft.address: nft.listing for nft in nfts}
    assert decorated["M4"].auction_house == "AH2"
    assert decorated["M1"] is None


def test_offer_filters_only_match_active_offers(repo):
    assert _addresses(repo.list_nfts(FilterSpec(with_offers=True))) == ["M2"]
    assert _addresses(repo.list_nfts(FilterSpec(offerers=["O1"]))) == ["M2"]
    assert repo.list_nfts(FilterSpec(offerers=["O2", "O3"])) == []


def test_collection_membership(repo):
    assert _addresses(repo.list_nfts(FilterSpec(collections=["COL1"]))) == ["M1", "M3"]


def test_update_authority_filter(repo):
    assert _addresses(repo.list_nfts(FilterSpec(update_authorities=["UA2"]))) == ["M3"]


def test_unknown_identifiers_yield_empty_page(repo):
    assert repo.list_nfts(FilterSpec(collections=["missing"])) == []
    assert repo.list_nfts(FilterSpec(creators=["missing"])) == []


def test_pagination_is_deterministic(repo):
    spec = FilterSpec(limit=2, offset=1)

    first = repo.list_nfts(spec)
    second = repo.list_nfts(spec)

    assert _addresses(first) == ["M2", "M4"]
    assert _addresses(first) == _addresses(second)


def test_nft_rows_carry_json_projection(repo):
    (nft,) = repo.list_nfts(FilterSpec(addresses=["M3"]))

    assert nft.name == "Gamma"
    assert nft.image == "https://img.example/M3.png"
    assert nft.description == "Gamma description"
    assert nft.owner.associated_token_account_address == "ata-M3"


def test_compiled_statement_binds_every_value():
    """Verify filter values never appear in the statement text."""
    spec = FilterSpec(
        owners=["wallet-secret"],
        attributes=[AttributeFilter("trait-secret", ["value-secret"])],
        collections=["collection-secret"],
        listed=True,
    )

    compiled = compile_list_query(spec).compile()

    assert "secret" not in str(compiled)
    bound: list[object] = []
    for value in compiled.params.values():
        if isinstance(value, (list, tuple)):
            bound.extend(value)
        else:
            bound.append(value)
    assert "wallet-secret" in bound
    assert "value-secret" in bound
    assert "trait-secret" in bound


def test_statement_text_depends_only_on_shape():
    first = compile_list_query(FilterSpec(owners=["W1"], creators=["C1"], limit=5))
    second = compile_list_query(FilterSpec(owners=["W9", "W8"], creators=["C7"], limit=50, offset=3))
    different = compile_list_query(FilterSpec(owners=["W1"]))

    assert str(first) == str(second)
    assert str(first) != str(different)


def test_default_limit_applies_when_spec_omits_one():
    compiled = compile_list_query(FilterSpec(), default_limit=7).compile()

    assert 7 in compiled.params.values()


def test_point_lookup_with_no_addresses_returns_nothing(repo):
    assert repo.get_nfts([]) == []
    assert _addresses(repo.get_nfts(["M3", "M5"])) == ["M3"]
