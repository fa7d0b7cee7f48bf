from __future__ import annotations

import pytest

from nftquery.domain import AttributeFilter, FilterSpec


def test_filter_spec_normalizes_collections():
    """Verify that predicate sets are de-duplicated and sorted."""
    spec = FilterSpec(owners=["W2", "W1", "W2"], creators=("C1",))

    assert spec.owners == ("W1", "W2")
    assert spec.creators == ("C1",)
    assert spec.addresses is None


def test_empty_collections_impose_no_constraint():
    """Verify that empty predicate sets are treated as absent."""
    spec = FilterSpec(owners=[], offerers=(), attributes=[AttributeFilter("Eyes", [])])

    assert spec.owners is None
    assert spec.offerers is None
    assert spec.attributes is None
    assert spec.filters_offers is False


def test_equal_specs_hash_equal():
    """Verify that equivalent specs can share a loader cache entry."""
    first = FilterSpec(owners=["W1", "W2"], attributes=[AttributeFilter("Eyes", ["Blue", "Green"])])
    second = FilterSpec(owners=("W2", "W1"), attributes=[AttributeFilter("Eyes", ("Green", "Blue"))])

    assert first == second
    assert hash(first) == hash(second)


def test_attribute_filters_merge_by_trait_type():
    """Verify that filters naming the same trait are merged by value union."""
    spec = FilterSpec(
        attributes=[
            AttributeFilter("Eyes", ["Green"]),
            AttributeFilter("Background", ["Red"]),
            AttributeFilter("Eyes", ["Blue"]),
        ]
    )

    assert spec.attributes == (
        AttributeFilter("Background", ("Red",)),
        AttributeFilter("Eyes", ("Blue", "Green")),
    )


def test_offerers_enable_offer_filtering():
    assert FilterSpec(offerers=["O1"]).filters_offers is True
    assert FilterSpec(with_offers=True).filters_offers is True


@pytest.mark.parametrize("kwargs", [{"limit": -1}, {"offset": -5}, {"limit": True}])
def test_rejects_invalid_pagination(kwargs):
    with pytest.raises(ValueError):
        FilterSpec(**kwargs)


def test_rejects_single_string_as_collection():
    """Verify that a bare string is not silently split into characters."""
    with pytest.raises(TypeError):
        FilterSpec(owners="W1")


def test_filter_spec_is_immutable():
    spec = FilterSpec(owners=["W1"])

    with pytest.raises(AttributeError):
        spec.owners = ("W2",)
