"""Property tests for URL extraction from endpoint responses.

Validates the two accepted shapes (top-level ``URL`` and the first
``$Data*`` key's nested ``URL``), the precedence between them, and that
anything else yields no URL.
"""

from __future__ import annotations

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from wallfetch.services.pipeline import extract_url


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

urls = st.text(min_size=1, max_size=80)

data_keys = st.text(max_size=10).map(lambda suffix: "$Data" + suffix)

# Keys that are neither "URL" nor start with "$Data"
other_keys = st.text(min_size=1, max_size=12).filter(
    lambda k: k != "URL" and not k.startswith("$Data")
)

scalar_values = st.one_of(st.none(), st.integers(), st.text(max_size=20), st.booleans())

noise = st.dictionaries(other_keys, scalar_values, max_size=5)


# ---------------------------------------------------------------------------
# Accepted shapes
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(url=urls, extra=noise)
def test_top_level_url_is_extracted(url: str, extra: dict) -> None:
    assert extract_url({**extra, "URL": url}) == url


@settings(max_examples=100)
@given(url=urls, key=data_keys, extra=noise)
def test_nested_data_url_is_extracted(url: str, key: str, extra: dict) -> None:
    assert extract_url({**extra, key: {"URL": url}}) == url


@settings(max_examples=100)
@given(top=urls, nested=urls, key=data_keys)
def test_top_level_url_takes_precedence(top: str, nested: str, key: str) -> None:
    assume(top != nested)
    assert extract_url({key: {"URL": nested}, "URL": top}) == top


# ---------------------------------------------------------------------------
# Rejected shapes
# ---------------------------------------------------------------------------


@settings(max_examples=100)
@given(response=noise)
def test_unrecognised_shapes_yield_nothing(response: dict) -> None:
    assert extract_url(response) is None


@settings(max_examples=100)
@given(value=st.one_of(st.just(""), st.none(), st.integers(), st.lists(st.text(), max_size=3)))
def test_non_string_or_empty_url_yields_nothing(value: object) -> None:
    assert extract_url({"URL": value}) is None
    assert extract_url({"$Data": {"URL": value}}) is None
