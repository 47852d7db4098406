"""Tests for record filters and filter choices."""

from __future__ import annotations

from datetime import date

from dividend_pipeline.analysis.filtering import (
    FilterOptions,
    amount_bounds,
    apply_filters,
    available_instruments,
)
from dividend_pipeline.config import RecordSortField
from dividend_pipeline.data.models import DividendRecord


def _make_record(
    payment_date: str,
    instrument: str,
    usd: float,
    isin: str = "",
) -> DividendRecord:
    return DividendRecord(
        payment_date=payment_date,
        instrument_name=instrument,
        amount_net_usd=usd,
        amount_net_eur=usd * 0.9,
        isin=isin,
    )


RECORDS = [
    _make_record("15/01/2024", "Coca-Cola", 10.0, "US1912161007"),
    _make_record("20/02/2024", "Repsol", 4.5, "ES0173516115"),
    _make_record("15/04/2024", "Coca-Cola", 11.0, "US1912161007"),
    _make_record("01/05/2024", "Apple Hospitality", 0.8, "US03784Y2000"),
]


def _names(records: list[DividendRecord]) -> list[str]:
    return [r.instrument_name for r in records]


class TestApplyFilters:
    """Search, selection, range filters and ordering."""

    def test_defaults_sort_newest_first(self) -> None:
        result = apply_filters(RECORDS, FilterOptions())
        assert [r.payment_date for r in result] == [
            "01/05/2024", "15/04/2024", "20/02/2024", "15/01/2024",
        ]

    def test_search_by_name(self) -> None:
        result = apply_filters(RECORDS, FilterOptions(search_term="repS"))
        assert _names(result) == ["Repsol"]

    def test_search_by_ticker(self) -> None:
        result = apply_filters(RECORDS, FilterOptions(search_term="KO"))
        assert _names(result) == ["Coca-Cola", "Coca-Cola"]

    def test_search_by_isin(self) -> None:
        result = apply_filters(RECORDS, FilterOptions(search_term="es0173"))
        assert _names(result) == ["Repsol"]

    def test_instrument_selection(self) -> None:
        options = FilterOptions(instruments=["Repsol", "Apple Hospitality"])
        assert sorted(_names(apply_filters(RECORDS, options))) == [
            "Apple Hospitality", "Repsol",
        ]

    def test_date_range_is_inclusive(self) -> None:
        options = FilterOptions(start_date=date(2024, 2, 20), end_date=date(2024, 4, 15))
        result = apply_filters(RECORDS, options)
        assert [r.payment_date for r in result] == ["15/04/2024", "20/02/2024"]

    def test_open_ended_date_range(self) -> None:
        result = apply_filters(RECORDS, FilterOptions(start_date=date(2024, 4, 1)))
        assert len(result) == 2

    def test_amount_range_is_inclusive(self) -> None:
        options = FilterOptions(min_amount=4.5, max_amount=10.0)
        assert sorted(r.amount_net_usd for r in apply_filters(RECORDS, options)) == [4.5, 10.0]

    def test_sort_by_amount_ascending(self) -> None:
        options = FilterOptions(sort_by=RecordSortField.AMOUNT, descending=False)
        assert [r.amount_net_usd for r in apply_filters(RECORDS, options)] == [
            0.8, 4.5, 10.0, 11.0,
        ]

    def test_sort_by_display_name(self) -> None:
        options = FilterOptions(sort_by=RecordSortField.INSTRUMENT, descending=False)
        # "Apple Hospitality" < "KO" < "REP.MC"
        assert _names(apply_filters(RECORDS, options)) == [
            "Apple Hospitality", "Coca-Cola", "Coca-Cola", "Repsol",
        ]

    def test_no_sort_keeps_input_order(self) -> None:
        options = FilterOptions(min_amount=1.0, sort_by=None)
        assert [r.payment_date for r in apply_filters(RECORDS, options)] == [
            "15/01/2024", "20/02/2024", "15/04/2024",
        ]

    def test_input_untouched(self) -> None:
        snapshot = list(RECORDS)
        apply_filters(RECORDS, FilterOptions(search_term="zzz"))
        assert RECORDS == snapshot

    def test_no_match(self) -> None:
        assert apply_filters(RECORDS, FilterOptions(search_term="zzz")) == []


class TestFilterChoices:
    """Instrument list and amount slider bounds."""

    def test_available_instruments(self) -> None:
        assert available_instruments(RECORDS) == [
            ("Apple Hospitality", "Apple Hospitality"),
            ("KO", "Coca-Cola"),
            ("REP.MC", "Repsol"),
        ]

    def test_amount_bounds(self) -> None:
        assert amount_bounds(RECORDS) == (0, 11)

    def test_amount_bounds_rounds_outwards(self) -> None:
        records = [_make_record("01/01/2024", "A", 1.2), _make_record("01/01/2024", "B", 7.1)]
        assert amount_bounds(records) == (1, 8)

    def test_amount_bounds_empty(self) -> None:
        assert amount_bounds([]) == (0, 0)
