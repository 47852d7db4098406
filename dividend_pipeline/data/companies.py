"""Static ticker <-> company name table.

Used for display labels and name sorting only. Aggregation always keys on
the long name exactly as it appears in the source sheet.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Company:
    """Ticker symbol and the long name the broker export uses."""

    ticker: str
    long_name: str


_COMPANIES: tuple[Company, ...] = (
    # US
    Company("ABBV", "AbbVie Inc"),
    Company("APD", "Air Products & Chemicals Inc"),
    Company("ATO", "Atmos Energy Corp"),
    Company("BAC", "Bank of America Corp"),
    Company("BEN", "Franklin Resources Inc."),
    Company("CINF", "Cincinnati Financial Corp"),
    Company("CLX", "Clorox Co"),
    Company("CVX", "Chevron"),
    Company("D", "Dominion Energy Inc"),
    Company("DLR", "Digital Realty Trust Inc"),
    Company("DUK", "Duke Energy Corp"),
    Company("ED", "Consolidated Edison Inc"),
    Company("ENB", "Enbridge Inc"),
    Company("ESS", "Essex Property Trust Inc"),
    Company("FRT", "Federal Realty Investment Trust"),
    Company("GPC", "Genuine Parts Co"),
    Company("HRL", "Hormel Foods Corp"),
    Company("IBM", "International Business Machines Corporation (IBM)"),
    Company("JNJ", "Johnson & Johnson"),
    Company("JPM", "JPMorgan Chase & Co"),
    Company("KMB", "Kimberly-Clark Corp"),
    Company("KMI", "Kinder Morgan Inc"),
    Company("KO", "Coca-Cola"),
    Company("LEG", "Leggett & Platt Inc"),
    Company("MCD", "McDonald's"),
    Company("MDT.US", "Medtronic PLC"),
    Company("MMM", "3M"),
    Company("MO", "Altria Group Inc"),
    Company("NEE", "NextEra Energy Inc"),
    Company("O", "Realty Income Corp"),
    Company("PEP", "PepsiCo"),
    Company("PG", "Procter & Gamble Co"),
    Company("STAG", "STAG Industrial Inc."),
    Company("SWK", "Stanley Black & Decker Inc"),
    Company("SYY", "Sysco Corp"),
    Company("T", "AT&T Inc"),
    Company("TGT", "Target Corp"),
    Company("TROW", "T Rowe Price Group Inc"),
    Company("TXN", "Texas Instruments Inc"),
    Company("UGI", "UGI Corp"),
    Company("UPS", "United Parcel Service Inc"),
    Company("VZ", "Verizon"),
    Company("WBA", "Walgreens Boots Alliance Inc"),
    Company("XOM", "Exxon-Mobil"),
    # Europe
    Company("A2A.MI", "A2A Group"),
    Company("ALV.DE", "Allianz SE"),
    Company("AMCR", "Amcor PLC"),
    Company("BBVA.MC", "BBVA"),
    Company("CABK.MC", "Caixabank"),
    Company("DHL.DE", "Deutsche Post AG"),
    Company("EN.PA", "Bouygues SA"),
    Company("ENG.MC", "Enagas"),
    Company("G.MI", "Assicurazioni Generali SpA"),
    Company("REP.MC", "Repsol"),
    Company("SAB.MC", "Banco Sabadell"),
    Company("UPM.HE", "UPM-Kymmene Oyj"),
)

_BY_LONG_NAME = {c.long_name.lower(): c for c in _COMPANIES}
_BY_TICKER = {c.ticker.lower(): c for c in _COMPANIES}


def short_name_for(long_name: str | None) -> str | None:
    """Ticker for a long company name (case-insensitive, trimmed)."""
    if not long_name:
        return None
    company = _BY_LONG_NAME.get(long_name.strip().lower())
    return company.ticker if company else None


def long_name_for(ticker: str | None) -> str | None:
    """Long company name for a ticker (case-insensitive, trimmed)."""
    if not ticker:
        return None
    company = _BY_TICKER.get(ticker.strip().lower())
    return company.long_name if company else None


def display_name(long_name: str) -> str:
    """Ticker when known, otherwise the long name unchanged."""
    return short_name_for(long_name) or long_name


def all_companies() -> list[Company]:
    return list(_COMPANIES)


def search_companies(term: str) -> list[Company]:
    """Companies whose ticker or long name contains ``term``."""
    if not term:
        return []
    needle = term.strip().lower()
    return [
        c for c in _COMPANIES
        if needle in c.ticker.lower() or needle in c.long_name.lower()
    ]
