"""Pipeline configuration dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# Source sheet column labels, as exported by the broker.
PAYMENT_DATE = "Fecha de pago"
INSTRUMENT_NAME = "Nombre del instrumento"
AMOUNT_NET_USD = "Dividendo neto recibido (USD)"
AMOUNT_NET_EUR = "Dividendo neto recibido (EUR)"
WITHHOLDING_RATE = "Tasa de retención fiscal (%)"
WITHHOLDING_TAX_USD = "Importe de la retención tributaria (USD)"
WITHHOLDING_TAX_EUR = "Importe de la retención tributaria (EUR)"
POSITION_ID = "ID de posición"
DIVIDEND_TYPE = "Tipo"
ISIN = "ISIN"

# Excel serial day of 1970-01-01 (1899-12-30 epoch).
EXCEL_EPOCH_OFFSET: int = 25569
SECONDS_PER_DAY: int = 86400


class Currency(Enum):
    """Amount currencies present in the export."""

    USD = "usd"
    EUR = "eur"


class Trend(Enum):
    """Forecast trend classification."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class RiskLevel(Enum):
    """Volatility-based risk classification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityTrend(Enum):
    """Recent payment activity relative to earlier payments."""

    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class DateSortField(Enum):
    """Presentation sort options for date aggregates."""

    DATE = "date"
    TOTAL_USD = "total_usd"
    TOTAL_EUR = "total_eur"
    CUMULATIVE_USD = "cumulative_usd"
    CUMULATIVE_EUR = "cumulative_eur"


class InstrumentSortField(Enum):
    """Presentation sort options for instrument aggregates."""

    NAME = "name"
    DATE = "date"
    AMOUNT_USD = "amount_usd"
    AMOUNT_EUR = "amount_eur"


class RecordSortField(Enum):
    """Sort options for filtered records."""

    DATE = "date"
    AMOUNT = "amount"
    INSTRUMENT = "instrument"


@dataclass
class IngestConfig:
    """Upload validation and sheet detection parameters."""

    # Upload constraints
    max_file_bytes: int = 10 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".xls", ".xlsx")
    allowed_mime_types: tuple[str, ...] = (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
    )

    # Header detection
    header_scan_rows: int = 5
    min_header_cells: int = 3
    header_keywords: tuple[str, ...] = ("instrumento", "dividend", "fecha", "isin")

    # Default sheet selection
    dividend_sheet_keywords: tuple[str, ...] = ("dividend", "dividendo", "div")
    fallback_sheet_index: int = 3


@dataclass
class ForecastConfig:
    """Trend extrapolation parameters.

    The confidence and risk figures are fixed heuristics, not statistical
    measures.
    """

    min_records: int = 3
    recent_months: int = 3

    # Slope (currency units per month) beyond which the trend is directional
    trend_threshold: float = 5.0
    confidence_cap: float = 95.0

    # Volatility thresholds (std / average monthly total)
    high_volatility: float = 0.5
    medium_volatility: float = 0.2

    top_growth_limit: int = 5
    currency: Currency = Currency.USD

    # Projection series
    history_months: int = 12
    projection_months: int = 3
    projection_growth: float = 0.05


@dataclass
class ExportConfig:
    """CSV export parameters."""

    decimals: int = 2
    filenames: dict[str, str] = field(default_factory=lambda: {
        "records": "records.csv",
        "by_date": "by_date.csv",
        "by_instrument": "by_instrument.csv",
    })
