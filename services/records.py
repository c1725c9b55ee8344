"""
Fund Data Records
=================

Row model for the ``fund_data`` table. Every page works off ``Record`` objects
built here, so coercion of messy database/CSV values happens in exactly one
place:
- Missing or malformed amounts become 0.0
- Unparseable dates become None
- Case status is normalized to "pending" | "closed" | "other"

Records are frozen; the aggregation pipeline never mutates them.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Dict, Any, Iterable, List
import math
import logging

import pandas as pd

logger = logging.getLogger(__name__)


STATUS_PENDING = "pending"
STATUS_CLOSED = "closed"
STATUS_OTHER = "other"

# Servicer-side columns drive provider scoring and curves; fund-side columns
# drive the portfolio overview. The two sets are never mixed.
PROVIDER_FIELD = "provider_name_per_tbr"
FUND_PROVIDER_FIELD = "provider_name"

TRUTHY_STRINGS = {"true", "t", "yes", "y", "1"}


@dataclass(frozen=True)
class Record:
    """
    One funding case.

    Attributes:
        provider: Capital provider the case belongs to (None if unknown)
        amount_sent: Amount sent to the servicer
        amount_repaid: Amount repaid by the servicer (may exceed amount_sent)
        origination_date: When the case was funded
        repayment_date: When the case was repaid (None while ongoing)
        status: "pending" | "closed" | "other"
        repaid: Explicit repaid flag from the source row, if any
        multiple: Pre-computed net multiple, if any
        letter_grade: Pre-computed investment letter grade, if any
        investment_name: Display name of the investment, if any
        fund_provider: Fund-side provider name used by the overview
        amount_invested: Fund-side amount invested
        current_balance: Fund-side balance today
    """
    provider: Optional[str]
    amount_sent: float = 0.0
    amount_repaid: float = 0.0
    origination_date: Optional[datetime] = None
    repayment_date: Optional[datetime] = None
    status: str = STATUS_OTHER
    repaid: Optional[bool] = None
    multiple: Optional[float] = None
    letter_grade: Optional[str] = None
    investment_name: Optional[str] = None
    fund_provider: Optional[str] = None
    amount_invested: float = 0.0
    current_balance: float = 0.0

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def is_repaid(self) -> bool:
        """Explicit repaid flag wins; otherwise a closed case counts as repaid"""
        if self.repaid is not None:
            return self.repaid
        return self.status == STATUS_CLOSED

    @property
    def case_multiple(self) -> float:
        """Repaid over sent (0 when nothing was sent)"""
        if self.amount_sent > 0:
            return self.amount_repaid / self.amount_sent
        return 0.0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Record":
        """
        Build a Record from a raw Supabase/CSV row.

        Never raises: bad values fall back to defaults.
        """
        return cls(
            provider=to_text(row.get(PROVIDER_FIELD)),
            amount_sent=to_amount(row.get("total_sent")),
            amount_repaid=to_amount(row.get("total_repaid")),
            origination_date=parse_datetime(row.get("origination_date")),
            repayment_date=parse_datetime(row.get("repayment_date")),
            status=normalize_status(row.get("case_status")),
            repaid=to_flag(row.get("repaid")),
            multiple=to_optional_amount(row.get("net_multiple")),
            letter_grade=to_text(row.get("investment_letter_grade")),
            investment_name=to_text(row.get("investment_name")),
            fund_provider=to_text(row.get(FUND_PROVIDER_FIELD)),
            amount_invested=to_amount(row.get("total_invested")),
            current_balance=to_amount(row.get("total_balance_today")),
        )


def records_from_rows(rows: Iterable[Dict[str, Any]]) -> List[Record]:
    """Convert raw rows to Records, preserving order"""
    return [Record.from_row(row) for row in rows]


# =============================================================================
# COERCION HELPERS
# =============================================================================

def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def to_text(value: Any) -> Optional[str]:
    """Trimmed string, None when missing or blank"""
    if _is_missing(value):
        return None
    return str(value).strip()


def to_optional_amount(value: Any) -> Optional[float]:
    """Parse a numeric value, None when missing or malformed"""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "")
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Malformed numeric value treated as missing: {value!r}")
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_amount(value: Any) -> float:
    """Parse a numeric value, 0.0 when missing or malformed"""
    number = to_optional_amount(value)
    return number if number is not None else 0.0


def to_flag(value: Any) -> Optional[bool]:
    """Parse a boolean-ish value; None when absent"""
    if _is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_STRINGS


def normalize_status(value: Any) -> str:
    """Map a raw case_status to "pending" | "closed" | "other" """
    if _is_missing(value):
        return STATUS_OTHER
    status = str(value).strip().lower()
    if status == STATUS_PENDING:
        return STATUS_PENDING
    if status == STATUS_CLOSED:
        return STATUS_CLOSED
    return STATUS_OTHER


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse various date formats to a naive UTC datetime.

    Timezone-aware inputs are converted to UTC before the zone is dropped so
    they can be compared with ``datetime.now()`` style values.
    """
    if _is_missing(value):
        return None

    if isinstance(value, pd.Timestamp):
        timestamp = value
    elif isinstance(value, datetime):
        timestamp = pd.Timestamp(value)
    elif isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    elif isinstance(value, str):
        try:
            timestamp = pd.to_datetime(value.strip())
        except (ValueError, TypeError, OverflowError):
            logger.warning(f"Failed to parse date: {value}")
            return None
    else:
        return None

    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.tz_convert("UTC").tz_localize(None)
    return timestamp.to_pydatetime()
