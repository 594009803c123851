"""
Transaction logger.

Writes completed sales and per-tick market summaries to JSONL for post-hoc
analysis of prices and time on market.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from housing_market.clearing import Transaction
    from housing_market.statistics import MarketStatistics


@dataclass
class TickSummaryEvent:
    """Market state after one clearing cycle."""

    tick: int
    num_sales: int
    num_offers: int
    house_price_index: float
    house_price_appreciation: float
    average_days_on_market: float


class TransactionLogger:
    """
    Logs market events to JSONL format.

    Usage:
        with TransactionLogger(Path("logs/run_transactions.jsonl")) as log:
            market = HousingMarket(transaction_logger=log)
            ...
    """

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        self._file = open(self.output_path, "w")

    def log_transaction(self, transaction: "Transaction") -> None:
        data = asdict(transaction)
        # House and household identities may be arbitrary hashables
        for key in ("house", "buyer", "seller"):
            value = data[key]
            if not isinstance(value, (int, float, str, bool)) and value is not None:
                data[key] = repr(value)
        data["event_type"] = "transaction"
        self._write(data)

    def log_tick(self, tick: int, num_sales: int, num_offers: int, stats: "MarketStatistics") -> None:
        event = TickSummaryEvent(
            tick=tick,
            num_sales=num_sales,
            num_offers=num_offers,
            house_price_index=stats.house_price_index,
            house_price_appreciation=stats.house_price_appreciation(),
            average_days_on_market=stats.average_days_on_market,
        )
        data = asdict(event)
        data["event_type"] = "tick_summary"
        self._write(data)

    def _write(self, data: dict[str, object]) -> None:
        if self._file is None:
            return
        self._file.write(json.dumps(data) + "\n")

    def flush(self) -> None:
        if self._file:
            self._file.flush()

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "TransactionLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_events(log_path: Path) -> list[dict[str, object]]:
    """
    Load events from a JSONL file.

    Args:
        log_path: Path to the JSONL file

    Returns:
        List of event dictionaries
    """
    events = []
    with open(log_path) as f:
        for line in f:
            if line.strip():
                events.append(json.loads(line))
    return events
