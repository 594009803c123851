"""
Simulation driver.

Runs a single housing market for a number of ticks against synthetic order
flow and collects per-tick statistics.
"""

import logging
from pathlib import Path
from typing import Any

import pandas as pd
from omegaconf import DictConfig, OmegaConf

from housing_market.clearing import Transaction
from housing_market.config import load_config
from housing_market.market import HousingMarket
from housing_market.order_flow import RandomOrderFlow
from housing_market.transaction_logger import TransactionLogger


class MarketSimulation:
    """
    Manages the execution of one simulation run.

    Expected config layout (see conf/config.yaml):
        market: overrides for MarketConfig
        flow: keyword arguments for RandomOrderFlow
        experiment: name, seed, num_ticks, log_transactions, log_dir
    """

    def __init__(self, config: DictConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

        self.market_config = load_config(config.get("market"))

        # Transaction log (optional)
        self.transaction_logger: TransactionLogger | None = None
        if config.experiment.get("log_transactions", False):
            log_dir = Path(config.experiment.get("log_dir", "logs"))
            log_path = log_dir / f"{config.experiment.name}_transactions.jsonl"
            self.transaction_logger = TransactionLogger(log_path)
            self.logger.info(f"Transaction logging enabled: {log_path}")

        self.market = HousingMarket(self.market_config, self.transaction_logger)

        flow_kwargs: dict[str, Any] = {}
        if config.get("flow") is not None:
            flow_kwargs = OmegaConf.to_container(config.flow, resolve=True)
        self.order_flow = RandomOrderFlow(
            self.market_config, seed=config.experiment.seed, **flow_kwargs
        )

    def run(self) -> pd.DataFrame:
        """Run all ticks and return one row of statistics per tick."""
        num_ticks = self.config.experiment.num_ticks
        rows = []

        try:
            for tick in range(1, num_ticks + 1):
                num_listed, _ = self.order_flow.step(self.market, tick)
                transactions = self.market.clear(tick)
                self.order_flow.settle(transactions)
                rows.append(self._tick_row(tick, num_listed, transactions))
        finally:
            if self.transaction_logger is not None:
                self.transaction_logger.close()

        results = pd.DataFrame(rows)
        if not results.empty:
            self.logger.info(
                f"Simulation finished: {results['num_sales'].sum()} sales over {num_ticks} ticks, "
                f"final HPI={results['house_price_index'].iloc[-1]:.4f}"
            )
        return results

    def _tick_row(self, tick: int, num_listed: int, transactions: list[Transaction]) -> dict[str, Any]:
        snapshot = self.market.diagnostics
        stats = self.market.statistics
        prices = [t.price for t in transactions]
        return {
            "tick": tick,
            "num_new_listings": num_listed,
            "num_bids": snapshot.num_bids,
            "num_offers": snapshot.num_offers,
            "num_sales": len(transactions),
            "num_unsold": self.market.num_offers,
            "average_bid_price": snapshot.average_bid_price,
            "average_offer_price": snapshot.average_offer_price,
            "mean_sale_price": sum(prices) / len(prices) if prices else 0.0,
            "house_price_index": stats.house_price_index,
            "house_price_appreciation": stats.house_price_appreciation(),
            "average_days_on_market": stats.average_days_on_market,
            "average_sold_price_to_olp": stats.average_sold_price_to_olp,
        }
