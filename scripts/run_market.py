"""
Run Market Simulation Script.

Usage:
    python scripts/run_market.py experiment.num_ticks=600 flow.bid_probability=0.06
"""

import logging
import os

import hydra
from omegaconf import DictConfig

from housing_market.simulation import MarketSimulation


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    # Configure logging
    log_level = getattr(logging, cfg.experiment.log_level.upper())

    logging.getLogger().setLevel(log_level)
    logging.getLogger("housing_market").setLevel(log_level)

    # Console handler when nothing else is attached
    if not logging.getLogger().handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(asctime)s][%(name)s][%(levelname)s] - %(message)s'))
        logging.getLogger().addHandler(handler)

    logging.info(f"Running simulation: {cfg.experiment.name}")

    simulation = MarketSimulation(cfg)
    results = simulation.run()

    output_dir = cfg.experiment.output_dir
    os.makedirs(output_dir, exist_ok=True)
    results.to_csv(os.path.join(output_dir, "results.csv"), index=False)

    logging.info(f"Results saved to {output_dir}")
    logging.info("Yearly averages:")
    yearly = results.groupby((results["tick"] - 1) // int(cfg.market.ticks_per_year))
    print(yearly[["num_sales", "house_price_index", "average_days_on_market"]].mean())


if __name__ == "__main__":
    main()
