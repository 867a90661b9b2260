#!/usr/bin/env python3
"""
Loan Project Simulator - Entry Point

Run with: python run_simulation.py [--trials N] [--seed S] [--workers W]
"""
import argparse
import logging
import os
import sys

import pandas as pd

# Add current directory to path for imports
current_dir = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, current_dir)

from utils.logger import set_log_level
from scenario_engine import run_sensitivity, run_simulation
from scenario_engine.simulation_config import load_sensitivity_grid, load_simulation_config


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Office vs residential loan Monte Carlo simulation")
    parser.add_argument('--config', help="YAML assumptions file (default: config/simulation.yaml)")
    parser.add_argument('--trials', type=int, help="Override trial count")
    parser.add_argument('--seed', type=int, help="Override RNG seed")
    parser.add_argument('--workers', type=int, default=None, help="Worker threads (default: sequential)")
    parser.add_argument('--sensitivity', action='store_true', help="Also run the interest rate sensitivity grid")
    parser.add_argument('--verbose', action='store_true', help="Debug logging from the engine")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)

    config = load_simulation_config(args.config).with_overrides(
        trial_count=args.trials,
        rng_seed=args.seed,
    )
    result = run_simulation(config, max_workers=args.workers)

    with pd.option_context('display.float_format', '{:,.2f}'.format, 'display.width', 160):
        print(f"\nOffice outlook: {result.outlook.name.lower()}")
        print("\nNPV summary")
        print(result.summary_frame())
        print("\nOffice vs residential t-test")
        print(result.comparison_frame())

        if args.sensitivity:
            rates, probabilities = load_sensitivity_grid(args.config)
            table = run_sensitivity(config.loan_principal, config.loan_duration_years, rates, probabilities)
            print("\nInterest rate sensitivity")
            print(table.to_dataframe())
            print(f"\nBest rate: {table.best_rate*100:.2f}%")

    return 0


if __name__ == "__main__":
    sys.exit(main())
