"""
Main runner module for the SOL/USDC swap agent.
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger
from rich.table import Table

from execution import ConfirmationMonitor, JupiterClient, SolanaRPC, SwapExecutor, SwapResult
from risk import RiskLimiter
from signals import Decision, DecisionEngine

from . import config
from .exceptions import ConfigError, TradingError
from .price_feed import PriceFeed
from .reconciler import BalanceReconciler, Holdings
from .state import BotState
from .utils import console, format_currency, setup_logging

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """What happened during one evaluation cycle."""
    price: Optional[Decimal] = None
    holdings: Optional[Holdings] = None
    decision: Optional[Decision] = None
    swap: Optional[SwapResult] = None
    error: Optional[TradingError] = None


class TradingAgent:
    """
    Drives one evaluation cycle per tick.

    The agent owns the BotState and passes it to each component; nothing
    else writes to it.
    """

    def __init__(self,
                 cfg: config.BotConfig,
                 price_feed: PriceFeed,
                 reconciler: BalanceReconciler,
                 decision_engine: DecisionEngine,
                 risk_limiter: RiskLimiter,
                 executor: SwapExecutor,
                 state: Optional[BotState] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.cfg = cfg
        self.price_feed = price_feed
        self.reconciler = reconciler
        self.decision_engine = decision_engine
        self.risk_limiter = risk_limiter
        self.executor = executor
        self.clock = clock
        self.state = state or BotState.initial(cfg.initial_balance_usd, now=clock())

    def tick(self) -> TickReport:
        """Run one cycle: reset window, sample price, reconcile, decide, swap."""
        report = TickReport()
        self.risk_limiter.maybe_reset(self.state, self.clock())

        try:
            report.price = self.price_feed.sample()
        except TradingError as e:
            logger.error(f"Error getting SOL price: {e}")
            report.error = e
            return report

        try:
            report.holdings = self.reconciler.reconcile(report.price)
        except TradingError as e:
            logger.error(f"Error getting real balance: {e}")
            report.error = e
            return report

        self.state.apply_holdings(report.holdings.usd_value, report.holdings.asset)

        logger.info(
            f"Current SOL price: {format_currency(report.price)} | "
            f"Holding: {self.state.current_asset.symbol} ({format_currency(self.state.balance_usd)}) | "
            f"Last swap: {format_currency(self.state.last_swap_price)}"
        )

        report.decision = self.decision_engine.evaluate(self.state, report.price)
        logger.info(f"Swap decision: {report.decision.reason}")

        if not report.decision.should_swap:
            return report

        try:
            report.swap = self.executor.execute(self.state, report.price)
        except TradingError as e:
            logger.error(f"Swap failed: {e}")
            report.error = e
        return report

    def run_tick(self):
        """Scheduler entry point. Unexpected errors are logged and re-raised."""
        try:
            self.tick()
        except Exception:
            logger.exception("Unexpected error during tick")
            raise


def build_agent(cfg: config.BotConfig) -> TradingAgent:
    """
    Wire the components for a configuration.

    Raises:
        ConfigError: if the signing key cannot be loaded
    """
    keypair = config.load_keypair(cfg)
    wallet_address = cfg.wallet_address or str(keypair.pubkey())

    jupiter = JupiterClient(cfg.quote_api_url, cfg.swap_api_url)
    rpc = SolanaRPC(cfg.rpc_url)
    risk_limiter = RiskLimiter(cfg.max_swaps_per_day)

    executor = SwapExecutor(
        cfg,
        jupiter=jupiter,
        rpc=rpc,
        keypair=keypair,
        risk_limiter=risk_limiter,
        monitor=ConfirmationMonitor(rpc),
    )

    return TradingAgent(
        cfg,
        price_feed=PriceFeed(jupiter, cfg.slippage_bps),
        reconciler=BalanceReconciler(rpc, wallet_address),
        decision_engine=DecisionEngine(cfg.swap_threshold_min_percent, cfg.swap_threshold_max_percent),
        risk_limiter=risk_limiter,
        executor=executor,
    )


def display_startup_summary(agent: TradingAgent):
    """Display the agent settings as a table."""
    cfg = agent.cfg
    table = Table(title="Solana Swap Agent")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Wallet", agent.reconciler.wallet_address)
    table.add_row("Initial balance", f"{format_currency(agent.state.balance_usd)} in {agent.state.current_asset.symbol}")
    table.add_row("Price check interval", f"{cfg.price_check_interval_seconds}s")
    table.add_row("Swap thresholds", f"{cfg.swap_threshold_min_percent:.1f}% - {cfg.swap_threshold_max_percent:.1f}%")
    table.add_row("Max swaps per day", str(cfg.max_swaps_per_day))
    table.add_row("Slippage", f"{cfg.slippage_bps} bps")
    table.add_row("Priority fee", f"{cfg.priority_fee_lamports} lamports")
    mode = "[yellow]SIMULATE[/yellow]" if cfg.simulate_mode else "[red]LIVE[/red]"
    table.add_row("Mode", mode)

    console.print(table)


def start_scheduler(agent: TradingAgent):
    """Start the tick scheduler. Blocks until interrupted."""
    interval = agent.cfg.price_check_interval_seconds

    # one worker and one instance: ticks never overlap
    scheduler = BlockingScheduler(executors={'default': ThreadPoolExecutor(max_workers=1)})
    scheduler.add_job(
        func=agent.run_tick,
        trigger=IntervalTrigger(seconds=interval),
        id='swap_tick',
        name='SOL/USDC swap tick',
        max_instances=1,
        coalesce=True,
        replace_existing=True
    )

    logger.info("🚀 Starting Solana swap agent")
    logger.info(f"   Interval: {interval}s")
    logger.info(f"   Simulate mode: {agent.cfg.simulate_mode}")
    logger.info(f"   Next run: {datetime.now() + timedelta(seconds=interval)}")

    logger.info("🔄 Running initial tick...")
    try:
        agent.run_tick()
    except Exception:
        # run_tick has already logged the traceback
        logger.warning("⚠️ Initial tick failed, continuing with the schedule")

    try:
        scheduler.start()
    except KeyboardInterrupt:
        logger.info("🛑 Swap agent stopped by user")
        scheduler.shutdown(wait=False)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Solana SOL/USDC Swap Agent")
    parser.add_argument(
        "--config",
        default=config.DEFAULT_CONFIG_FILE,
        help="Path to the YAML (or JSON) config file"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single tick and exit (don't start scheduler)"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Force simulate mode (no transactions are sent)"
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit"
    )

    args = parser.parse_args(argv)

    try:
        cfg = config.load_config(args.config, simulate=True if args.dry_run else None)
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"❌ Failed to load config: {e}")
        return 1

    setup_logging(cfg.log_level, cfg.log_file)

    try:
        agent = build_agent(cfg)
    except ConfigError as e:
        logger.error(f"❌ Failed to create trading agent: {e}")
        return 1

    if args.validate:
        logger.info("✅ Configuration is valid")
        return 0

    display_startup_summary(agent)

    try:
        if args.once:
            logger.info("🔄 Running single tick...")
            agent.tick()
        else:
            start_scheduler(agent)
    except KeyboardInterrupt:
        logger.info("🛑 Interrupted by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
