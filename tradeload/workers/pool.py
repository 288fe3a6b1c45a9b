"""
Worker pool for the load phase.

Each worker samples an order, submits it, and feeds the statistics
aggregator until the completion target is reached or shutdown is
requested. The stop check and the record are not atomic across workers,
so the final count can overshoot the target by up to worker_count - 1.
"""

import random
import threading
import time
from typing import Callable, Optional, Sequence

import structlog

from ..api.client import TradingApiClient
from ..data.grid import ParameterSpace
from ..data.models import OrderOutcome, OrderRequest, OrderSide, Trader
from ..errors import RequestError
from ..logging.config import get_worker_logger
from ..runtime.shutdown import ShutdownCoordinator
from ..stats.aggregator import StatisticsAggregator

logger = structlog.get_logger(__name__)

SIDES = (OrderSide.BUY, OrderSide.SELL)
JOIN_POLL_SECONDS = 0.5


class WorkerPool:
    """Fixed set of threads issuing orders in parallel."""

    def __init__(
        self,
        client: TradingApiClient,
        space: ParameterSpace,
        traders: Sequence[Trader],
        markets: Sequence[str],
        aggregator: StatisticsAggregator,
        shutdown: ShutdownCoordinator,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.perf_counter
    ):
        self.client = client
        self.space = space
        self.traders = tuple(traders)
        self.markets = tuple(markets)
        self.aggregator = aggregator
        self.shutdown = shutdown
        self.seed = seed
        self.logger = logger
        self._clock = clock

    def run(self, worker_count: int, target_count: int) -> None:
        """Start ``worker_count`` workers and block until every one has exited."""
        threads = [
            threading.Thread(
                target=self._work,
                args=(worker_id, target_count),
                name=f"worker-{worker_id}",
                daemon=True,
            )
            for worker_id in range(worker_count)
        ]

        self.logger.info("Load phase started", workers=worker_count, target=target_count)
        for thread in threads:
            thread.start()

        # Timed joins keep the main thread responsive to signal handlers.
        for thread in threads:
            while thread.is_alive():
                thread.join(JOIN_POLL_SECONDS)

        self.logger.info(
            "Load phase finished",
            completed=self.aggregator.completed,
            terminated=self.shutdown.terminating
        )

    def _rng_for(self, worker_id: int) -> random.Random:
        if self.seed is None:
            return random.Random()
        return random.Random(self.seed + worker_id)

    def _work(self, worker_id: int, target_count: int) -> None:
        log = get_worker_logger(__name__, worker_id)
        rng = self._rng_for(worker_id)

        while True:
            if self.aggregator.completed >= target_count or self.shutdown.terminating:
                break

            outcome = self.submit(self.sample_order(rng))
            if outcome.success:
                self.aggregator.record(outcome.latency)
            else:
                self.aggregator.record_failure()
                log.error(
                    "Order submission failed",
                    error=str(outcome.error),
                    diagnostic=outcome.error.diagnostic if outcome.error else None
                )

        log.debug("Worker exiting")

    def sample_order(self, rng: random.Random) -> OrderRequest:
        """Draw every order field independently and uniformly."""
        volume, price = self.space.sample(rng)
        return OrderRequest(
            side=rng.choice(SIDES),
            market=rng.choice(self.markets),
            volume=volume,
            price=price,
            trader=rng.choice(self.traders),
        )

    def submit(self, order: OrderRequest) -> OrderOutcome:
        """Send one order and time the full round trip."""
        started = self._clock()
        response = self.client.create_order(order)
        latency = self._clock() - started

        if response.ok:
            return OrderOutcome(latency=latency, success=True)

        error = RequestError(
            f"Order {order.side.value} {order.volume}@{order.price} on {order.market} "
            f"for {order.trader.uid} failed with status {response.status}",
            order=order,
            diagnostic=response.error.describe() if response.error else None,
        )
        return OrderOutcome(latency=latency, success=False, error=error)
