"""
Load run coordinator.

Wires the run together from one RunParameters value:
Parameters → Grids + Funded traders → Worker pool → Report → Sinks
"""

from typing import Callable, Optional, Sequence

import structlog

from .api.auth import ManagementTokenSigner, TraderTokenSigner
from .api.client import TradingApiClient
from .config.defaults import RunParameters
from .config.report_delivery import DeliveryDestination, get_default_destinations
from .data.grid import ParameterSpace
from .data.models import Trader
from .delivery.base import DeliveryResult, DeliveryStatus, create_delivery
from .provisioning.traders import TraderProvisioner
from .report.builder import Report, ReportBuilder
from .runtime.shutdown import ShutdownCoordinator
from .stats.aggregator import StatisticsAggregator, progress_interval
from .utils.time import format_timestamp, time_elapsed_seconds, utc_now
from .workers.pool import WorkerPool

logger = structlog.get_logger(__name__)


def create_client(params: RunParameters) -> TradingApiClient:
    """Build the API client and both token signers from the run credentials."""
    cred = params.credentials
    return TradingApiClient(
        root_url=params.root_url,
        trader_signer=TraderTokenSigner(
            private_key=cred.trader_key,
            algorithm=cred.trader_algorithm,
            issuer=cred.issuer,
            audience=cred.audience,
            ttl_seconds=cred.token_ttl_seconds,
        ),
        management_signer=ManagementTokenSigner(
            keys=cred.management_keys,
            algorithm=cred.management_algorithm,
            issuer=cred.management_issuer,
            audience=cred.audience,
            ttl_seconds=cred.token_ttl_seconds,
        ),
        timeout_seconds=params.request_timeout_seconds,
    )


class LoadTestRunner:
    """
    Runs one load test.

    Setup (grids and the funded trader population) happens once and is
    cached; ConfigurationError and ProvisioningError propagate to the
    caller, while order failures stay inside the worker pool.
    """

    def __init__(
        self,
        params: RunParameters,
        client: Optional[TradingApiClient] = None,
        shutdown: Optional[ShutdownCoordinator] = None,
        provisioner: Optional[TraderProvisioner] = None,
        destinations: Optional[Sequence[DeliveryDestination]] = None,
        clock: Callable = utc_now,
        seed: Optional[int] = None
    ) -> None:
        self.params = params
        self.client = client or create_client(params)
        self.shutdown = shutdown or ShutdownCoordinator()
        self.provisioner = provisioner or TraderProvisioner(
            self.client,
            email_domain=params.email_domain,
            max_workers=params.provisioning_workers,
            is_cancelled=lambda: self.shutdown.terminating,
        )
        self.destinations = list(
            destinations if destinations is not None else get_default_destinations(params.report_path)
        )
        self.report_builder = ReportBuilder()
        self.seed = seed
        self.logger = logger
        self._clock = clock
        self._space: Optional[ParameterSpace] = None

    @property
    def space(self) -> ParameterSpace:
        if self._space is None:
            self._space = ParameterSpace.from_parameters(self.params)
            self.logger.info(
                "Parameter grids built",
                volumes=len(self._space.volumes),
                prices=len(self._space.prices)
            )
        return self._space

    def prepare(self) -> tuple[ParameterSpace, tuple[Trader, ...]]:
        """Build grids and provision the funded traders (once per runner)."""
        space = self.space
        started = self._clock()
        traders = self.provisioner.provision_and_fund(
            self.params.traders,
            self.params.currencies,
            self.params.funding_amount,
        )
        self.logger.info(
            "Provisioning complete",
            traders=len(traders),
            seconds=round(time_elapsed_seconds(started, self._clock()), 3)
        )
        return space, traders

    def run(self, install_signals: bool = True) -> Report:
        """Provision, generate load, then build and deliver the report."""
        if install_signals:
            self.shutdown.install()

        try:
            space, traders = self.prepare()

            aggregator = StatisticsAggregator(
                progress_every=progress_interval(
                    self.params.orders,
                    self.params.progress_percent,
                    self.params.progress_cap,
                ),
                on_progress=self._report_progress,
            )
            pool = WorkerPool(
                client=self.client,
                space=space,
                traders=traders,
                markets=self.params.markets,
                aggregator=aggregator,
                shutdown=self.shutdown,
                seed=self.seed,
            )

            started_at = self._clock()
            self.logger.info("Load started", at=format_timestamp(started_at))
            pool.run(self.params.workers, self.params.orders)
            completed_at = self._clock()
        finally:
            if install_signals:
                self.shutdown.restore()

        report = self.report_builder.build(
            self.params,
            aggregator.snapshot(),
            started_at,
            completed_at,
            terminated=self.shutdown.terminating,
        )
        self.deliver(report)
        return report

    def deliver(self, report: Report) -> list[DeliveryResult]:
        results = []
        for destination in self.destinations:
            if not destination.enabled:
                continue
            delivery = create_delivery(destination)
            if not delivery.health_check():
                self.logger.error("Report destination unavailable", destination=destination.name)
                results.append(DeliveryResult(
                    status=DeliveryStatus.FAILED,
                    message=f"Destination {destination.name} is not available"
                ))
                continue
            result = delivery.deliver(report)
            if result.status is not DeliveryStatus.SUCCESS:
                self.logger.error(
                    "Report delivery failed",
                    destination=destination.name,
                    message=result.message
                )
            results.append(result)
        return results

    def _report_progress(self, completed: int) -> None:
        self.logger.info("Progress", completed=completed, target=self.params.orders)
