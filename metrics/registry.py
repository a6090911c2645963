"""Metrics registry for managing collectors and orchestrating collection"""
import asyncio
import time
from typing import Callable, Dict, List, Optional, Tuple

from logging_config import get_logger, log_error
from .models import MetricType, MetricValue
from collectors.base import BaseCollector
from collectors.process import ProcessCollector


logger = get_logger(__name__)

COLLECTOR_FACTORIES: Dict[str, Callable[..., BaseCollector]] = {
    "process": ProcessCollector,
}


def build_collectors(config=None) -> List[BaseCollector]:
    """Instantiate the known collectors named in ``config.enabled_collectors``"""
    names = getattr(config, "enabled_collectors", None) or list(COLLECTOR_FACTORIES)
    collectors = []
    for name in names:
        factory = COLLECTOR_FACTORIES.get(name)
        if factory is None:
            logger.warning("Unknown collector requested", collector=name, event_type="collector_unknown")
            continue
        collectors.append(factory(config))
    return collectors


class MetricsRegistry:
    """Registry of the collectors composed by the host"""

    def __init__(self, config=None, collectors: Optional[List[BaseCollector]] = None):
        self.config = config
        self.collectors: Dict[str, BaseCollector] = {}
        self.last_failures: List[str] = []
        for collector in collectors if collectors is not None else build_collectors(config):
            self.register_collector(collector)

    @property
    def namespace(self) -> str:
        return getattr(self.config, "namespace", "node")

    def register_collector(self, collector: BaseCollector):
        """Register a new collector"""
        if not isinstance(collector, BaseCollector):
            raise ValueError("Collector must inherit from BaseCollector")

        self.collectors[collector.name] = collector
        logger.info("Registered collector", collector=collector.name, event_type="collector_registered")

    def get_collector(self, name: str) -> Optional[BaseCollector]:
        """Get collector by name"""
        return self.collectors.get(name)

    def list_collectors(self) -> List[str]:
        """List all registered collector names"""
        return list(self.collectors.keys())

    def enabled_collectors(self) -> List[BaseCollector]:
        return [collector for collector in self.collectors.values() if collector.is_enabled()]

    def collect_all(self) -> List[MetricValue]:
        """Collect metrics from all enabled collectors"""
        all_metrics = []
        scrape_metrics = []
        failures = []

        for collector in self.enabled_collectors():
            start_time = time.time()
            try:
                metrics = collector.collect()
                success = True
            except Exception as e:
                log_error(logger, e, {"component": "collector", "collector": collector.name})
                metrics = []
                success = False
                failures.append(collector.name)

            all_metrics.extend(metrics)
            scrape_metrics.extend(self._scrape_metrics(collector.name, time.time() - start_time, success))

        self.last_failures = failures
        return all_metrics + scrape_metrics

    async def collect_all_async(self) -> List[MetricValue]:
        """Collect from all enabled collectors, each in its own executor"""
        collectors = self.enabled_collectors()
        outcomes = await asyncio.gather(*(self._timed_collect(c) for c in collectors))

        all_metrics = []
        scrape_metrics = []
        failures = []
        for collector, (metrics, duration, error) in zip(collectors, outcomes):
            if error is not None:
                log_error(logger, error, {"component": "collector", "collector": collector.name})
                failures.append(collector.name)
            all_metrics.extend(metrics)
            scrape_metrics.extend(self._scrape_metrics(collector.name, duration, error is None))

        self.last_failures = failures
        return all_metrics + scrape_metrics

    async def _timed_collect(self, collector: BaseCollector) -> Tuple[List[MetricValue], float, Optional[Exception]]:
        start_time = time.time()
        try:
            metrics = await collector.collect_async()
        except Exception as e:
            return [], time.time() - start_time, e
        return metrics, time.time() - start_time, None

    def _scrape_metrics(self, name: str, duration: float, success: bool) -> List[MetricValue]:
        labels = {"collector": name}
        return [
            MetricValue(
                name=f"{self.namespace}_scrape_collector_duration_seconds",
                value=round(duration, 6),
                labels=labels.copy(),
                help_text="Duration of a collector scrape.",
                metric_type=MetricType.GAUGE,
                unit="s"
            ),
            MetricValue(
                name=f"{self.namespace}_scrape_collector_success",
                value=1.0 if success else 0.0,
                labels=labels.copy(),
                help_text="Whether a collector succeeded.",
                metric_type=MetricType.GAUGE
            ),
        ]

    def get_collector_status(self) -> Dict[str, Dict]:
        """Get status information for all collectors"""
        status = {}

        for name, collector in self.collectors.items():
            status[name] = {
                "enabled": collector.is_enabled(),
                "class": collector.__class__.__name__,
                "help": collector.help_text,
                "last_scrape_failed": name in self.last_failures,
            }
            status[name].update(collector.describe())

        return status

    def cleanup(self):
        """Cleanup all collectors"""
        for collector in self.collectors.values():
            collector.cleanup()
