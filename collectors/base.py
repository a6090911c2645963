"""Base collector class and interfaces"""
import asyncio
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from metrics.models import MetricValue


class BaseCollector(ABC):
    """Base class for all metric collectors"""

    def __init__(self, config=None, name: str = "", help_text: str = ""):
        self.config = config or {}
        self._name = name
        self._help_text = help_text
        # One worker: passes of the same collector never run concurrently
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"{name}_collector")

    @abstractmethod
    def collect(self) -> List[MetricValue]:
        """Collect metrics and return list of MetricValue objects"""
        pass

    async def collect_async(self) -> List[MetricValue]:
        """Async version of collect method"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.collect)

    @property
    def name(self) -> str:
        """Collector name for identification"""
        return self._name

    @property
    def help_text(self) -> str:
        """Help text describing what this collector does"""
        return self._help_text or f"{self.name} metrics collector"

    @property
    def namespace(self) -> str:
        return getattr(self.config, "namespace", "node")

    def is_enabled(self) -> bool:
        """Check if this collector is enabled"""
        if hasattr(self.config, 'is_collector_enabled'):
            return self.config.is_collector_enabled(self.name)
        return True

    def describe(self) -> Dict[str, Any]:
        """Extra status information, overridden by collectors that have any"""
        return {}

    def cleanup(self):
        """Cleanup resources"""
        if hasattr(self, '_executor'):
            self._executor.shutdown(wait=False)
