"""FastAPI server setup and routes"""
import asyncio
import os
import time
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Response, HTTPException
from fastapi.responses import HTMLResponse
from config import Config
from metrics.registry import MetricsRegistry
from metrics.exporters.prometheus import PrometheusExporter, CONTENT_TYPE
from logging_config import get_logger, log_metrics_collection, log_error
from middleware.security import SecurityHeadersMiddleware, RequestLoggingMiddleware


logger = get_logger(__name__)


class MetricsServer:
    """FastAPI server that runs one collection pass per scrape"""

    def __init__(self, config: Config, registry: Optional[MetricsRegistry] = None):
        self.config = config
        self.registry = registry if registry is not None else MetricsRegistry(config)
        self.exporter = PrometheusExporter(config)
        self.app = FastAPI(
            title="Process Metrics Exporter",
            version=config.service_version,
            docs_url=None,
            redoc_url=None,
            openapi_url=None,
            lifespan=self._lifespan
        )

        # Scrape state
        self.start_time = time.time()
        self.last_collection_time = 0.0
        self.last_collection_duration = 0.0
        self.last_collection_ok = True
        self.collection_count = 0
        self.collection_errors = 0
        self._scrape_lock = asyncio.Lock()

        self._setup_middleware()
        self._setup_routes()

    @asynccontextmanager
    async def _lifespan(self, app: FastAPI):
        self.start_time = time.time()
        logger.info(
            "Application startup",
            service_name=self.config.service_name,
            collectors=self.registry.list_collectors(),
            event_type="server_startup"
        )
        yield
        logger.info("Shutting down metrics exporter", event_type="server_shutdown")
        self.registry.cleanup()

    def _setup_middleware(self):
        """Setup middleware, last added runs first"""
        if self.config.enable_request_logging:
            self.app.add_middleware(RequestLoggingMiddleware)
        self.app.add_middleware(SecurityHeadersMiddleware)

    def _setup_routes(self):
        """Setup FastAPI routes"""

        @self.app.get('/metrics', response_class=Response)
        async def get_metrics():
            """Serve metrics in Prometheus format"""
            try:
                metrics = await self.scrape()
            except asyncio.TimeoutError:
                raise HTTPException(
                    status_code=503,
                    detail=f"Scrape exceeded {self.config.scrape_timeout}s timeout"
                )
            return Response(self.exporter.export_metrics(metrics), media_type=CONTENT_TYPE)

        @self.app.get('/health')
        def health_check():
            """Health check endpoint"""
            health_data = {
                "status": "healthy" if self.last_collection_ok else "unhealthy",
                "last_collection_seconds_ago": self._last_collection_age(),
                "total_collections": self.collection_count,
                "collection_errors": self.collection_errors,
            }

            if not self.last_collection_ok:
                raise HTTPException(status_code=503, detail=health_data)

            return health_data

        @self.app.get('/status')
        def get_status():
            """Detailed status information"""
            return {
                "service": {
                    "name": self.config.service_name,
                    "version": self.config.service_version,
                    "uptime_seconds": round(time.time() - self.start_time, 1),
                    "hostname": os.uname().nodename
                },
                "collection": {
                    "namespace": self.config.namespace,
                    "scrape_timeout_seconds": self.config.scrape_timeout,
                    "last_collection_seconds_ago": self._last_collection_age(),
                    "last_collection_duration_seconds": round(self.last_collection_duration, 3),
                    "total_collections": self.collection_count,
                    "collection_errors": self.collection_errors,
                    "success_rate": round((self.collection_count - self.collection_errors) / max(self.collection_count, 1) * 100, 1)
                },
                "collectors": self.registry.get_collector_status()
            }

        @self.app.get('/collectors')
        def list_collectors():
            """List all available collectors"""
            return {
                "collectors": self.registry.get_collector_status(),
                "enabled_collectors": self.config.enabled_collectors
            }

        @self.app.get('/', response_class=HTMLResponse)
        def index():
            """Web interface"""
            return self._generate_html_interface()

    async def scrape(self):
        """Run one collection pass; concurrent scrapes wait for each other"""
        async with self._scrape_lock:
            start_time = time.time()
            self.collection_count += 1
            try:
                metrics = await asyncio.wait_for(
                    self.registry.collect_all_async(),
                    timeout=self.config.scrape_timeout
                )
            except Exception as e:
                log_error(logger, e, {"component": "scrape", "collection_count": self.collection_count})
                self.collection_errors += 1
                self.last_collection_ok = False
                raise

            failures = self.registry.last_failures
            enabled = self.registry.enabled_collectors()
            if failures:
                self.collection_errors += 1
            # Unhealthy only when no collector produced anything
            self.last_collection_ok = not enabled or len(failures) < len(enabled)
            self.last_collection_time = time.time()
            self.last_collection_duration = self.last_collection_time - start_time

            log_metrics_collection(logger, len(metrics), self.last_collection_duration, errors=len(failures))
            return metrics

    def _last_collection_age(self):
        if self.last_collection_time <= 0:
            return None
        return round(time.time() - self.last_collection_time, 1)

    def _generate_html_interface(self) -> str:
        """Generate HTML interface"""
        collectors_status = self.registry.get_collector_status()
        collector_items = ''.join(
            f'<li><strong>{name}:</strong> {"Enabled" if info["enabled"] else "Disabled"} - {info["help"]}</li>'
            for name, info in collectors_status.items()
        )

        return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <title>Process Metrics Exporter</title>
            <style>
                body {{ font-family: Arial, sans-serif; margin: 40px; }}
                .endpoint {{ margin: 10px 0; }}
            </style>
        </head>
        <body>
            <h1>Process Metrics Exporter</h1>
            <p>Per process name memory and CPU metrics</p>
            <h2>Endpoints</h2>
            <div class="endpoint"><a href="/metrics">/metrics</a> - Prometheus metrics</div>
            <div class="endpoint"><a href="/health">/health</a> - Health check</div>
            <div class="endpoint"><a href="/status">/status</a> - Status information</div>
            <div class="endpoint"><a href="/collectors">/collectors</a> - Collector information</div>
            <h2>Collectors</h2>
            <ul>{collector_items}</ul>
        </body>
        </html>
        """

    def get_app(self) -> FastAPI:
        """Get the FastAPI application"""
        return self.app
