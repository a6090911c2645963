"""Tests for FastAPI server module"""
import asyncio
import time
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.server import MetricsServer
from collectors.process import ProcessCollector
from config import Config
from metrics.registry import MetricsRegistry


class TestMetricsServer:
    """Test FastAPI server functionality"""

    @pytest.fixture(autouse=True)
    def setup_server(self, nginx_source):
        self.config = Config()
        self.registry = MetricsRegistry(self.config, [ProcessCollector(self.config, source=nginx_source)])
        self.server = MetricsServer(self.config, registry=self.registry)
        self.client = TestClient(self.server.get_app())
        yield
        self.registry.cleanup()

    def test_metrics_endpoint(self):
        response = self.client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain; version=0.0.4")
        body = response.text
        assert "# TYPE node_process_memory gauge" in body
        assert 'node_process_memory{name="nginx",type="used"} 150.0' in body
        assert 'node_process_cpu{name="nginx",type="total"} 3.0' in body
        assert 'node_process_virtualmem{name="nginx",type="swap"} 0.0' in body
        assert 'node_scrape_collector_success{collector="process"} 1.0' in body
        assert self.server.collection_count == 1

    def test_each_scrape_runs_a_pass(self):
        self.client.get("/metrics")
        self.client.get("/metrics")

        assert self.server.collection_count == 2
        assert self.server.collection_errors == 0

    def test_enumeration_failure_marks_scrape(self, fake_source):
        config = Config()
        registry = MetricsRegistry(config, [ProcessCollector(config, source=fake_source(fail_listing=True))])
        server = MetricsServer(config, registry=registry)
        client = TestClient(server.get_app())

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "node_process_memory" not in response.text
        assert 'node_scrape_collector_success{collector="process"} 0.0' in response.text
        assert server.collection_errors == 1

        health = client.get("/health")
        assert health.status_code == 503
        assert health.json()["detail"]["status"] == "unhealthy"
        registry.cleanup()

    def test_scrape_timeout(self):
        async def slow_collect():
            await asyncio.sleep(1)
            return []

        self.server.config.scrape_timeout = 0.01
        with patch.object(self.registry, 'collect_all_async', side_effect=slow_collect):
            response = self.client.get("/metrics")

        assert response.status_code == 503
        assert self.server.collection_errors == 1

    def test_health_endpoint_healthy(self):
        self.client.get("/metrics")

        response = self.client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["total_collections"] == 1
        assert data["collection_errors"] == 0

    def test_health_before_first_scrape(self):
        response = self.client.get("/health")

        assert response.status_code == 200
        assert response.json()["last_collection_seconds_ago"] is None

    def test_status_endpoint(self):
        self.client.get("/metrics")

        with patch('os.uname') as mock_uname:
            mock_uname.return_value.nodename = "test-host"
            response = self.client.get("/status")

        assert response.status_code == 200
        data = response.json()
        assert data["service"]["name"] == "process-metrics-exporter"
        assert data["service"]["hostname"] == "test-host"
        assert data["collection"]["total_collections"] == 1
        assert data["collection"]["success_rate"] == 100.0
        assert data["collectors"]["process"]["last_pass"]["process_names"] == 1

    def test_collectors_endpoint(self):
        response = self.client.get("/collectors")

        assert response.status_code == 200
        data = response.json()
        assert data["enabled_collectors"] == ["process"]
        assert data["collectors"]["process"]["enabled"] is True

    def test_index_endpoint(self):
        response = self.client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Process Metrics Exporter" in response.text

    def test_security_headers(self):
        response = self.client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "X-Process-Time" in response.headers

    @pytest.mark.asyncio
    async def test_scrape_records_duration(self):
        before = time.time()

        metrics = await self.server.scrape()

        assert len(metrics) == 12
        assert self.server.last_collection_time >= before
        assert self.server.last_collection_ok is True


class TestUndecodableProcessNames:
    """Process names that are not valid UTF-8 must not break a scrape"""

    def test_metrics_endpoint_serves_all_names(self, fake_source, process_entry):
        raw_name = b"bad\xffname".decode("utf-8", "surrogateescape")
        config = Config()
        registry = MetricsRegistry(config, [ProcessCollector(config, source=fake_source({
            1: process_entry("nginx", memory=100),
            2: process_entry(raw_name, memory=50),
        }))])
        server = MetricsServer(config, registry=registry)
        client = TestClient(server.get_app())

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'node_process_memory{name="nginx",type="used"} 100.0' in response.text
        assert 'node_process_memory{name="bad\ufffdname",type="used"} 50.0' in response.text
        assert server.collection_errors == 0
        registry.cleanup()
