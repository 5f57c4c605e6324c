"""Shared pytest fixtures for x402_facilitator tests."""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from x402_facilitator.core import transport


@pytest.fixture
def sleeps(monkeypatch):
    """Record backoff sleeps instead of sleeping."""
    recorded = []
    monkeypatch.setattr(transport, "_sleep", recorded.append)
    return recorded


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer(span_exporter):
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    return provider.get_tracer("x402_facilitator.tests")


@pytest.fixture
def valid_payload():
    return {
        "transactionHash": "0xabc",
        "network": "eip155:8453",
        "scheme": "exact",
        "payerWallet": "0x1111111111111111111111111111111111111111",
    }
