"""
Shared fixtures: sample datasets and in-process narrative collaborators.
"""
import pytest
from autoinsight.core.config import Settings
from autoinsight.core.performance import PerformanceMonitor
from autoinsight.services.narrative import FailingNarrativeCollaborator, StaticNarrativeCollaborator

NARRATIVE_TEXT = """Here is what stands out:
1. [OPPORTUNITY] Regional Growth: The North region leads revenue by 25%. Expand marketing there.
2. [RISK] Margin Pressure: Costs rise with units sold. Review supplier contracts.
3. Customer Focus: Repeat buyers drive most orders.
"""


@pytest.fixture
def sales_rows():
    """Small sales dataset covering every column type."""
    regions = ["North", "South", "East", "West"]
    rows = []
    for i in range(20):
        units = i + 1
        rows.append({
            "date": f"2024-01-{i + 1:02d}",
            "region": regions[i % 4],
            "units": units,
            "revenue": units * 10.0 + (i % 3),
            "returned": i % 5 == 0,
            "note": f"order number {i} for customer {i * 7}",
        })
    return rows


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def static_narrative():
    return StaticNarrativeCollaborator(NARRATIVE_TEXT)


@pytest.fixture
def failing_narrative():
    return FailingNarrativeCollaborator()


@pytest.fixture(autouse=True)
def clean_metrics():
    PerformanceMonitor.clear_metrics()
    yield
    PerformanceMonitor.clear_metrics()
