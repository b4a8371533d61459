import pytest

from semantic_metrics.demo import build_demo_model


@pytest.fixture
def model():
    return build_demo_model()
