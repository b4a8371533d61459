from __future__ import annotations


class SemanticLayerError(ValueError):
    """Base class for metric configuration and reference errors."""


class UnknownMetric(SemanticLayerError):
    def __init__(self, name: str):
        super().__init__(f"Unknown metric: {name}")
        self.name = name


class UnknownFactTable(SemanticLayerError):
    def __init__(self, name: str, reason: str = "unknown fact table"):
        super().__init__(f"{reason.capitalize()}: {name}")
        self.name = name


class UnknownFactMeasure(SemanticLayerError):
    def __init__(self, fact_table: str, measure: str):
        super().__init__(f"Unknown fact column '{measure}' for table '{fact_table}'")
        self.fact_table = fact_table
        self.name = measure


class UnknownTransform(SemanticLayerError):
    def __init__(self, name: str):
        super().__init__(f"Unknown context transform: {name}")
        self.name = name


class UnsupportedAggregation(SemanticLayerError):
    def __init__(self, agg: str):
        super().__init__(f"Unsupported aggregation: {agg}")
        self.name = agg


class CyclicMetricDefinition(SemanticLayerError):
    def __init__(self, cycle: list[str]):
        super().__init__("Cyclic metric definition: " + " -> ".join(cycle))
        self.cycle = cycle
        self.name = cycle[0] if cycle else ""


class InvalidMetricDefinition(SemanticLayerError):
    def __init__(self, issues: list[str]):
        super().__init__("Invalid metric definition: " + "; ".join(issues))
        self.issues = issues
