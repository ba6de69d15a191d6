from allocheck.metrics.logger import write_metrics
from allocheck.metrics.metrics import collect_metrics

__all__ = ["collect_metrics", "write_metrics"]
