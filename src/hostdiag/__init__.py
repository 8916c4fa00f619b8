"""Host-resident diagnostic agent: scheduled health probes, kernel log fault
classification and supervised diagnostic subprocesses."""

from .health import HealthState
from .poller import Poller
from .registry import PollerRegistry

__version__ = "0.1.0"

__all__ = ["HealthState", "Poller", "PollerRegistry", "__version__"]
