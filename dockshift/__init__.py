from .engine import ReconciliationEngine, build_engine

__all__ = ["ReconciliationEngine", "build_engine"]

__version__ = "0.1.0"
