"""Fleet duty and fatigue tracking engine."""

__version__ = "0.3.0"
