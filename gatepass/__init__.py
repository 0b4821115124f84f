"""GatePass: approval workflow for taking company assets off premises."""

__version__ = "0.1.0"
