"""httphealth — pluggable health checks behind an HTTP surface."""

__version__ = "0.1.0"
