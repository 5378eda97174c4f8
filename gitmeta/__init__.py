"""Report git commit metadata to the Datadog source code integration."""

__version__ = "0.3.0"
