"""Relay SonarQube quality-gate webhooks to Gerrit as review comments."""

__version__ = "0.1.0"
