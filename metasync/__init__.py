"""Declarative metadata installer: reconcile UUID-keyed vocabulary into a target store."""

__version__ = "1.0.0"
