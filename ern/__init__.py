"""Cauldron store and native dependency resolver for Electrode Native containers."""

__version__ = "0.4.0"
