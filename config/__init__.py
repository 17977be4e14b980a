"""Configuration package for the settings service.

Provides the layered process configuration, the live settings view and
the shared constants.
"""
