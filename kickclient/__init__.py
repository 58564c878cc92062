"""
Kick Integration Client

An async client for the Kick public API with a webhook receiver that
registers event subscriptions for a broadcaster.
"""

__version__ = "1.0.0"
__author__ = "Kick Integration Client"
