"""
Job queue service.

Tracks jobs submitted by task name, runs them in the background with
bounded retries, and reports aggregate status over an HTTP API.
"""

__version__ = "1.0.0"
