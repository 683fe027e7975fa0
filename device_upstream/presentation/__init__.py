"""
Presentation layer: HTTP API for upstream connectors and simulators.
"""
