"""
FastAPI Application Package

This package contains the HTTP surface of the service: one endpoint returning
the aggregated per-venue prices and two endpoints returning the premium and gap
comparison rows derived from them.
"""
