"""
Application package for the payment system backend.

It exposes the domain exception taxonomy, the error translation layer that
renders failures into client-safe envelopes, and the core utilities
(configuration, logging, metrics) the HTTP application is built from.
"""
