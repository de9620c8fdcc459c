"""Stepgate event routing: formatting and best-effort notification delivery.

Pipeline events are formatted into chat messages and posted to an
external asynchronous channel.  Delivery problems are logged and never
reach the gate decision.
"""
