"""Stepgate command-line interface."""
