"""Stepgate CLI subcommands."""
