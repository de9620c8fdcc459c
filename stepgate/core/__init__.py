"""Stepgate core: output validation, the inter-step gate, and the run driver."""
