"""Compute service backends."""
