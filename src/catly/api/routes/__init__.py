"""Catly API routes."""
