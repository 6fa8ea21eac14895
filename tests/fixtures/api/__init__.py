"""Shared fixtures for catly API tests."""
