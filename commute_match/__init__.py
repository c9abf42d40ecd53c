"""Commute matching backend."""
