"""Shared plumbing: configuration, logging, errors, and helpers."""
