"""Shared helpers used across bonustally subpackages."""
