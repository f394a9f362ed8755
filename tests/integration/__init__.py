# SPDX-License-Identifier: MIT
"""Integration tests for scoop-sync.

These tests run the sync layer against an in-process HTTP backend and a
real SQLite snapshot. No external services are contacted.
"""
