"""Shared helpers: errors, logging, fixed-point units and timestamps."""
