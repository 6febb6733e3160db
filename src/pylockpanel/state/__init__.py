"""Session state layer.

This package is the single source of truth for how load, polling results,
user commands and timer expiries change the panel's state. Transitions are
pure functions; all I/O lives in :mod:`pylockpanel.controller`.
"""
