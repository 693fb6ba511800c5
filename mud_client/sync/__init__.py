"""Pollers that reconcile local caches with the backend's streams.

Each synchronizer owns one piece of state and updates it with a single
append-or-replace step, so overlapping polls never need a lock.
"""
