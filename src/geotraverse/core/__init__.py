"""Traversal engine, capability interface, task scheduling and manifolds."""
