"""Match scoring services.

``engine`` holds the pure scoring rules and state transitions; ``operations``
runs them against stored matches inside a transaction and broadcasts the
result. HTTP routes and socket handlers import from here, keeping transport
concerns out of the scoring rules.
"""
