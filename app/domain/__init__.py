"""
Domain layer containing core business logic and domain services.

Submodules:
- live: Live stream relay logic (admission, supervision, reconciliation).
- utils: Domain-specific utilities (ID generation, clock).
"""
