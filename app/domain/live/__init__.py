"""
Live streaming domain logic.

Includes:
- stream: Transcoding job lifecycle (start, stop, list) and the janitor sweeps.
"""
