"""Infrastructure Layer - database sessions, the SQL record store, logging.

Invariants:
    - Only this layer imports the database driver stack
    - Everything here is reached through core/repository_protocols.py contracts
"""
