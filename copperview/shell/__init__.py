"""
Application shell: resource catalogs, session snapshots and the pygame
surface adapter.
"""
