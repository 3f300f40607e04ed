"""
Core Module.

Configuration, diagnostic logging, the audit log, exceptions and process
termination shared by the client and the session loop.
"""
