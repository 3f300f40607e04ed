"""
Application Modules.

- core/: Configuration, logging, audit log, exceptions, process termination
- completion/: Completion API client and request/response schemas
- cli/: Interactive session loop
"""
