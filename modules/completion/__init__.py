"""
Completion Module.

Client for the text-completion API and the schemas it sends and receives.

Usage:
    from modules.completion.client import CompletionClient
    from modules.completion.schemas import AuthCredentials
"""
