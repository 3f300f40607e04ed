"""
CLI Module.

Interactive session loop driven by chat.py.

Architecture:
- chat.py parses flags, loads configuration and opens resources
- ChatSession reads prompts, calls the CompletionClient and renders choices
- Diagnostics go to stderr via structlog; completion text goes to stdout
"""
