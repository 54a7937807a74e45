"""Clients for the services asana-sync talks to.

Key Components:
    - WorkTrackingClient / AsanaRestProvider: task operations
    - SourceControlClient / GitHubRestProvider: pull requests and releases
"""
