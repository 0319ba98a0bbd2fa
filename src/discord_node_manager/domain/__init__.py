"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, events, messages and exceptions
- playback/: Tracks, search results and the guild session registry
"""
