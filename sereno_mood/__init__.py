"""
SERENO Mood - Mood assessment service for the SERENO companion app.

This package provides a rule-based assessment engine that classifies mood
check-ins (sentiment, consistency, risk, recommendations), an append-only
mood history, and an HTTP API with Server-Sent Events for new entries.
"""

__version__ = "0.1.0"
