"""Slack incoming-webhook channel."""
