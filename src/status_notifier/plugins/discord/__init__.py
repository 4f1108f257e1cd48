"""Discord webhook channel."""
