"""SMTP e-mail channel."""
