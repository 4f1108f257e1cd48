"""Generic JSON webhook channel."""
