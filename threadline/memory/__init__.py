"""Conversation memory rendering."""
