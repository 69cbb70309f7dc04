"""Conversation agents: classification, question generation and the gate controller."""
