"""Versioned JSON contracts for guidectl payloads."""
