"""Configuration, logging, identity and clock helpers."""
