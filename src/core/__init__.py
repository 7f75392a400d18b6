"""Core domain package for clanrelay.

Core contains broadcast classification, extraction, price enrichment, policy
filtering and formatting without any HTTP, SQLite or chat-platform code,
keeping the business logic portable.
"""
