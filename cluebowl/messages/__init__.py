"""Inbound chat events and localized outbound text."""
