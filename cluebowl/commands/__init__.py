"""Chat command handling."""
