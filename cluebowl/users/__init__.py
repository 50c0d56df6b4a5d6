"""Chat participants the game talks to."""
