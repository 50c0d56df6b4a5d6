"""Group channels the game broadcasts to."""
