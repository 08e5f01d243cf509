"""Reviews app: guest feedback on completed stays and the rating rollups it feeds."""
