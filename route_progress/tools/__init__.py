"""Developer tools for inspecting route progress behaviour."""
