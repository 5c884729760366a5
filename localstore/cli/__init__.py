"""Command-line interface for inspecting and editing a storage root."""
