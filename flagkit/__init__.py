"""Feature-flag data model: users, private-attribute scrubbing, segments, versioned items and parsing helpers."""

__version__ = "0.1.0"