"""Core projection, navigation and notification logic for beadboard."""
