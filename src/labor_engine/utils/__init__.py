"""Calendar and age classification helpers."""
