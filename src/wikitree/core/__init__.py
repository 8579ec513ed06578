"""Index engine: sandboxing, titles, the navigation tree and its repair."""
