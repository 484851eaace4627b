"""Storage layer: connections, repositories and schema."""
