"""Tasks module: persistence, dependency validation, derived status and service operations."""
