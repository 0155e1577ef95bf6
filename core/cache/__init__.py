"""Cache helpers shared across apps."""
