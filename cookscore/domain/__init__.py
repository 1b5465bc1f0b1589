"""Domain layer: pure evaluation logic, models and ports."""
