"""Dish evaluation engine: profiler, estimator, scorer, narrator."""
