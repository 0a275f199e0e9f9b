"""Network stacking, backprop trainer, genetic search and their metrics/logging."""
