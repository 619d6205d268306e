"""Shape Dunk play-test harness: Gymnasium env, console display, evaluation CLI."""
