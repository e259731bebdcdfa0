"""Bounded-concurrency tag lookup: tasks, worker pool, collector, orchestrator."""
