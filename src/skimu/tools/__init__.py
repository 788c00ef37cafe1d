"""Development helpers: opt-in instrumentation used while debugging the poller."""
