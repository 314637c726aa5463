"""RecordAggregator: in-memory expenses, budgets, goals and documents."""
