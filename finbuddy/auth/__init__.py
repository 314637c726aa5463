"""SessionStore: mock authentication and the persisted session."""
