"""Active workout session engine: plan adapter, countdown timer, session reducer and exit feedback flow."""
