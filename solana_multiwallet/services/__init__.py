"""Services: balances, signing, execution and the orchestrator facade."""
