"""Settings reconciliation and branch workflow helpers for GitHub Projects."""
