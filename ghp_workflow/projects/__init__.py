"""GitHub project status category mapping."""
