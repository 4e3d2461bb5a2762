"""Easy-apply wizard: field classification, answer resolution, and orchestration."""
