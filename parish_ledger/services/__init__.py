"""Domain services: month policy, payment ledger, family directory and notifications."""
