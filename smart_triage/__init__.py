"""Smart Triage service package."""
