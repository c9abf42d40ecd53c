"""Business services for commute matching."""
