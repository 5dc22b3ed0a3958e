"""Time-driven and lifecycle systems: clock, schedules, cards."""
