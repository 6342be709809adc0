"""Engine settings, logging setup and calendar helpers."""
