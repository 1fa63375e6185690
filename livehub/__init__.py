"""Live stream session registry, dashboard fan-out and OBS scene automation."""
