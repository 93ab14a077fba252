"""HTTP request pipeline: gateway, observers, masking and rate-limit telemetry."""
