"""Actor/asset registries, bounding and error taxonomy for the harness."""
