"""Analytics aggregation pipeline: engine, presentation adapter, degradation policy."""
