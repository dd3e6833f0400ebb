"""ECB dataset loading, caching, refresh and conversion."""
