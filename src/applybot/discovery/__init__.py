"""Job discovery: search-result extraction and blacklist filtering."""
