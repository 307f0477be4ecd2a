# All application routes are versioned under v1/
