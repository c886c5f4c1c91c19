"""Flask request hooks: identity, logging, timing, headers, diagnostics."""
