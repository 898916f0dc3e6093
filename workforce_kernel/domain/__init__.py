"""Pure domain layer: records, value helpers, workflow types, codec. ZERO I/O."""
