"""Issue domain: enums, fix variants and models."""
