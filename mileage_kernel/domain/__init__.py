"""Pure domain layer: DTOs, settlement math, distance, periods, workflow."""
