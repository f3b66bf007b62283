"""Application layer: use cases, DTOs, and ports (Protocols) for infrastructure."""
