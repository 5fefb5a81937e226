"""Application DTOs: plain dataclasses passed between layers."""
