"""FastAPI surface for the Tosan strategy."""
